"""
Transport and JSON-RPC errors.

NetworkError means the request never produced a JSON-RPC answer and may be
retried by the caller. RpcError means the node answered with a structured
rejection; it is not retried. DecodeError means an answer arrived but did
not have the shape the request declared.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from starkrail.errors.base import StarkrailError

# Starknet JSON-RPC error codes the engine reacts to.
CONTRACT_ERROR = 40
TRANSACTION_EXECUTION_ERROR = 41
TRANSACTION_HASH_NOT_FOUND = 29
INVALID_TRANSACTION_NONCE = 52
METHOD_NOT_FOUND = -32601


class NetworkError(StarkrailError):
    """
    Raised when the transport fails (connection, timeout, non-2xx status).

    Example:
        >>> raise NetworkError("Connection refused", url="http://localhost:5050")
    """

    def __init__(
        self,
        message: str,
        *,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        details = dict(details or {})
        if url:
            details["url"] = url
        if status_code is not None:
            details["status_code"] = status_code
        super().__init__(message, code="NETWORK_ERROR", details=details)
        self.url = url
        self.status_code = status_code


class RpcError(StarkrailError):
    """
    Raised when the node rejects a call with a JSON-RPC error object.

    Attributes:
        rpc_code: JSON-RPC error code reported by the node
        rpc_message: Error message reported by the node
        data: Optional ``data`` member of the error object
    """

    def __init__(
        self,
        rpc_code: int,
        rpc_message: str,
        *,
        data: Any = None,
        method: Optional[str] = None,
    ) -> None:
        details: Dict[str, Any] = {"rpc_code": rpc_code}
        if data is not None:
            details["data"] = data
        if method:
            details["method"] = method
        super().__init__(
            f"{rpc_message} (code {rpc_code})",
            code="RPC_ERROR",
            details=details,
        )
        self.rpc_code = rpc_code
        self.rpc_message = rpc_message
        self.data = data
        self.method = method

    @property
    def revert_reason(self) -> Optional[str]:
        """Revert reason carried by contract/execution errors, if any."""
        data = self.data
        if isinstance(data, dict):
            for key in ("revert_error", "execution_error"):
                if key in data:
                    return str(data[key])
            return None
        if isinstance(data, str):
            return data
        return None


class DecodeError(StarkrailError):
    """Raised when a response does not match the shape its request declared."""

    def __init__(
        self,
        message: str,
        *,
        method: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        details = dict(details or {})
        if method:
            details["method"] = method
        super().__init__(message, code="DECODE_ERROR", details=details)
        self.method = method
