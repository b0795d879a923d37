"""
Transaction lifecycle errors.

These cover the stages between building a payload and observing its final
status: caller-input errors (fail fast), fee estimation, signing, and the
terminal outcomes reported by the receipt tracker.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from starkrail.errors.base import StarkrailError, ValidationError


class InvalidAddressError(ValidationError):
    """
    Raised when a value cannot be parsed as an address.

    Example:
        >>> raise InvalidAddressError("0xzz", reason="not a hex string")
    """

    def __init__(self, value: Any, *, reason: Optional[str] = None) -> None:
        message = f"Invalid address: {value!r}"
        if reason:
            message += f" ({reason})"
        super().__init__(message, field="address", details={"value": str(value)})
        self.code = "INVALID_ADDRESS"
        self.value = value
        self.reason = reason


class MissingCasmHashError(ValidationError):
    """Raised when a Sierra class is declared without its compiled class hash."""

    def __init__(self, class_hash: Optional[str] = None) -> None:
        super().__init__(
            "Declaring a Sierra class requires compiled_class_hash",
            field="compiled_class_hash",
            details={"class_hash": class_hash} if class_hash else None,
        )
        self.code = "MISSING_CASM_HASH"


class InvalidStateTransitionError(ValidationError):
    """Raised when an observed transaction status cannot follow the current one."""

    def __init__(self, current: str, observed: str, *, tx_hash: Optional[str] = None) -> None:
        super().__init__(
            f"Status {observed} cannot follow {current}",
            details={"current": current, "observed": observed},
        )
        self.code = "INVALID_STATE_TRANSITION"
        self.tx_hash = tx_hash
        self.current = current
        self.observed = observed


class EstimationRevertedError(StarkrailError):
    """
    Raised when the fee-estimation simulation reverts.

    Attributes:
        revert_reason: Revert reason reported by the node
        rpc_code: JSON-RPC error code of the failed estimate
    """

    def __init__(
        self,
        revert_reason: Optional[str],
        *,
        rpc_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        details = dict(details or {})
        details["revert_reason"] = revert_reason
        if rpc_code is not None:
            details["rpc_code"] = rpc_code
        super().__init__(
            f"Fee estimation reverted: {revert_reason or 'no reason given'}",
            code="ESTIMATION_REVERTED",
            details=details,
        )
        self.revert_reason = revert_reason
        self.rpc_code = rpc_code


class SigningFailureError(StarkrailError):
    """Raised when the signing capability fails; the original error is chained."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code="SIGNING_FAILURE")


class TransactionRejectedError(StarkrailError):
    """Raised when a transaction never made it into a block."""

    def __init__(self, tx_hash: str, *, reason: Optional[str] = None) -> None:
        super().__init__(
            f"Transaction rejected: {reason or 'no reason given'}",
            code="TX_REJECTED",
            tx_hash=tx_hash,
            details={"reason": reason} if reason else None,
        )
        self.reason = reason


class TransactionRevertedError(StarkrailError):
    """Raised when a transaction was included in a block but its execution reverted."""

    def __init__(self, tx_hash: str, *, revert_reason: Optional[str] = None) -> None:
        super().__init__(
            f"Transaction reverted: {revert_reason or 'no reason given'}",
            code="TX_REVERTED",
            tx_hash=tx_hash,
            details={"revert_reason": revert_reason} if revert_reason else None,
        )
        self.revert_reason = revert_reason


class ReceiptTimeoutError(StarkrailError):
    """Raised when a caller-supplied deadline passes before a terminal status."""

    def __init__(self, tx_hash: str, timeout: float, *, last_status: Optional[str] = None) -> None:
        details: Dict[str, Any] = {"timeout_seconds": timeout}
        if last_status:
            details["last_status"] = last_status
        super().__init__(
            f"No terminal status after {timeout}s",
            code="RECEIPT_TIMEOUT",
            tx_hash=tx_hash,
            details=details,
        )
        self.timeout = timeout
        self.last_status = last_status


class AddressRetrievalFailedError(StarkrailError):
    """Raised when a deployed address cannot be read back from a receipt."""

    def __init__(self, message: str, *, tx_hash: Optional[str] = None) -> None:
        super().__init__(message, code="ADDRESS_RETRIEVAL_FAILED", tx_hash=tx_hash)
