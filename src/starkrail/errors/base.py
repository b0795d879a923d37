"""
Base exception class for starkrail.

Every engine error inherits from StarkrailError, which carries a
machine-readable code, the related transaction hash when there is one,
and a dictionary of additional context.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class StarkrailError(Exception):
    """
    Base exception for all starkrail errors.

    Attributes:
        message: What went wrong, for humans
        code: Stable identifier callers can branch on, such as "RPC_ERROR"
        tx_hash: Hex hash of the transaction involved, when known
        details: Extra context (node codes, offending values, URLs)

    Example:
        >>> try:
        ...     await tracker.wait()
        ... except StarkrailError as exc:
        ...     report(exc.to_dict())
    """

    def __init__(
        self,
        message: str,
        *,
        code: str = "STARKRAIL_ERROR",
        tx_hash: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.tx_hash = tx_hash
        self.details = dict(details or {})

    def __str__(self) -> str:
        parts = [f"[{self.code}] {self.message}"]
        if self.tx_hash:
            parts.append(f"(tx: {self.tx_hash[:10]}...)")
        return " ".join(parts)

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"code={self.code!r}, "
            f"tx_hash={self.tx_hash!r}, "
            f"details={self.details!r})"
        )

    def to_dict(self) -> Dict[str, Any]:
        """JSON-serializable form, keyed by error class name and code."""
        return {
            "error": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "tx_hash": self.tx_hash,
            "details": self.details,
        }


class ValidationError(StarkrailError):
    """Raised when caller input fails validation. Never retried."""

    def __init__(
        self,
        message: str,
        *,
        field: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        details = dict(details or {})
        if field:
            details["field"] = field
        super().__init__(message, code="VALIDATION_ERROR", details=details)
        self.field = field
