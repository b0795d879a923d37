"""
starkrail exception hierarchy.

    StarkrailError
    ├── ValidationError
    │   ├── InvalidAddressError
    │   ├── MissingCasmHashError
    │   └── InvalidStateTransitionError
    ├── NetworkError
    ├── RpcError
    ├── DecodeError
    ├── EstimationRevertedError
    ├── SigningFailureError
    ├── TransactionRejectedError
    ├── TransactionRevertedError
    ├── ReceiptTimeoutError
    └── AddressRetrievalFailedError
"""

from starkrail.errors.base import StarkrailError, ValidationError
from starkrail.errors.rpc import DecodeError, NetworkError, RpcError
from starkrail.errors.transaction import (
    AddressRetrievalFailedError,
    EstimationRevertedError,
    InvalidAddressError,
    InvalidStateTransitionError,
    MissingCasmHashError,
    ReceiptTimeoutError,
    SigningFailureError,
    TransactionRejectedError,
    TransactionRevertedError,
)

__all__ = [
    "StarkrailError",
    "ValidationError",
    "InvalidAddressError",
    "MissingCasmHashError",
    "InvalidStateTransitionError",
    "NetworkError",
    "RpcError",
    "DecodeError",
    "EstimationRevertedError",
    "SigningFailureError",
    "TransactionRejectedError",
    "TransactionRevertedError",
    "ReceiptTimeoutError",
    "AddressRetrievalFailedError",
]
