"""
starkrail value types.
"""

from starkrail.types.felt import Felt, FeltLike, Uint256, parse_address, to_felts
from starkrail.types.call import (
    Call,
    decode_cairo0_calldata,
    decode_cairo1_calldata,
    decode_calldata,
    encode_cairo0_calldata,
    encode_cairo1_calldata,
    encode_calldata,
)
from starkrail.types.resources import (
    FeeEstimate,
    PriceUnit,
    ResourceBounds,
    ResourceBoundsMapping,
)
from starkrail.types.contract import LegacyContractClass, SierraContractClass
from starkrail.types.transactions import (
    DataAvailabilityMode,
    Declare,
    DeclareV1,
    DeclareV2,
    DeclareV3,
    DeployAccount,
    DeployAccountV1,
    DeployAccountV3,
    Invoke,
    InvokeV1,
    InvokeV3,
    TransactionPayload,
    TransactionType,
)
from starkrail.types.receipt import (
    DeclareResponse,
    DeployAccountResponse,
    Event,
    ExecutionStatus,
    FinalityStatus,
    InvokeResponse,
    TrackedStatus,
    TransactionReceipt,
    TransactionStatusResponse,
)

__all__ = [
    # Field elements
    "Felt",
    "FeltLike",
    "Uint256",
    "parse_address",
    "to_felts",
    # Calls
    "Call",
    "encode_calldata",
    "decode_calldata",
    "encode_cairo0_calldata",
    "decode_cairo0_calldata",
    "encode_cairo1_calldata",
    "decode_cairo1_calldata",
    # Fees
    "FeeEstimate",
    "PriceUnit",
    "ResourceBounds",
    "ResourceBoundsMapping",
    # Contract classes
    "LegacyContractClass",
    "SierraContractClass",
    # Payloads
    "TransactionType",
    "DataAvailabilityMode",
    "InvokeV1",
    "InvokeV3",
    "DeclareV1",
    "DeclareV2",
    "DeclareV3",
    "DeployAccountV1",
    "DeployAccountV3",
    "Invoke",
    "Declare",
    "DeployAccount",
    "TransactionPayload",
    # Receipts
    "FinalityStatus",
    "ExecutionStatus",
    "TrackedStatus",
    "Event",
    "TransactionReceipt",
    "TransactionStatusResponse",
    "InvokeResponse",
    "DeclareResponse",
    "DeployAccountResponse",
]
