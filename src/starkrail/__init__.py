"""
starkrail - client-side transaction lifecycle engine for Starknet.

Builds, fee-estimates, signs, submits and confirms declare, deploy-account
and invoke transactions, derives Universal Deployer addresses locally, and
batches JSON-RPC requests into one round trip.

Quick Start:
    >>> from starkrail import Account, Call, JsonRpcProvider, ReceiptTracker
    >>> from starkrail.crypto.stark import StarkCurveSigner
    >>>
    >>> async def main():
    ...     provider = JsonRpcProvider.from_url("http://127.0.0.1:5050/rpc")
    ...     chain_id = await provider.chain_id().send()
    ...     account = Account(address, StarkCurveSigner(private_key), provider, chain_id)
    ...     call = Call.from_entry_point(token, "transfer", [recipient, 100, 0])
    ...     request = await account.execute([call])
    ...     response = await request.send()
    ...     receipt = await ReceiptTracker(provider, response.transaction_hash).wait(timeout=120)

Modules:
- `account`: Account, TransactionBuilder, FeeEstimator
- `deployer`: Universal Deployer deployments and address derivation
- `tracker`: ReceiptTracker status state machine
- `provider`: JSON-RPC provider, requests and batches
- `hash`: transaction hashes and contract addresses, SNIP-12 typed data
- `crypto`: hashing and signing capabilities
- `errors`: exception hierarchy
"""

from starkrail.version import __version__, __version_info__

# Value types
from starkrail.types import (
    Call,
    FeeEstimate,
    Felt,
    ResourceBounds,
    ResourceBoundsMapping,
    TrackedStatus,
    TransactionReceipt,
    Uint256,
    parse_address,
)

# Configuration
from starkrail.config import (
    NETWORKS,
    FeeConfig,
    Network,
    NetworkConfig,
    TrackerConfig,
    get_network_config,
)

# Chain access
from starkrail.provider import (
    BatchRequest,
    HttpService,
    HttpxService,
    JsonRpcProvider,
    Provider,
    Request,
    RequestResult,
)

# Lifecycle
from starkrail.account import (
    Account,
    ExecutionParams,
    ExecutionParamsV3,
    FeeEstimator,
    TransactionBuilder,
)
from starkrail.deployer import Deployer, DeployResult
from starkrail.tracker import ReceiptTracker

# Off-chain messages
from starkrail.hash.typed_data import TypedData

# Errors
from starkrail.errors import (
    AddressRetrievalFailedError,
    DecodeError,
    EstimationRevertedError,
    InvalidAddressError,
    InvalidStateTransitionError,
    MissingCasmHashError,
    NetworkError,
    ReceiptTimeoutError,
    RpcError,
    SigningFailureError,
    StarkrailError,
    TransactionRejectedError,
    TransactionRevertedError,
    ValidationError,
)

# Logging
from starkrail.utils.logging import configure_logging, get_logger

__all__ = [
    "__version__",
    "__version_info__",
    # Value types
    "Call",
    "FeeEstimate",
    "Felt",
    "ResourceBounds",
    "ResourceBoundsMapping",
    "TrackedStatus",
    "TransactionReceipt",
    "Uint256",
    "parse_address",
    # Configuration
    "NETWORKS",
    "FeeConfig",
    "Network",
    "NetworkConfig",
    "TrackerConfig",
    "get_network_config",
    # Chain access
    "BatchRequest",
    "HttpService",
    "HttpxService",
    "JsonRpcProvider",
    "Provider",
    "Request",
    "RequestResult",
    # Lifecycle
    "Account",
    "ExecutionParams",
    "ExecutionParamsV3",
    "FeeEstimator",
    "TransactionBuilder",
    "Deployer",
    "DeployResult",
    "ReceiptTracker",
    # Off-chain messages
    "TypedData",
    # Errors
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
    # Logging
    "configure_logging",
    "get_logger",
]
