"""
Starknet JSON-RPC provider.
"""

from __future__ import annotations

from typing import Any, Dict, List, Sequence, Union

from starkrail.config import NetworkConfig
from starkrail.constants import BLOCK_TAG_LATEST
from starkrail.errors import ValidationError
from starkrail.provider.base import BlockId, Provider
from starkrail.provider.batch import BatchRequest
from starkrail.provider.request import Request
from starkrail.provider.service import HttpService, HttpxService
from starkrail.types.call import Call
from starkrail.types.felt import Felt
from starkrail.types.receipt import (
    DeclareResponse,
    DeployAccountResponse,
    InvokeResponse,
    TransactionReceipt,
    TransactionStatusResponse,
)
from starkrail.types.resources import FeeEstimate
from starkrail.types.transactions import (
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
)
from starkrail.utils.logging import get_logger

_logger = get_logger(__name__)


def block_id_param(block_id: BlockId) -> Union[str, Dict[str, Any]]:
    """Encode a block tag, number or ``0x`` hash as a JSON-RPC ``block_id``."""
    if isinstance(block_id, bool):
        raise ValidationError("Block id cannot be a bool", field="block_id")
    if isinstance(block_id, int):
        return {"block_number": int(block_id)}
    if block_id.lower().startswith("0x"):
        return {"block_hash": Felt(block_id).hex()}
    return block_id


def _felt_list(result: Any) -> List[Felt]:
    if not isinstance(result, list):
        raise TypeError(f"expected a list, got {type(result).__name__}")
    return [Felt(v) for v in result]


def _fee_estimates(result: Any) -> List[FeeEstimate]:
    if not isinstance(result, list):
        raise TypeError(f"expected a list, got {type(result).__name__}")
    return [FeeEstimate.model_validate(item) for item in result]


class JsonRpcProvider(Provider):
    """
    Provider speaking Starknet JSON-RPC over an HttpService.

    Example:
        >>> provider = JsonRpcProvider.from_network(get_network_config(Network.DEVNET))
        >>> chain = await provider.chain_id().send()
    """

    def __init__(self, service: HttpService) -> None:
        self._service = service

    @classmethod
    def from_url(cls, url: str, **kwargs: Any) -> "JsonRpcProvider":
        return cls(HttpxService(url, **kwargs))

    @classmethod
    def from_network(cls, network: NetworkConfig, **kwargs: Any) -> "JsonRpcProvider":
        return cls.from_url(network.rpc_url, **kwargs)

    @property
    def service(self) -> HttpService:
        return self._service

    def _request(self, method: str, params: Dict[str, Any], decoder) -> Request[Any]:
        return Request(self._service, method, params, decoder)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def chain_id(self) -> Request[Felt]:
        return self._request("starknet_chainId", {}, Felt)

    def get_nonce(self, address: int, block_id: BlockId = BLOCK_TAG_LATEST) -> Request[Felt]:
        return self._request(
            "starknet_getNonce",
            {"block_id": block_id_param(block_id), "contract_address": Felt(address).hex()},
            Felt,
        )

    def call(self, call: Call, block_id: BlockId = BLOCK_TAG_LATEST) -> Request[List[Felt]]:
        return self._request(
            "starknet_call",
            {"request": call.to_rpc(), "block_id": block_id_param(block_id)},
            _felt_list,
        )

    def get_storage_at(
        self, address: int, key: int, block_id: BlockId = BLOCK_TAG_LATEST
    ) -> Request[Felt]:
        return self._request(
            "starknet_getStorageAt",
            {
                "contract_address": Felt(address).hex(),
                "key": Felt(key).hex(),
                "block_id": block_id_param(block_id),
            },
            Felt,
        )

    def get_transaction_receipt(self, tx_hash: int) -> Request[TransactionReceipt]:
        return self._request(
            "starknet_getTransactionReceipt",
            {"transaction_hash": Felt(tx_hash).hex()},
            TransactionReceipt.from_rpc,
        )

    def get_transaction_status(self, tx_hash: int) -> Request[TransactionStatusResponse]:
        return self._request(
            "starknet_getTransactionStatus",
            {"transaction_hash": Felt(tx_hash).hex()},
            TransactionStatusResponse.from_rpc,
        )

    def estimate_fee(
        self,
        payloads: Sequence[TransactionPayload],
        simulation_flags: Sequence[str] = (),
        block_id: BlockId = BLOCK_TAG_LATEST,
    ) -> Request[List[FeeEstimate]]:
        non_query = [type(p).__name__ for p in payloads if not p.query]
        if non_query:
            raise ValidationError(
                "Fee estimation only accepts query payloads",
                field="payloads",
                details={"non_query": non_query},
            )
        return self._request(
            "starknet_estimateFee",
            {
                "request": [p.to_rpc() for p in payloads],
                "simulation_flags": list(simulation_flags),
                "block_id": block_id_param(block_id),
            },
            _fee_estimates,
        )

    # ------------------------------------------------------------------
    # Submissions
    # ------------------------------------------------------------------

    def invoke(self, payload: Invoke) -> Request[InvokeResponse]:
        _check_submittable(payload, (InvokeV1, InvokeV3))
        return self._request(
            "starknet_addInvokeTransaction",
            {"invoke_transaction": payload.to_rpc()},
            InvokeResponse.from_rpc,
        )

    def declare(self, payload: Declare) -> Request[DeclareResponse]:
        _check_submittable(payload, (DeclareV1, DeclareV2, DeclareV3))
        return self._request(
            "starknet_addDeclareTransaction",
            {"declare_transaction": payload.to_rpc()},
            DeclareResponse.from_rpc,
        )

    def deploy_account(self, payload: DeployAccount) -> Request[DeployAccountResponse]:
        _check_submittable(payload, (DeployAccountV1, DeployAccountV3))
        return self._request(
            "starknet_addDeployAccountTransaction",
            {"deploy_account_transaction": payload.to_rpc()},
            DeployAccountResponse.from_rpc,
        )

    def batch_requests(self, *requests: Request[Any]) -> BatchRequest:
        return BatchRequest(self._service, requests)


def _check_submittable(payload: TransactionPayload, kinds: tuple) -> None:
    if not isinstance(payload, kinds):
        raise ValidationError(
            f"{type(payload).__name__} cannot be submitted here", field="payload"
        )
    if payload.query:
        raise ValidationError("Query payloads cannot be submitted", field="payload")
    if not payload.signature:
        raise ValidationError("Payload is not signed", field="signature")
