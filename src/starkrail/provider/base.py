"""
Provider capability.

Everything the engine asks of a chain endpoint. Each operation returns an
unsent Request; the caller decides when and how to send it.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, List, Sequence, Union

from starkrail.constants import BLOCK_TAG_LATEST
from starkrail.provider.batch import BatchRequest
from starkrail.provider.request import Request
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
from starkrail.types.transactions import Declare, DeployAccount, Invoke, TransactionPayload

BlockId = Union[str, int]


class Provider(ABC):
    """Read and submit operations against one chain endpoint."""

    @abstractmethod
    def chain_id(self) -> Request[Felt]:
        ...

    @abstractmethod
    def get_nonce(self, address: int, block_id: BlockId = BLOCK_TAG_LATEST) -> Request[Felt]:
        ...

    @abstractmethod
    def call(self, call: Call, block_id: BlockId = BLOCK_TAG_LATEST) -> Request[List[Felt]]:
        ...

    @abstractmethod
    def get_storage_at(
        self, address: int, key: int, block_id: BlockId = BLOCK_TAG_LATEST
    ) -> Request[Felt]:
        ...

    @abstractmethod
    def get_transaction_receipt(self, tx_hash: int) -> Request[TransactionReceipt]:
        ...

    @abstractmethod
    def get_transaction_status(self, tx_hash: int) -> Request[TransactionStatusResponse]:
        ...

    @abstractmethod
    def estimate_fee(
        self,
        payloads: Sequence[TransactionPayload],
        simulation_flags: Sequence[str] = (),
        block_id: BlockId = BLOCK_TAG_LATEST,
    ) -> Request[List[FeeEstimate]]:
        ...

    @abstractmethod
    def invoke(self, payload: Invoke) -> Request[InvokeResponse]:
        ...

    @abstractmethod
    def declare(self, payload: Declare) -> Request[DeclareResponse]:
        ...

    @abstractmethod
    def deploy_account(self, payload: DeployAccount) -> Request[DeployAccountResponse]:
        ...

    @abstractmethod
    def batch_requests(self, *requests: Request[Any]) -> BatchRequest:
        ...
