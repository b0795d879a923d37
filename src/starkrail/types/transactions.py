"""
Account transaction payloads.

A payload is one of seven frozen dataclasses, one per transaction kind and
version::

    Declare:        DeclareV1 | DeclareV2 | DeclareV3
    Deploy account: DeployAccountV1 | DeployAccountV3
    Invoke:         InvokeV1 | InvokeV3

Each payload holds every field that enters its transaction hash, a
``query`` flag selecting the simulation-only version tag, and the
signature attached by the account. Payloads are values: signing returns
a new payload.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any, ClassVar, Dict, Sequence, Tuple, Union

from starkrail.constants import QUERY_VERSION_BASE
from starkrail.types.contract import LegacyContractClass, SierraContractClass
from starkrail.types.felt import Felt
from starkrail.types.resources import ResourceBoundsMapping


class TransactionType(str, Enum):
    INVOKE = "INVOKE"
    DECLARE = "DECLARE"
    DEPLOY_ACCOUNT = "DEPLOY_ACCOUNT"


class DataAvailabilityMode(IntEnum):
    L1 = 0
    L2 = 1


@dataclass(frozen=True)
class _Payload:
    kind: ClassVar[TransactionType]
    version: ClassVar[int]

    @property
    def wire_version(self) -> int:
        """Version as hashed and sent; query payloads add ``2**128``."""
        return self.version + QUERY_VERSION_BASE if self.query else self.version  # type: ignore[attr-defined]

    def with_signature(self, signature: Sequence[int]):
        return dataclasses.replace(self, signature=tuple(Felt(v) for v in signature))

    def as_query(self, query: bool = True):
        return dataclasses.replace(self, query=query, signature=())

    def _common_rpc(self) -> Dict[str, Any]:
        return {
            "type": self.kind.value,
            "version": hex(self.wire_version),
            "signature": [v.hex() for v in self.signature],  # type: ignore[attr-defined]
            "nonce": self.nonce.hex(),  # type: ignore[attr-defined]
        }


@dataclass(frozen=True, kw_only=True)
class _V3Fields:
    resource_bounds: ResourceBoundsMapping = field(default_factory=ResourceBoundsMapping)
    tip: int = 0
    paymaster_data: Tuple[Felt, ...] = ()
    nonce_data_availability_mode: DataAvailabilityMode = DataAvailabilityMode.L1
    fee_data_availability_mode: DataAvailabilityMode = DataAvailabilityMode.L1

    def _v3_rpc(self) -> Dict[str, Any]:
        return {
            "resource_bounds": self.resource_bounds.to_rpc(),
            "tip": hex(self.tip),
            "paymaster_data": [v.hex() for v in self.paymaster_data],
            "nonce_data_availability_mode": self.nonce_data_availability_mode.name,
            "fee_data_availability_mode": self.fee_data_availability_mode.name,
        }


# ============================================================================
# Invoke
# ============================================================================

@dataclass(frozen=True)
class InvokeV1(_Payload):
    kind: ClassVar[TransactionType] = TransactionType.INVOKE
    version: ClassVar[int] = 1

    sender_address: Felt
    calldata: Tuple[Felt, ...]
    max_fee: int
    nonce: Felt
    signature: Tuple[Felt, ...] = ()
    query: bool = False

    def to_rpc(self) -> Dict[str, Any]:
        return {
            **self._common_rpc(),
            "sender_address": self.sender_address.hex(),
            "calldata": [v.hex() for v in self.calldata],
            "max_fee": hex(self.max_fee),
        }


@dataclass(frozen=True)
class InvokeV3(_V3Fields, _Payload):
    kind: ClassVar[TransactionType] = TransactionType.INVOKE
    version: ClassVar[int] = 3

    sender_address: Felt
    calldata: Tuple[Felt, ...]
    nonce: Felt
    account_deployment_data: Tuple[Felt, ...] = ()
    signature: Tuple[Felt, ...] = ()
    query: bool = False

    def to_rpc(self) -> Dict[str, Any]:
        return {
            **self._common_rpc(),
            **self._v3_rpc(),
            "sender_address": self.sender_address.hex(),
            "calldata": [v.hex() for v in self.calldata],
            "account_deployment_data": [v.hex() for v in self.account_deployment_data],
        }


# ============================================================================
# Declare
# ============================================================================

@dataclass(frozen=True)
class DeclareV1(_Payload):
    kind: ClassVar[TransactionType] = TransactionType.DECLARE
    version: ClassVar[int] = 1

    sender_address: Felt
    contract_class: LegacyContractClass
    max_fee: int
    nonce: Felt
    signature: Tuple[Felt, ...] = ()
    query: bool = False

    @property
    def class_hash(self) -> Felt:
        return self.contract_class.class_hash

    def to_rpc(self) -> Dict[str, Any]:
        return {
            **self._common_rpc(),
            "sender_address": self.sender_address.hex(),
            "max_fee": hex(self.max_fee),
            "contract_class": self.contract_class.to_rpc(),
        }


@dataclass(frozen=True)
class DeclareV2(_Payload):
    kind: ClassVar[TransactionType] = TransactionType.DECLARE
    version: ClassVar[int] = 2

    sender_address: Felt
    contract_class: SierraContractClass
    compiled_class_hash: Felt
    max_fee: int
    nonce: Felt
    signature: Tuple[Felt, ...] = ()
    query: bool = False

    @property
    def class_hash(self) -> Felt:
        return self.contract_class.class_hash

    def to_rpc(self) -> Dict[str, Any]:
        return {
            **self._common_rpc(),
            "sender_address": self.sender_address.hex(),
            "max_fee": hex(self.max_fee),
            "compiled_class_hash": self.compiled_class_hash.hex(),
            "contract_class": self.contract_class.to_rpc(),
        }


@dataclass(frozen=True)
class DeclareV3(_V3Fields, _Payload):
    kind: ClassVar[TransactionType] = TransactionType.DECLARE
    version: ClassVar[int] = 3

    sender_address: Felt
    contract_class: SierraContractClass
    compiled_class_hash: Felt
    nonce: Felt
    account_deployment_data: Tuple[Felt, ...] = ()
    signature: Tuple[Felt, ...] = ()
    query: bool = False

    @property
    def class_hash(self) -> Felt:
        return self.contract_class.class_hash

    def to_rpc(self) -> Dict[str, Any]:
        return {
            **self._common_rpc(),
            **self._v3_rpc(),
            "sender_address": self.sender_address.hex(),
            "compiled_class_hash": self.compiled_class_hash.hex(),
            "contract_class": self.contract_class.to_rpc(),
            "account_deployment_data": [v.hex() for v in self.account_deployment_data],
        }


# ============================================================================
# Deploy account
# ============================================================================

@dataclass(frozen=True)
class DeployAccountV1(_Payload):
    kind: ClassVar[TransactionType] = TransactionType.DEPLOY_ACCOUNT
    version: ClassVar[int] = 1

    contract_address: Felt
    class_hash: Felt
    contract_address_salt: Felt
    constructor_calldata: Tuple[Felt, ...]
    max_fee: int
    nonce: Felt
    signature: Tuple[Felt, ...] = ()
    query: bool = False

    def to_rpc(self) -> Dict[str, Any]:
        return {
            **self._common_rpc(),
            "class_hash": self.class_hash.hex(),
            "contract_address_salt": self.contract_address_salt.hex(),
            "constructor_calldata": [v.hex() for v in self.constructor_calldata],
            "max_fee": hex(self.max_fee),
        }


@dataclass(frozen=True)
class DeployAccountV3(_V3Fields, _Payload):
    kind: ClassVar[TransactionType] = TransactionType.DEPLOY_ACCOUNT
    version: ClassVar[int] = 3

    contract_address: Felt
    class_hash: Felt
    contract_address_salt: Felt
    constructor_calldata: Tuple[Felt, ...]
    nonce: Felt
    signature: Tuple[Felt, ...] = ()
    query: bool = False

    def to_rpc(self) -> Dict[str, Any]:
        return {
            **self._common_rpc(),
            **self._v3_rpc(),
            "class_hash": self.class_hash.hex(),
            "contract_address_salt": self.contract_address_salt.hex(),
            "constructor_calldata": [v.hex() for v in self.constructor_calldata],
        }


Invoke = Union[InvokeV1, InvokeV3]
Declare = Union[DeclareV1, DeclareV2, DeclareV3]
DeployAccount = Union[DeployAccountV1, DeployAccountV3]
TransactionPayload = Union[
    InvokeV1, InvokeV3, DeclareV1, DeclareV2, DeclareV3, DeployAccountV1, DeployAccountV3
]
