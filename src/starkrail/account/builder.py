"""
Transaction builder.

Pure construction of unsigned payloads. The payload version follows from
the execution parameters: ``ExecutionParams`` (a scalar ``max_fee``)
builds v1/v2 payloads, ``ExecutionParamsV3`` (per-resource bounds and a
tip) builds v3 payloads.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Sequence, Union

from starkrail.crypto.base import StarkHasher
from starkrail.errors import MissingCasmHashError, ValidationError
from starkrail.hash.address import compute_contract_address
from starkrail.types.call import Call, encode_calldata
from starkrail.types.contract import LegacyContractClass, SierraContractClass
from starkrail.types.felt import Felt, FeltLike, parse_address
from starkrail.types.resources import ResourceBoundsMapping
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
)

ContractClass = Union[LegacyContractClass, SierraContractClass]


@dataclass(frozen=True)
class ExecutionParams:
    """Nonce and fee for v1/v2 transactions."""

    nonce: int
    max_fee: int

    def __post_init__(self) -> None:
        if self.max_fee < 0:
            raise ValidationError("max_fee cannot be negative", field="max_fee")


@dataclass(frozen=True)
class ExecutionParamsV3:
    """Nonce, resource bounds and tip for v3 transactions."""

    nonce: int
    resource_bounds: ResourceBoundsMapping = field(default_factory=ResourceBoundsMapping)
    tip: int = 0

    def __post_init__(self) -> None:
        if self.tip < 0:
            raise ValidationError("tip cannot be negative", field="tip")


AnyExecutionParams = Union[ExecutionParams, ExecutionParamsV3]


class TransactionBuilder:
    """
    Builds unsigned payloads for one sender.

    Example:
        >>> builder = TransactionBuilder(account_address, cairo_version=1)
        >>> payload = builder.invoke([call], ExecutionParams(nonce=0, max_fee=1500))
    """

    def __init__(self, sender_address: FeltLike, *, cairo_version: int = 1) -> None:
        if cairo_version not in (0, 1):
            raise ValidationError(f"Unsupported Cairo version {cairo_version}", field="cairo_version")
        self.sender_address = parse_address(sender_address)
        self.cairo_version = cairo_version

    def invoke(
        self,
        calls: Sequence[Call],
        params: AnyExecutionParams,
        *,
        query: bool = False,
    ) -> Invoke:
        """Invoke v1 or v3 executing ``calls`` in order."""
        if not calls:
            raise ValidationError("An invoke needs at least one call", field="calls")
        calldata = tuple(encode_calldata(calls, self.cairo_version))
        if isinstance(params, ExecutionParamsV3):
            return InvokeV3(
                sender_address=self.sender_address,
                calldata=calldata,
                nonce=Felt(params.nonce),
                resource_bounds=params.resource_bounds,
                tip=params.tip,
                query=query,
            )
        return InvokeV1(
            sender_address=self.sender_address,
            calldata=calldata,
            max_fee=params.max_fee,
            nonce=Felt(params.nonce),
            query=query,
        )

    def declare(
        self,
        contract_class: ContractClass,
        params: AnyExecutionParams,
        *,
        query: bool = False,
    ) -> Declare:
        """
        Declare a legacy class (v1) or a Sierra class (v2/v3).

        Raises:
            MissingCasmHashError: A Sierra class has no compiled class hash
            ValidationError: A legacy class with v3 parameters
        """
        if isinstance(contract_class, LegacyContractClass):
            if isinstance(params, ExecutionParamsV3):
                raise ValidationError("Legacy classes can only be declared with v1", field="params")
            return DeclareV1(
                sender_address=self.sender_address,
                contract_class=contract_class,
                max_fee=params.max_fee,
                nonce=Felt(params.nonce),
                query=query,
            )

        if contract_class.compiled_class_hash is None:
            raise MissingCasmHashError(contract_class.class_hash.hex())
        if isinstance(params, ExecutionParamsV3):
            return DeclareV3(
                sender_address=self.sender_address,
                contract_class=contract_class,
                compiled_class_hash=contract_class.compiled_class_hash,
                nonce=Felt(params.nonce),
                resource_bounds=params.resource_bounds,
                tip=params.tip,
                query=query,
            )
        return DeclareV2(
            sender_address=self.sender_address,
            contract_class=contract_class,
            compiled_class_hash=contract_class.compiled_class_hash,
            max_fee=params.max_fee,
            nonce=Felt(params.nonce),
            query=query,
        )


def build_deploy_account(
    hasher: StarkHasher,
    class_hash: FeltLike,
    constructor_calldata: Iterable[FeltLike],
    salt: FeltLike,
    params: AnyExecutionParams,
    *,
    query: bool = False,
) -> DeployAccount:
    """Deploy-account payload; the account address is derived with deployer 0."""
    class_hash = Felt(class_hash)
    salt = Felt(salt)
    calldata = tuple(Felt(v) for v in constructor_calldata)
    address = compute_contract_address(hasher, class_hash, salt, calldata, 0)
    if isinstance(params, ExecutionParamsV3):
        return DeployAccountV3(
            contract_address=address,
            class_hash=class_hash,
            contract_address_salt=salt,
            constructor_calldata=calldata,
            nonce=Felt(params.nonce),
            resource_bounds=params.resource_bounds,
            tip=params.tip,
            query=query,
        )
    return DeployAccountV1(
        contract_address=address,
        class_hash=class_hash,
        contract_address_salt=salt,
        constructor_calldata=calldata,
        max_fee=params.max_fee,
        nonce=Felt(params.nonce),
        query=query,
    )
