"""
Transaction hashes.

Legacy versions (v1, v2) commit to their fields with a Pedersen chain::

    h(prefix, version, address, 0, h(data), max_fee, chain_id, nonce[, extra])

v3 transactions use Poseidon over the packed fee fields (tip, then the
L1_GAS, L2_GAS and L1_DATA bounds in that order) and a per-kind tail.
The query variant of a payload hashes its offset version, so a query
signature can never authorise the real transaction.
"""

from __future__ import annotations

from typing import List

from starkrail.constants import (
    L1_DATA_GAS_NAME,
    L1_GAS_NAME,
    L2_GAS_NAME,
    TX_PREFIX_DECLARE,
    TX_PREFIX_DEPLOY_ACCOUNT,
    TX_PREFIX_INVOKE,
)
from starkrail.crypto.base import StarkHasher
from starkrail.errors import ValidationError
from starkrail.types.felt import Felt
from starkrail.types.resources import ResourceBounds
from starkrail.types.transactions import (
    DataAvailabilityMode,
    DeclareV1,
    DeclareV2,
    DeclareV3,
    DeployAccountV1,
    DeployAccountV3,
    InvokeV1,
    InvokeV3,
    TransactionPayload,
)


def encode_resource_bound(name: int, bounds: ResourceBounds) -> int:
    """Pack ``name | max_amount (64 bits) | max_price_per_unit (128 bits)``."""
    return (name << 192) + (bounds.max_amount << 128) + bounds.max_price_per_unit


def encode_data_availability_modes(
    nonce_mode: DataAvailabilityMode, fee_mode: DataAvailabilityMode
) -> int:
    return (int(nonce_mode) << 32) + int(fee_mode)


def compute_transaction_hash(
    payload: TransactionPayload, chain_id: int, hasher: StarkHasher
) -> Felt:
    """
    Compute the hash an account signs for ``payload``.

    Args:
        payload: Any transaction payload, query or not
        chain_id: Chain identifier the transaction is bound to
        hasher: Hash capability

    Returns:
        Transaction hash
    """
    if isinstance(payload, InvokeV1):
        return _legacy_hash(
            hasher,
            TX_PREFIX_INVOKE,
            payload.wire_version,
            payload.sender_address,
            hasher.pedersen_on_elements(payload.calldata),
            payload.max_fee,
            chain_id,
            payload.nonce,
        )
    if isinstance(payload, DeclareV1):
        return _legacy_hash(
            hasher,
            TX_PREFIX_DECLARE,
            payload.wire_version,
            payload.sender_address,
            hasher.pedersen_on_elements([payload.class_hash]),
            payload.max_fee,
            chain_id,
            payload.nonce,
        )
    if isinstance(payload, DeclareV2):
        return _legacy_hash(
            hasher,
            TX_PREFIX_DECLARE,
            payload.wire_version,
            payload.sender_address,
            hasher.pedersen_on_elements([payload.class_hash]),
            payload.max_fee,
            chain_id,
            payload.nonce,
            payload.compiled_class_hash,
        )
    if isinstance(payload, DeployAccountV1):
        return _legacy_hash(
            hasher,
            TX_PREFIX_DEPLOY_ACCOUNT,
            payload.wire_version,
            payload.contract_address,
            hasher.pedersen_on_elements(
                [payload.class_hash, payload.contract_address_salt, *payload.constructor_calldata]
            ),
            payload.max_fee,
            chain_id,
            payload.nonce,
        )
    if isinstance(payload, InvokeV3):
        common = _v3_common(hasher, TX_PREFIX_INVOKE, payload, payload.sender_address, chain_id)
        return hasher.poseidon_many(
            common
            + [
                hasher.poseidon_many(payload.account_deployment_data),
                hasher.poseidon_many(payload.calldata),
            ]
        )
    if isinstance(payload, DeclareV3):
        common = _v3_common(hasher, TX_PREFIX_DECLARE, payload, payload.sender_address, chain_id)
        return hasher.poseidon_many(
            common
            + [
                hasher.poseidon_many(payload.account_deployment_data),
                payload.class_hash,
                payload.compiled_class_hash,
            ]
        )
    if isinstance(payload, DeployAccountV3):
        common = _v3_common(
            hasher, TX_PREFIX_DEPLOY_ACCOUNT, payload, payload.contract_address, chain_id
        )
        return hasher.poseidon_many(
            common
            + [
                hasher.poseidon_many(payload.constructor_calldata),
                payload.class_hash,
                payload.contract_address_salt,
            ]
        )
    raise ValidationError(f"Unsupported payload type {type(payload).__name__}", field="payload")


def _legacy_hash(
    hasher: StarkHasher,
    prefix: int,
    version: int,
    address: int,
    data_hash: int,
    max_fee: int,
    chain_id: int,
    nonce: int,
    *extra: int,
) -> Felt:
    return hasher.pedersen_on_elements(
        [prefix, version, address, 0, data_hash, max_fee, chain_id, nonce, *extra]
    )


def _v3_common(hasher: StarkHasher, prefix: int, payload, address: int, chain_id: int) -> List[int]:
    bounds = payload.resource_bounds
    fee_fields_hash = hasher.poseidon_many(
        [
            payload.tip,
            encode_resource_bound(L1_GAS_NAME, bounds.l1_gas),
            encode_resource_bound(L2_GAS_NAME, bounds.l2_gas),
            encode_resource_bound(L1_DATA_GAS_NAME, bounds.l1_data_gas),
        ]
    )
    return [
        prefix,
        payload.wire_version,
        address,
        fee_fields_hash,
        hasher.poseidon_many(payload.paymaster_data),
        chain_id,
        payload.nonce,
        encode_data_availability_modes(
            payload.nonce_data_availability_mode, payload.fee_data_availability_mode
        ),
    ]
