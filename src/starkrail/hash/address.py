"""
Contract address derivation.

An address commits to the deployer, the salt, the class and the
constructor arguments::

    pedersen("STARKNET_CONTRACT_ADDRESS", deployer, salt, class_hash,
             pedersen(constructor_calldata)) mod (2**251 - 256)

This must agree bit for bit with the address the chain assigns, so every
deployment path in the package goes through these two functions.
"""

from __future__ import annotations

from typing import Sequence

from starkrail.constants import CONTRACT_ADDRESS_PREFIX, MAX_ADDRESS
from starkrail.crypto.base import StarkHasher
from starkrail.types.felt import Felt


def compute_contract_address(
    hasher: StarkHasher,
    class_hash: int,
    salt: int,
    constructor_calldata: Sequence[int] = (),
    deployer_address: int = 0,
) -> Felt:
    """
    Compute the address of a contract deployed by ``deployer_address``.

    Use ``deployer_address=0`` for deploy-account transactions and for
    non-unique UDC deployments.
    """
    raw = hasher.pedersen_on_elements(
        [
            CONTRACT_ADDRESS_PREFIX,
            deployer_address,
            salt,
            class_hash,
            hasher.pedersen_on_elements(constructor_calldata),
        ]
    )
    return Felt(int(raw) % MAX_ADDRESS)


def compute_udc_address(
    hasher: StarkHasher,
    class_hash: int,
    salt: int,
    constructor_calldata: Sequence[int],
    unique: bool,
    caller_address: int,
    udc_address: int,
) -> Felt:
    """
    Compute the address the Universal Deployer assigns.

    A unique deployment scopes the salt to the caller and the deployer to
    the UDC: ``salt' = pedersen(caller, salt)``, ``deployer = udc``. A
    non-unique deployment uses the salt as is with deployer ``0``, so any
    caller using the same salt gets the same address.
    """
    if unique:
        return compute_contract_address(
            hasher,
            class_hash,
            hasher.pedersen(caller_address, salt),
            constructor_calldata,
            deployer_address=udc_address,
        )
    return compute_contract_address(hasher, class_hash, salt, constructor_calldata, 0)
