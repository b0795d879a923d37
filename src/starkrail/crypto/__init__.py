"""
Hashing and signing capabilities.

``Signature``, ``StarkHasher`` and ``Signer`` are the interfaces the engine
depends on. The Stark curve binding lives in ``starkrail.crypto.stark``
and is loaded on first use by ``default_hasher``.
"""

from starkrail.crypto.base import Signature, Signer, StarkHasher
from starkrail.crypto.selector import selector_from_name, starknet_keccak


def default_hasher() -> StarkHasher:
    from starkrail.crypto.stark import StarkCurveHasher

    return StarkCurveHasher()


__all__ = [
    "Signature",
    "Signer",
    "StarkHasher",
    "default_hasher",
    "selector_from_name",
    "starknet_keccak",
]
