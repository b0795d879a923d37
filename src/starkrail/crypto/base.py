"""
Hashing and signing capabilities.

The engine never does curve arithmetic itself. It hashes and signs through
these two interfaces, which production code binds to the Stark curve
(see ``starkrail.crypto.stark``) and tests bind to deterministic doubles.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Sequence

from starkrail.types.felt import Felt


@dataclass(frozen=True)
class Signature:
    """ECDSA signature over a transaction or message hash."""

    r: Felt
    s: Felt

    def to_list(self) -> List[Felt]:
        return [self.r, self.s]

    def to_rpc(self) -> List[str]:
        return [self.r.hex(), self.s.hex()]


class StarkHasher(ABC):
    """
    Hash capability.

    ``pedersen_on_elements`` is the order-sensitive chain used for legacy
    transaction commitments and contract addresses. ``poseidon_many`` is
    the array hash used by v3 transactions. ``poseidon`` is the two-input
    hash, which differs from ``poseidon_many`` of the same pair.
    """

    @abstractmethod
    def pedersen(self, left: int, right: int) -> Felt:
        ...

    @abstractmethod
    def poseidon(self, left: int, right: int) -> Felt:
        ...

    @abstractmethod
    def poseidon_many(self, values: Sequence[int]) -> Felt:
        ...

    def pedersen_on_elements(self, values: Sequence[int]) -> Felt:
        """``h(h(h(h(0, v0), v1), ...), len)``."""
        acc = 0
        for value in values:
            acc = self.pedersen(acc, value)
        return self.pedersen(acc, len(values))


class Signer(ABC):
    """
    Signing capability bound to one private key.

    The key never leaves the implementation; the engine only sees the
    public key and signatures.
    """

    @property
    @abstractmethod
    def public_key(self) -> Felt:
        ...

    @abstractmethod
    def sign_transaction_hash(self, tx_hash: int) -> Signature:
        ...

    @abstractmethod
    def verify(self, msg_hash: int, signature: Signature) -> bool:
        ...
