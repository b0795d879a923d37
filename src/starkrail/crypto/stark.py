"""
Stark curve binding for the hashing and signing capabilities.

Delegates the field and curve arithmetic to starknet-py (Pedersen, ECDSA)
and poseidon-py (Poseidon).
"""

from __future__ import annotations

from typing import Sequence

from poseidon_py.poseidon_hash import poseidon_hash, poseidon_hash_many
from starknet_py.hash.utils import (
    message_signature,
    pedersen_hash,
    private_to_stark_key,
    verify_message_signature,
)

from starkrail.crypto.base import Signature, Signer, StarkHasher
from starkrail.errors import ValidationError
from starkrail.types.felt import Felt
from starkrail.utils.logging import get_logger

_logger = get_logger(__name__)


class StarkCurveHasher(StarkHasher):
    """Pedersen and Poseidon over the Stark field."""

    def pedersen(self, left: int, right: int) -> Felt:
        return Felt(pedersen_hash(int(left), int(right)))

    def poseidon(self, left: int, right: int) -> Felt:
        return Felt(poseidon_hash(int(left), int(right)))

    def poseidon_many(self, values: Sequence[int]) -> Felt:
        return Felt(poseidon_hash_many([int(v) for v in values]))


class StarkCurveSigner(Signer):
    """
    ECDSA signer over the Stark curve.

    Example:
        >>> signer = StarkCurveSigner(0x1234)
        >>> sig = signer.sign_transaction_hash(tx_hash)
        >>> signer.verify(tx_hash, sig)
        True
    """

    def __init__(self, private_key: int) -> None:
        if not 0 < int(private_key) < 2**251:
            raise ValidationError("Private key is outside the curve order range", field="private_key")
        self._private_key = int(private_key)
        self._public_key = Felt(private_to_stark_key(self._private_key))
        _logger.debug("Signer initialised", extra={"public_key": self._public_key.hex()})

    @property
    def public_key(self) -> Felt:
        return self._public_key

    def sign_transaction_hash(self, tx_hash: int) -> Signature:
        r, s = message_signature(int(tx_hash), self._private_key)
        return Signature(r=Felt(r), s=Felt(s))

    def verify(self, msg_hash: int, signature: Signature) -> bool:
        return verify_message_signature(
            int(msg_hash), [int(signature.r), int(signature.s)], int(self._public_key)
        )

    def __repr__(self) -> str:
        return f"StarkCurveSigner(public_key={self._public_key.hex()})"
