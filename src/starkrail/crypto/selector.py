"""Entry point selectors."""

from __future__ import annotations

from eth_utils import keccak

from starkrail.constants import MASK_250
from starkrail.types.felt import Felt

DEFAULT_ENTRY_POINT_NAME = "__default__"
DEFAULT_L1_ENTRY_POINT_NAME = "__l1_default__"


def starknet_keccak(data: bytes) -> Felt:
    """Keccak-256 truncated to its lowest 250 bits."""
    return Felt(int.from_bytes(keccak(data), "big") & MASK_250)


def selector_from_name(name: str) -> Felt:
    """
    Derive an entry point selector from its name.

    The default and L1-default entry points use selector 0.
    """
    if name in (DEFAULT_ENTRY_POINT_NAME, DEFAULT_L1_ENTRY_POINT_NAME):
        return Felt(0)
    return starknet_keccak(name.encode("ascii"))
