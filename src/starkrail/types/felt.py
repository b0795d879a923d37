"""
Field element value types.

A Felt is an ``int`` in ``[0, FIELD_PRIME)``. It compares, hashes and
sorts like the plain integer it wraps, so Felts can be mixed freely with
ints in collections. Addition, subtraction, multiplication and negation
are reduced modulo the prime; every other int operation returns a plain
int.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Union

from starkrail.constants import FIELD_PRIME
from starkrail.errors import InvalidAddressError, ValidationError

FeltLike = Union[int, str]

_SHORT_STRING_MAX = 31


class Felt(int):
    """Integer modulo the Stark field prime."""

    __slots__ = ()

    def __new__(cls, value: FeltLike = 0) -> "Felt":
        if isinstance(value, Felt):
            return value
        if isinstance(value, str):
            value = _parse_str(value)
        elif not isinstance(value, int):
            raise ValidationError(
                f"Cannot build a field element from {type(value).__name__}",
                field="felt",
            )
        if not 0 <= value < FIELD_PRIME:
            raise ValidationError(
                f"Value {value} is outside the field range",
                field="felt",
                details={"value": str(value)},
            )
        return super().__new__(cls, value)

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------

    @classmethod
    def parse(cls, value: FeltLike) -> "Felt":
        """Build from an int, a decimal string or a ``0x`` hex string."""
        return cls(value)

    @classmethod
    def from_hex(cls, value: str) -> "Felt":
        if not value.lower().startswith("0x"):
            raise ValidationError(f"Expected a 0x-prefixed hex string, got {value!r}", field="felt")
        return cls(value)

    @classmethod
    def from_decimal(cls, value: str) -> "Felt":
        if not value.isdigit():
            raise ValidationError(f"Expected a decimal string, got {value!r}", field="felt")
        return cls(int(value))

    @classmethod
    def from_short_string(cls, text: str) -> "Felt":
        """Encode an ASCII string of at most 31 characters as a felt."""
        if not text.isascii():
            raise ValidationError(f"Short string {text!r} is not ASCII", field="felt")
        if len(text) > _SHORT_STRING_MAX:
            raise ValidationError(
                f"Short string {text!r} is longer than {_SHORT_STRING_MAX} characters",
                field="felt",
            )
        return cls(int.from_bytes(text.encode("ascii"), "big"))

    # ------------------------------------------------------------------
    # Conversions
    # ------------------------------------------------------------------

    def hex(self) -> str:
        """Lowercase ``0x`` hex without leading zeros, the JSON-RPC encoding."""
        return f"0x{int(self):x}"

    def to_short_string(self) -> str:
        value = int(self)
        return value.to_bytes((value.bit_length() + 7) // 8, "big").decode("ascii")

    # ------------------------------------------------------------------
    # Field arithmetic
    # ------------------------------------------------------------------

    def __add__(self, other: object) -> "Felt":
        if not isinstance(other, int):
            return NotImplemented
        return Felt((int(self) + int(other)) % FIELD_PRIME)

    __radd__ = __add__

    def __sub__(self, other: object) -> "Felt":
        if not isinstance(other, int):
            return NotImplemented
        return Felt((int(self) - int(other)) % FIELD_PRIME)

    def __rsub__(self, other: object) -> "Felt":
        if not isinstance(other, int):
            return NotImplemented
        return Felt((int(other) - int(self)) % FIELD_PRIME)

    def __mul__(self, other: object) -> "Felt":
        if not isinstance(other, int):
            return NotImplemented
        return Felt((int(self) * int(other)) % FIELD_PRIME)

    __rmul__ = __mul__

    def __neg__(self) -> "Felt":
        return Felt(-int(self) % FIELD_PRIME)

    def __repr__(self) -> str:
        return f"Felt({self.hex()})"

    def __str__(self) -> str:
        return self.hex()

    def __format__(self, format_spec: str) -> str:
        if not format_spec:
            return self.hex()
        return int(self).__format__(format_spec)


def _parse_str(value: str) -> int:
    text = value.strip()
    try:
        if text.lower().startswith("0x"):
            return int(text, 16)
        if text.isdigit():
            return int(text)
    except ValueError as exc:
        raise ValidationError(f"Invalid field element string {value!r}", field="felt") from exc
    raise ValidationError(f"Invalid field element string {value!r}", field="felt")


def to_felts(values: Iterable[FeltLike]) -> List[Felt]:
    return [Felt(v) for v in values]


def parse_address(value: FeltLike) -> Felt:
    """
    Parse a contract or account address.

    Raises:
        InvalidAddressError: If the value is not a valid field element.
    """
    try:
        return Felt(value)
    except ValidationError as exc:
        raise InvalidAddressError(value, reason=exc.message) from exc


@dataclass(frozen=True)
class Uint256:
    """A 256-bit unsigned integer as passed to Cairo: two 128-bit felts."""

    low: int
    high: int

    def __post_init__(self) -> None:
        for name in ("low", "high"):
            part = getattr(self, name)
            if not 0 <= part < 2**128:
                raise ValidationError(f"Uint256.{name} must fit in 128 bits", field=name)

    @classmethod
    def from_int(cls, value: int) -> "Uint256":
        if not 0 <= value < 2**256:
            raise ValidationError(f"Value {value} does not fit in 256 bits", field="uint256")
        return cls(low=value & (2**128 - 1), high=value >> 128)

    def to_int(self) -> int:
        return (self.high << 128) + self.low

    def to_calldata(self) -> List[Felt]:
        return [Felt(self.low), Felt(self.high)]
