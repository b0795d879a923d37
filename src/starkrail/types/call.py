"""
Contract calls and multicall calldata.

An account executes a list of Calls as one Invoke transaction. The calls
are flattened into the account's ``__execute__`` calldata in one of two
layouts depending on the account's Cairo version:

Cairo 0::

    [n, (to, selector, data_offset, data_len) * n, total_len, data...]

Cairo 1::

    [n, (to, selector, data_len, data...) * n]

Both layouts preserve call order, and both decoders recover the calls in
that order.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Sequence, Tuple

from starkrail.crypto.selector import selector_from_name
from starkrail.errors import ValidationError
from starkrail.types.felt import Felt, FeltLike, parse_address


@dataclass(frozen=True)
class Call:
    """One contract invocation."""

    contract_address: Felt
    entry_point_selector: Felt
    calldata: Tuple[Felt, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "contract_address", parse_address(self.contract_address))
        object.__setattr__(self, "entry_point_selector", Felt(self.entry_point_selector))
        object.__setattr__(self, "calldata", tuple(Felt(v) for v in self.calldata))

    @classmethod
    def from_entry_point(
        cls,
        contract_address: FeltLike,
        entry_point: str,
        calldata: Iterable[FeltLike] = (),
    ) -> "Call":
        """
        Build a call from a human-readable entry point name.

        Example:
            >>> Call.from_entry_point(token, "transfer", [recipient, 100, 0])
        """
        return cls(
            contract_address=parse_address(contract_address),
            entry_point_selector=selector_from_name(entry_point),
            calldata=tuple(Felt(v) for v in calldata),
        )

    def to_rpc(self) -> dict:
        """``FUNCTION_CALL`` object for ``starknet_call``."""
        return {
            "contract_address": self.contract_address.hex(),
            "entry_point_selector": self.entry_point_selector.hex(),
            "calldata": [v.hex() for v in self.calldata],
        }


# ============================================================================
# Cairo 0 layout
# ============================================================================

def encode_cairo0_calldata(calls: Sequence[Call]) -> List[Felt]:
    header: List[Felt] = []
    data: List[Felt] = []
    for call in calls:
        header += [
            call.contract_address,
            call.entry_point_selector,
            Felt(len(data)),
            Felt(len(call.calldata)),
        ]
        data += call.calldata
    return [Felt(len(calls)), *header, Felt(len(data)), *data]


def decode_cairo0_calldata(calldata: Sequence[FeltLike]) -> List[Call]:
    values = [Felt(v) for v in calldata]
    count = _read_count(values, 0)
    header_end = 1 + 4 * count
    if len(values) <= header_end:
        raise ValidationError("Calldata is shorter than its call headers", field="calldata")
    total = int(values[header_end])
    data = values[header_end + 1:]
    if len(data) != total:
        raise ValidationError(
            f"Calldata declares {total} data elements but carries {len(data)}",
            field="calldata",
        )

    calls: List[Call] = []
    for i in range(count):
        to, selector, offset, length = values[1 + 4 * i: 5 + 4 * i]
        if int(offset) + int(length) > total:
            raise ValidationError(f"Call {i} data range exceeds calldata", field="calldata")
        calls.append(Call(to, selector, tuple(data[int(offset): int(offset) + int(length)])))
    return calls


# ============================================================================
# Cairo 1 layout
# ============================================================================

def encode_cairo1_calldata(calls: Sequence[Call]) -> List[Felt]:
    result: List[Felt] = [Felt(len(calls))]
    for call in calls:
        result += [
            call.contract_address,
            call.entry_point_selector,
            Felt(len(call.calldata)),
            *call.calldata,
        ]
    return result


def decode_cairo1_calldata(calldata: Sequence[FeltLike]) -> List[Call]:
    values = [Felt(v) for v in calldata]
    count = _read_count(values, 0)
    pos = 1
    calls: List[Call] = []
    for i in range(count):
        if pos + 3 > len(values):
            raise ValidationError(f"Calldata ends inside call {i} header", field="calldata")
        to, selector, length = values[pos: pos + 3]
        pos += 3
        end = pos + int(length)
        if end > len(values):
            raise ValidationError(f"Call {i} data range exceeds calldata", field="calldata")
        calls.append(Call(to, selector, tuple(values[pos:end])))
        pos = end
    if pos != len(values):
        raise ValidationError("Trailing elements after the last call", field="calldata")
    return calls


def encode_calldata(calls: Sequence[Call], cairo_version: int) -> List[Felt]:
    if cairo_version == 0:
        return encode_cairo0_calldata(calls)
    if cairo_version == 1:
        return encode_cairo1_calldata(calls)
    raise ValidationError(f"Unsupported Cairo version {cairo_version}", field="cairo_version")


def decode_calldata(calldata: Sequence[FeltLike], cairo_version: int) -> List[Call]:
    if cairo_version == 0:
        return decode_cairo0_calldata(calldata)
    if cairo_version == 1:
        return decode_cairo1_calldata(calldata)
    raise ValidationError(f"Unsupported Cairo version {cairo_version}", field="cairo_version")


def _read_count(values: List[Felt], pos: int) -> int:
    if len(values) <= pos:
        raise ValidationError("Calldata is empty", field="calldata")
    return int(values[pos])
