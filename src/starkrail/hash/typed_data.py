"""
SNIP-12 typed data.

An off-chain message is hashed as::

    h("StarkNet Message", h(domain), account_address, h(message))

where every struct hash is ``h(type_hash, *encoded_fields)`` and the type
hash is the starknet keccak of the struct's encoded type.

Revision 0 hashes with Pedersen and names its domain ``StarkNetDomain``.
Revision 1 hashes with Poseidon, names its domain ``StarknetDomain``,
quotes names in encoded types, encodes strings of any length and adds
enums, integer and address types and the ``u256``, ``TokenAmount`` and
``NftId`` preset structs. The revision is read from ``domain.revision``.

Example:
    >>> typed_data = TypedData.from_dict(json.loads(raw))
    >>> msg_hash = typed_data.message_hash(account_address, hasher)
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from starkrail.constants import FIELD_PRIME, STARKNET_MESSAGE_PREFIX
from starkrail.crypto.base import StarkHasher
from starkrail.crypto.selector import selector_from_name, starknet_keccak
from starkrail.errors import ValidationError
from starkrail.types.felt import Felt, FeltLike

_DECIMAL = re.compile(r"-?[0-9]+")
_HEX = re.compile(r"0[xX][0-9a-fA-F]+")
_SHORT_STRING_LENGTH = 31


class Revision(IntEnum):
    V0 = 0
    V1 = 1


@dataclass(frozen=True)
class Parameter:
    """One member of a struct type. ``contains`` names the leaf or variant type."""

    name: str
    type: str
    contains: Optional[str] = None

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "Parameter":
        try:
            contains = raw.get("contains")
            param = cls(
                name=str(raw["name"]),
                type=str(raw["type"]),
                contains=None if contains is None else str(contains),
            )
        except (KeyError, TypeError, AttributeError) as exc:
            raise ValidationError(f"Invalid type member {raw!r}", field="types") from exc
        if param.type in ("merkletree", "enum") and not param.contains:
            raise ValidationError(
                f"Member {param.name!r} of type {param.type!r} must name the type it contains",
                field="types",
            )
        if param.type == "merkletree" and param.contains.endswith("*"):
            raise ValidationError(
                f"Merkle tree member {param.name!r} cannot contain an array, got {param.contains!r}",
                field="types",
            )
        return param

    def to_dict(self) -> Dict[str, str]:
        raw = {"name": self.name, "type": self.type}
        if self.contains is not None:
            raw["contains"] = self.contains
        return raw


_BASIC_TYPES_V0 = frozenset({"felt", "bool", "string", "selector", "merkletree", "raw"})
_BASIC_TYPES_V1 = _BASIC_TYPES_V0 | frozenset(
    {"enum", "u128", "i128", "ContractAddress", "ClassHash", "timestamp", "shortstring"}
)
_REVISION_1_SCALARS = frozenset({"u128", "ContractAddress", "ClassHash", "timestamp", "shortstring"})

_PRESET_TYPES_V1: Dict[str, Tuple[Parameter, ...]] = {
    "u256": (Parameter("low", "u128"), Parameter("high", "u128")),
    "TokenAmount": (Parameter("token_address", "ContractAddress"), Parameter("amount", "u256")),
    "NftId": (Parameter("collection_address", "ContractAddress"), Parameter("token_id", "u256")),
}


@dataclass(frozen=True)
class TypedData:
    """
    A SNIP-12 message: struct types, the primary type, a domain and the message.

    Type definitions are checked on construction: the domain struct must be
    defined, basic and preset types cannot be redefined, and every defined
    type must be referenced.

    Attributes:
        types: Struct name -> members
        primary_type: Name of the message struct
        domain: Domain values (name, version, chainId and, from revision 1, revision)
        message: Message values
    """

    types: Mapping[str, Tuple[Parameter, ...]]
    primary_type: str
    domain: Mapping[str, Any]
    message: Mapping[str, Any]

    def __post_init__(self) -> None:
        self._verify_types()

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "TypedData":
        """Build from the JSON object wallets and dapps exchange."""
        try:
            types = {
                name: tuple(Parameter.from_dict(member) for member in members)
                for name, members in raw["types"].items()
            }
            return cls(
                types=types,
                primary_type=str(raw["primaryType"]),
                domain=dict(raw["domain"]),
                message=dict(raw["message"]),
            )
        except (KeyError, TypeError, AttributeError) as exc:
            raise ValidationError(
                "Typed data needs types, primaryType, domain and message objects",
                field="typed_data",
            ) from exc

    def to_dict(self) -> Dict[str, Any]:
        return {
            "types": {name: [m.to_dict() for m in members] for name, members in self.types.items()},
            "primaryType": self.primary_type,
            "domain": dict(self.domain),
            "message": dict(self.message),
        }

    # ------------------------------------------------------------------
    # Revision
    # ------------------------------------------------------------------

    @property
    def revision(self) -> Revision:
        raw = self.domain.get("revision")
        if raw is None:
            return Revision.V0
        try:
            return Revision(int(raw))
        except (TypeError, ValueError) as exc:
            raise ValidationError(f"Unsupported typed data revision {raw!r}", field="revision") from exc

    @property
    def domain_separator_name(self) -> str:
        return "StarkNetDomain" if self.revision is Revision.V0 else "StarknetDomain"

    @property
    def all_types(self) -> Dict[str, Tuple[Parameter, ...]]:
        """Defined types plus the preset types of this revision."""
        if self.revision is Revision.V1:
            return {**self.types, **_PRESET_TYPES_V1}
        return dict(self.types)

    def _verify_types(self) -> None:
        revision = self.revision
        separator = self.domain_separator_name
        if separator not in self.types:
            raise ValidationError(f"Types must define {separator!r}", field="types")

        basic = _BASIC_TYPES_V1 if revision is Revision.V1 else _BASIC_TYPES_V0
        presets = _PRESET_TYPES_V1 if revision is Revision.V1 else {}
        referenced = {separator, self.primary_type}
        for members in self.types.values():
            for member in members:
                if member.type in ("enum", "merkletree") and member.contains:
                    referenced.add(member.contains)
                elif revision is Revision.V1 and _is_enum(member.type):
                    referenced.update(_enum_types(member.type))
                else:
                    referenced.add(_strip_pointer(member.type))

        for name in self.types:
            if name in basic:
                raise ValidationError(f"Types must not redefine the basic type {name!r}", field="types")
            if name in presets:
                raise ValidationError(f"Types must not redefine the preset type {name!r}", field="types")
        for name in self.types:
            if not name:
                raise ValidationError("Type names cannot be empty", field="types")
            if name.endswith("*"):
                raise ValidationError(f"Type names cannot end in '*', got {name!r}", field="types")
            if name.startswith("(") or name.endswith(")"):
                raise ValidationError(f"Type names cannot be parenthesised, got {name!r}", field="types")
            if "," in name:
                raise ValidationError(f"Type names cannot contain commas, got {name!r}", field="types")
            if name not in referenced:
                raise ValidationError(f"Type {name!r} is defined but never referenced", field="types")

    # ------------------------------------------------------------------
    # Type encoding
    # ------------------------------------------------------------------

    def encode_type(self, type_name: str) -> str:
        """The type followed by its struct dependencies in name order."""
        first, *rest = self._dependencies(type_name)
        return "".join(self._encode_dependency(dep) for dep in [first, *sorted(rest)])

    def type_hash(self, type_name: str) -> Felt:
        return starknet_keccak(self.encode_type(type_name).encode("utf-8"))

    def _dependencies(self, type_name: str) -> List[str]:
        types = self.all_types
        v1 = self.revision is Revision.V1
        deps = [type_name]
        to_visit = [type_name]
        while to_visit:
            current = to_visit.pop(0)
            for member in types.get(current, ()):
                if v1 and member.type == "enum" and member.contains:
                    referenced = [member.contains]
                elif v1 and _is_enum(member.type):
                    referenced = _enum_types(member.type)
                else:
                    referenced = [member.type]
                for dep in map(_strip_pointer, referenced):
                    if dep in types and dep not in deps:
                        deps.append(dep)
                        to_visit.append(dep)
        return deps

    def _encode_dependency(self, type_name: str) -> str:
        members = self.all_types.get(type_name)
        if members is None:
            raise ValidationError(f"Type {type_name!r} is not defined in types", field="types")
        escape = _quote if self.revision is Revision.V1 else str

        fields = []
        for member in members:
            target = member.type
            if self.revision is Revision.V1 and member.type == "enum" and member.contains:
                target = member.contains
            if _is_enum(target):
                type_string = "(" + ",".join(escape(t) for t in _enum_types(target)) + ")"
            else:
                type_string = escape(target)
            fields.append(f"{escape(member.name)}:{type_string}")
        return f"{escape(type_name)}({','.join(fields)})"

    # ------------------------------------------------------------------
    # Hashing
    # ------------------------------------------------------------------

    def message_hash(self, account_address: FeltLike, hasher: StarkHasher) -> Felt:
        """The hash an account signs for this message."""
        return self._hash_array(
            hasher,
            [
                STARKNET_MESSAGE_PREFIX,
                self.struct_hash(self.domain_separator_name, self.domain, hasher),
                Felt(account_address),
                self.struct_hash(self.primary_type, self.message, hasher),
            ],
        )

    def struct_hash(self, type_name: str, data: Mapping[str, Any], hasher: StarkHasher) -> Felt:
        members = self.all_types.get(type_name)
        if members is None:
            raise ValidationError(f"Type {type_name!r} is not defined in types", field="types")
        if not isinstance(data, Mapping):
            raise ValidationError(f"Value of {type_name!r} must be an object", field="typed_data")

        values: List[int] = [self.type_hash(type_name)]
        for member in members:
            if member.name not in data:
                raise ValidationError(
                    f"Missing value for {type_name}.{member.name}", field="typed_data"
                )
            values.append(
                self.encode_value(
                    member.type, data[member.name], hasher, parent=type_name, key=member.name
                )
            )
        return self._hash_array(hasher, values)

    def encode_value(
        self,
        type_name: str,
        value: Any,
        hasher: StarkHasher,
        *,
        parent: Optional[str] = None,
        key: Optional[str] = None,
    ) -> Felt:
        """
        Encode one value as a field element.

        ``parent`` and ``key`` locate the member being encoded; merkle
        trees and enums read the type they contain from it.
        """
        revision = self.revision
        if type_name in self.all_types:
            return self.struct_hash(type_name, value, hasher)

        if type_name.endswith("*"):
            items = _as_list(value, type_name)
            inner = _strip_pointer(type_name)
            return self._hash_array(hasher, [self.encode_value(inner, item, hasher) for item in items])

        if type_name == "enum":
            if revision is Revision.V0:
                raise ValidationError("'enum' is not supported in revision 0", field="types")
            return self._encode_enum(value, hasher, parent, key)
        if type_name == "merkletree":
            leaf_type = self._merkle_leaf_type(parent, key)
            leaves = [self.encode_value(leaf_type, leaf, hasher) for leaf in _as_list(value, type_name)]
            pair_hash = hasher.pedersen if revision is Revision.V0 else hasher.poseidon
            return merkle_root(leaves, pair_hash)
        if type_name == "string":
            if revision is Revision.V1:
                return self._encode_long_string(value, hasher)
            return _felt_from_primitive(value)
        if type_name in ("felt", "bool", "raw"):
            return _felt_from_primitive(value)
        if type_name == "selector":
            return _selector(value)
        if type_name == "i128":
            return _felt_from_primitive(value, allow_signed=True)
        if type_name in _REVISION_1_SCALARS:
            if revision is Revision.V0:
                raise ValidationError(f"{type_name!r} is not supported in revision 0", field="types")
            return _felt_from_primitive(value)
        raise ValidationError(f"Type {type_name!r} is not defined in types", field="types")

    def _hash_array(self, hasher: StarkHasher, values: Sequence[int]) -> Felt:
        if self.revision is Revision.V0:
            return hasher.pedersen_on_elements(values)
        return hasher.poseidon_many(values)

    def _member(self, parent: Optional[str], key: Optional[str]) -> Parameter:
        members = self.all_types.get(parent) if parent is not None else None
        if members is None:
            raise ValidationError(f"Parent type {parent!r} is not defined in types", field="types")
        for member in members:
            if member.name == key:
                return member
        raise ValidationError(f"Key {key!r} is not defined in type {parent!r}", field="types")

    def _merkle_leaf_type(self, parent: Optional[str], key: Optional[str]) -> str:
        if parent is None or key is None:
            return "raw"
        member = self._member(parent, key)
        if member.type != "merkletree" or member.contains is None:
            raise ValidationError(f"{parent}.{key} is not a merkle tree", field="types")
        return member.contains

    def _encode_enum(
        self, value: Any, hasher: StarkHasher, parent: Optional[str], key: Optional[str]
    ) -> Felt:
        member = self._member(parent, key)
        variants = self.all_types.get(member.contains or "")
        if variants is None:
            raise ValidationError(f"Enum type {member.contains!r} is not defined in types", field="types")
        if not isinstance(value, Mapping) or len(value) != 1:
            raise ValidationError(f"{parent}.{key} must name exactly one variant", field="typed_data")

        ((variant_name, variant_data),) = value.items()
        for index, variant in enumerate(variants):
            if variant.name == variant_name:
                break
        else:
            raise ValidationError(
                f"Variant {variant_name!r} is not defined in {member.contains!r}", field="typed_data"
            )

        subtypes = [t for t in _enum_types(variant.type) if t]
        data = _as_list(variant_data, variant.type)
        if len(data) != len(subtypes):
            raise ValidationError(
                f"Variant {variant_name!r} takes {len(subtypes)} values, got {len(data)}",
                field="typed_data",
            )
        encoded = [self.encode_value(t, item, hasher) for t, item in zip(subtypes, data)]
        return self._hash_array(hasher, [index, *encoded])

    def _encode_long_string(self, value: Any, hasher: StarkHasher) -> Felt:
        if not isinstance(value, str):
            raise ValidationError(f"Expected a string, got {type(value).__name__}", field="typed_data")
        chunks = [
            value[i : i + _SHORT_STRING_LENGTH] for i in range(0, len(value), _SHORT_STRING_LENGTH)
        ]
        pending = chunks.pop() if chunks and len(chunks[-1]) < _SHORT_STRING_LENGTH else ""
        words = [Felt.from_short_string(chunk) for chunk in chunks]
        return self._hash_array(
            hasher, [len(words), *words, Felt.from_short_string(pending), len(pending)]
        )


def merkle_root(leaves: Sequence[int], pair_hash: Callable[[int, int], Felt]) -> Felt:
    """
    Root of the merkle tree over ``leaves``.

    Pairs are hashed smaller value first; an odd node is paired with 0.
    """
    if not leaves:
        raise ValidationError("Cannot build a merkle tree from no leaves", field="merkletree")
    level = [Felt(leaf) for leaf in leaves]
    while len(level) > 1:
        level = [
            _sorted_pair_hash(pair_hash, level[i], level[i + 1] if i + 1 < len(level) else Felt(0))
            for i in range(0, len(level), 2)
        ]
    return level[0]


def _sorted_pair_hash(pair_hash: Callable[[int, int], Felt], a: Felt, b: Felt) -> Felt:
    return pair_hash(a, b) if a < b else pair_hash(b, a)


def _felt_from_primitive(value: Any, allow_signed: bool = False) -> Felt:
    if isinstance(value, bool):
        return Felt(int(value))
    if isinstance(value, int):
        return _felt_from_int(value, allow_signed)
    if not isinstance(value, str):
        raise ValidationError(
            f"Expected a string or a number, got {type(value).__name__}", field="typed_data"
        )
    if value == "":
        return Felt(0)
    if _DECIMAL.fullmatch(value):
        return _felt_from_int(int(value), allow_signed)
    if value in ("true", "false"):
        return Felt(1 if value == "true" else 0)
    if _HEX.fullmatch(value) and int(value, 16) < FIELD_PRIME:
        return Felt(int(value, 16))
    return Felt.from_short_string(value)


def _felt_from_int(value: int, allow_signed: bool) -> Felt:
    if allow_signed and value < 0:
        value += FIELD_PRIME
    return Felt(value)


def _selector(value: Any) -> Felt:
    if not isinstance(value, str):
        raise ValidationError("A selector must be a name or a hex string", field="typed_data")
    if _HEX.fullmatch(value):
        return Felt(int(value, 16))
    return selector_from_name(value)


def _as_list(value: Any, type_name: str) -> List[Any]:
    if not isinstance(value, (list, tuple)):
        raise ValidationError(f"Value of {type_name!r} must be an array", field="typed_data")
    return list(value)


def _is_enum(type_name: str) -> bool:
    return type_name.startswith("(") and type_name.endswith(")")


def _enum_types(type_name: str) -> List[str]:
    inner = type_name[1:-1]
    if not inner.strip():
        return []
    return [t.strip() for t in inner.split(",")]


def _strip_pointer(type_name: str) -> str:
    return type_name[:-1] if type_name.endswith("*") else type_name


def _quote(name: str) -> str:
    return f'"{name}"'
