"""
Tests for field elements and Uint256.

Tests cover:
- Construction from ints, decimal and hex strings
- Range enforcement
- Modular arithmetic
- Short strings
- Address parsing
- Uint256 splitting
"""

import pytest

from starkrail.constants import FIELD_PRIME
from starkrail.errors import InvalidAddressError, ValidationError
from starkrail.types.felt import Felt, Uint256, parse_address, to_felts


# =============================================================================
# Construction Tests
# =============================================================================


class TestFeltConstruction:
    """Tests for building Felts."""

    def test_from_int(self) -> None:
        """Test a plain int is wrapped unchanged."""
        assert Felt(42) == 42
        assert isinstance(Felt(42), int)

    def test_parse_hex_and_decimal(self) -> None:
        """Test parse accepts 0x hex and decimal strings."""
        assert Felt.parse("0x2a") == 42
        assert Felt.parse("0X2A") == 42
        assert Felt.parse("42") == 42

    def test_from_hex_requires_prefix(self) -> None:
        """Test from_hex rejects strings without 0x."""
        assert Felt.from_hex("0xff") == 255
        with pytest.raises(ValidationError):
            Felt.from_hex("ff")

    def test_from_decimal_rejects_hex(self) -> None:
        """Test from_decimal only takes digits."""
        assert Felt.from_decimal("1111") == 1111
        with pytest.raises(ValidationError):
            Felt.from_decimal("0x10")

    def test_garbage_string_rejected(self) -> None:
        """Test malformed strings raise ValidationError."""
        for bad in ("", "0xzz", "12a", "-5"):
            with pytest.raises(ValidationError):
                Felt(bad)

    def test_upper_bound(self) -> None:
        """Test P - 1 is valid and P is not."""
        assert Felt(FIELD_PRIME - 1) == FIELD_PRIME - 1
        with pytest.raises(ValidationError) as exc_info:
            Felt(FIELD_PRIME)
        assert exc_info.value.field == "felt"

    def test_negative_rejected(self) -> None:
        """Test negative ints are out of range."""
        with pytest.raises(ValidationError):
            Felt(-1)

    def test_non_int_rejected(self) -> None:
        """Test floats are not accepted."""
        with pytest.raises(ValidationError):
            Felt(1.5)  # type: ignore[arg-type]

    def test_felt_passthrough(self) -> None:
        """Test wrapping a Felt returns the same value."""
        value = Felt(7)
        assert Felt(value) is value

    def test_to_felts(self) -> None:
        """Test converting a mixed list."""
        assert to_felts([1, "0x2", "3"]) == [1, 2, 3]


# =============================================================================
# Encoding Tests
# =============================================================================


class TestFeltEncoding:
    """Tests for hex rendering and short strings."""

    def test_hex_is_lowercase_without_padding(self) -> None:
        """Test the JSON-RPC hex encoding."""
        assert Felt(0).hex() == "0x0"
        assert Felt(0xABC).hex() == "0xabc"

    def test_str_and_format_are_hex(self) -> None:
        """Test str() and f-strings render hex."""
        assert str(Felt(255)) == "0xff"
        assert f"{Felt(255)}" == "0xff"
        assert f"{Felt(255):d}" == "255"

    def test_repr(self) -> None:
        """Test repr shows the hex value."""
        assert repr(Felt(16)) == "Felt(0x10)"

    def test_short_string_round_trip(self) -> None:
        """Test short string encoding matches the ASCII bytes."""
        felt = Felt.from_short_string("SN_SEPOLIA")
        assert felt == 0x534E5F5345504F4C4941
        assert felt.to_short_string() == "SN_SEPOLIA"

    def test_short_string_too_long(self) -> None:
        """Test 32 characters do not fit in a felt."""
        Felt.from_short_string("a" * 31)
        with pytest.raises(ValidationError):
            Felt.from_short_string("a" * 32)

    def test_short_string_non_ascii(self) -> None:
        """Test non-ASCII text is rejected."""
        with pytest.raises(ValidationError):
            Felt.from_short_string("żółw")


# =============================================================================
# Arithmetic Tests
# =============================================================================


class TestFeltArithmetic:
    """Tests for arithmetic modulo the field prime."""

    def test_addition_wraps(self) -> None:
        """Test (P - 1) + 2 == 1."""
        result = Felt(FIELD_PRIME - 1) + 2
        assert result == 1
        assert isinstance(result, Felt)

    def test_subtraction_wraps(self) -> None:
        """Test 0 - 1 == P - 1."""
        assert Felt(0) - 1 == FIELD_PRIME - 1
        assert 1 - Felt(2) == FIELD_PRIME - 1

    def test_multiplication_wraps(self) -> None:
        """Test products are reduced."""
        assert Felt(FIELD_PRIME - 1) * 2 == FIELD_PRIME - 2
        assert 3 * Felt(5) == 15

    def test_negation(self) -> None:
        """Test -x + x == 0."""
        x = Felt(12345)
        assert -x + x == 0
        assert -Felt(0) == 0

    def test_hash_and_equality_match_int(self) -> None:
        """Test Felts work as dict keys interchangeably with ints."""
        table = {Felt(5): "five"}
        assert table[5] == "five"


# =============================================================================
# Address Tests
# =============================================================================


class TestParseAddress:
    """Tests for parse_address."""

    def test_valid_address(self) -> None:
        """Test a hex address parses to a Felt."""
        assert parse_address("0x1234") == 0x1234

    def test_invalid_address(self) -> None:
        """Test an unparseable address raises InvalidAddressError."""
        with pytest.raises(InvalidAddressError) as exc_info:
            parse_address("0xnot-an-address")
        assert exc_info.value.code == "INVALID_ADDRESS"
        assert exc_info.value.value == "0xnot-an-address"

    def test_out_of_range_address(self) -> None:
        """Test an address outside the field is invalid."""
        with pytest.raises(InvalidAddressError):
            parse_address(FIELD_PRIME)

    def test_invalid_address_is_validation_error(self) -> None:
        """Test the error is catchable as a ValidationError."""
        with pytest.raises(ValidationError):
            parse_address("nope")


# =============================================================================
# Uint256 Tests
# =============================================================================


class TestUint256:
    """Tests for the two-felt Uint256 encoding."""

    def test_small_value(self) -> None:
        """Test a value below 2**128 has a zero high part."""
        value = Uint256.from_int(100)
        assert value.low == 100
        assert value.high == 0
        assert value.to_calldata() == [100, 0]

    def test_large_value(self) -> None:
        """Test a value above 2**128 splits across both parts."""
        value = Uint256.from_int(2**130 + 7)
        assert value.low == 7
        assert value.high == 4
        assert value.to_int() == 2**130 + 7

    def test_out_of_range(self) -> None:
        """Test 2**256 does not fit."""
        with pytest.raises(ValidationError):
            Uint256.from_int(2**256)

    def test_part_out_of_range(self) -> None:
        """Test each part must fit in 128 bits."""
        with pytest.raises(ValidationError):
            Uint256(low=2**128, high=0)
