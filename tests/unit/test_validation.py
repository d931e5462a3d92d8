"""Unit tests for validation utilities.

This module tests public key parsing and amount scaling.
"""

from decimal import Decimal

import pytest
from solders.keypair import Keypair

from solana_minter.utils.errors import InvalidAmountError, InvalidPublicKeyError, ValidationError
from solana_minter.utils.validation import (
    from_base_units,
    parse_public_key,
    to_base_units,
    validate_amount,
    validate_decimals,
    validate_public_key,
)


class TestPublicKeys:
    """Test suite for public key validation."""

    def test_validate_public_key(self):
        pubkey = str(Keypair().pubkey())
        assert validate_public_key(pubkey)
        assert not validate_public_key("")
        assert not validate_public_key("not-a-key!")
        assert not validate_public_key("0OIl" * 10)

    def test_parse_public_key_round_trip(self):
        pubkey = Keypair().pubkey()
        assert parse_public_key(str(pubkey)) == pubkey
        assert parse_public_key(pubkey) is pubkey

    def test_parse_public_key_invalid(self):
        with pytest.raises(InvalidPublicKeyError) as excinfo:
            parse_public_key("invalid")
        assert excinfo.value.pubkey == "invalid"
        assert isinstance(excinfo.value, ValidationError)


class TestAmountScaling:
    """Test suite for converting human-readable amounts to base units."""

    @pytest.mark.parametrize("amount,decimals,expected", [
        (100, 2, 10000),
        (50, 2, 5000),
        (1, 0, 1),
        ("1.5", 9, 1500000000),
        (Decimal("0.01"), 2, 1),
        (7, 6, 7000000),
    ])
    def test_to_base_units(self, amount, decimals, expected):
        assert to_base_units(amount, decimals) == expected

    def test_to_base_units_is_exact_at_u64_limit(self):
        assert to_base_units("18446744073.709551615", 9) == 2 ** 64 - 1

    def test_amount_above_u64_rejected(self):
        # 10^12 tokens with 9 decimals is 10^21 base units
        with pytest.raises(InvalidAmountError) as excinfo:
            to_base_units("1000000000000", 9)
        assert "maximum" in str(excinfo.value)

    def test_many_digits_are_not_rounded_away(self):
        with pytest.raises(InvalidAmountError):
            to_base_units("1." + "0" * 40 + "1", 2)

    @pytest.mark.parametrize("amount", [0, -1, "0", "-0.5", Decimal("0")])
    def test_non_positive_amounts_rejected(self, amount):
        with pytest.raises(InvalidAmountError):
            to_base_units(amount, 2)

    def test_too_precise_amount_rejected(self):
        with pytest.raises(InvalidAmountError) as excinfo:
            to_base_units("0.001", 2)
        assert "2 fractional digits" in str(excinfo.value)

    @pytest.mark.parametrize("amount", ["abc", "NaN", "Infinity", True, None])
    def test_non_numeric_amounts_rejected(self, amount):
        with pytest.raises(InvalidAmountError):
            validate_amount(amount)

    @pytest.mark.parametrize("decimals", [-1, 256])
    def test_out_of_range_decimals_rejected(self, decimals):
        with pytest.raises(ValidationError):
            to_base_units(1, decimals)

    def test_validate_decimals(self):
        assert validate_decimals(0) == 0
        assert validate_decimals(255) == 255

    def test_validate_amount_returns_decimal(self):
        assert validate_amount("12.50") == Decimal("12.50")

    def test_from_base_units(self):
        assert from_base_units(10000, 2) == Decimal("100")
        assert from_base_units(1, 9) == Decimal("0.000000001")
