"""Validation utilities for Solana Minter.

This module provides utilities for validating Solana-specific data and for
converting human-readable token amounts into base units.
"""

import re
from decimal import Context, Decimal, InvalidOperation
from typing import Union

from solders.pubkey import Pubkey

from solana_minter.constants import MAX_DECIMALS, MAX_TOKEN_AMOUNT
from solana_minter.utils.errors import InvalidAmountError, InvalidPublicKeyError, ValidationError

# Solana public key validation pattern (base58 format)
PUBKEY_PATTERN = re.compile(r"^[1-9A-HJ-NP-Za-km-z]{32,44}$")

Amount = Union[int, str, Decimal]


def validate_public_key(pubkey: str) -> bool:
    """Validate a Solana public key.

    Args:
        pubkey: The public key to validate

    Returns:
        True if the public key is valid, False otherwise
    """
    if not pubkey or not isinstance(pubkey, str):
        return False
    return bool(PUBKEY_PATTERN.match(pubkey))


def parse_public_key(value: Union[str, Pubkey]) -> Pubkey:
    """Parse a base58 string into a Pubkey.

    Args:
        value: Base58 address or an existing Pubkey

    Returns:
        The parsed Pubkey

    Raises:
        InvalidPublicKeyError: If the value is not a valid public key
    """
    if isinstance(value, Pubkey):
        return value
    if not validate_public_key(value):
        raise InvalidPublicKeyError(str(value))
    try:
        return Pubkey.from_string(value)
    except ValueError:
        raise InvalidPublicKeyError(value)


def to_decimal(amount: Amount) -> Decimal:
    """Convert a caller-supplied amount to Decimal without float rounding."""
    if isinstance(amount, bool):
        raise InvalidAmountError(amount, "amount must be a number")
    if isinstance(amount, float):
        amount = repr(amount)
    try:
        value = Decimal(amount)
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidAmountError(amount, "amount must be a number")
    if not value.is_finite():
        raise InvalidAmountError(amount, "amount must be finite")
    return value


def validate_decimals(decimals: int) -> int:
    """Check that decimals fit the mint's u8 field.

    Raises:
        ValidationError: If decimals is negative or above 255
    """
    if not 0 <= decimals <= MAX_DECIMALS:
        raise ValidationError(
            f"decimals must be between 0 and {MAX_DECIMALS}, got {decimals}",
            details={"decimals": decimals}
        )
    return decimals


def validate_amount(amount: Amount) -> Decimal:
    """Validate that an amount is strictly positive.

    Args:
        amount: Human-readable token amount

    Returns:
        The amount as a Decimal

    Raises:
        InvalidAmountError: If the amount is not a positive number
    """
    value = to_decimal(amount)
    if value <= 0:
        raise InvalidAmountError(amount)
    return value


def to_base_units(amount: Amount, decimals: int) -> int:
    """Scale a human-readable amount into base units.

    The result is ``amount * 10 ** decimals`` computed exactly. Amounts
    carrying more fractional digits than the mint supports, or whose base
    units exceed the u64 amount field, are rejected.

    Args:
        amount: Human-readable token amount, strictly positive
        decimals: Decimals of the mint

    Returns:
        Amount in base units

    Raises:
        InvalidAmountError: If the amount is not positive, too precise or too large
        ValidationError: If decimals is out of range
    """
    validate_decimals(decimals)

    value = validate_amount(amount)
    # scaleb only moves the exponent; a precision covering every digit keeps it exact
    scaled = value.scaleb(decimals, Context(prec=len(value.as_tuple().digits)))
    if scaled != scaled.to_integral_value():
        raise InvalidAmountError(
            amount, f"amount has more than {decimals} fractional digits"
        )
    if scaled > MAX_TOKEN_AMOUNT:
        raise InvalidAmountError(
            amount, f"amount exceeds the maximum of {MAX_TOKEN_AMOUNT} base units"
        )
    return int(scaled)


def from_base_units(base_units: int, decimals: int) -> Decimal:
    """Convert base units back into a human-readable Decimal."""
    return Decimal(base_units).scaleb(-decimals)
