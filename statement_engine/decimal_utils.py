"""Decimal utilities for financial calculations.

This module provides utilities for precise financial calculations using Python's
decimal.Decimal type. Using Decimal instead of float prevents accumulation errors
when summing thousands of statement lines and ensures accounting identities
(e.g. COGS + operating expenses == operating spend) hold exactly.

Example:
    Convert a float to decimal for financial use::

        from statement_engine.decimal_utils import to_decimal, ZERO

        amount = to_decimal(1234.56)
        if amount != ZERO:
            print(f"Amount: {amount}")
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Union

# Standard precision for financial calculations (2 decimal places = cents)
CURRENCY_PLACES = Decimal("0.01")

ZERO = Decimal("0.00")


def to_decimal(value: Union[float, int, str, Decimal, None]) -> Decimal:
    """Convert a numeric value to Decimal.

    Converts floats, ints, strings, or existing Decimals to a standardized
    Decimal value. Floats are converted via string representation to avoid
    binary floating point artifacts.

    Args:
        value: Numeric value to convert. None is converted to zero.

    Returns:
        Decimal representation of the value.

    Example:
        >>> to_decimal(1234.56)
        Decimal('1234.56')
        >>> to_decimal(None)
        Decimal('0.00')
    """
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        # Round to reasonable precision first to avoid artifacts like 0.1 -> 0.10000000000000001
        return Decimal(str(round(value, 10)))
    return Decimal(value)


def quantize_currency(value: Union[Decimal, float, int]) -> Decimal:
    """Quantize a value to currency precision (2 decimal places).

    Rounds using ROUND_HALF_UP which is standard for financial calculations.

    Args:
        value: Numeric value to quantize.

    Returns:
        Decimal rounded to 2 decimal places.

    Example:
        >>> quantize_currency(Decimal("1234.567"))
        Decimal('1234.57')
    """
    if not isinstance(value, Decimal):
        value = to_decimal(value)
    return value.quantize(CURRENCY_PLACES, rounding=ROUND_HALF_UP)


def is_zero(value: Union[Decimal, float, int]) -> bool:
    """Check if a value is effectively zero after quantization.

    Args:
        value: Numeric value to check.

    Returns:
        True if value rounds to zero at currency precision.

    Example:
        >>> is_zero(Decimal("0.001"))
        True
        >>> is_zero(Decimal("0.01"))
        False
    """
    return quantize_currency(value) == ZERO


def safe_ratio(
    numerator: Union[Decimal, float, int],
    denominator: Union[Decimal, float, int],
) -> Decimal:
    """Financial ratio guarded to zero unless the denominator is positive.

    Margins, returns and leverage ratios are only meaningful against a
    positive base (revenue, assets, equity, current liabilities). A zero or
    negative base yields ``ZERO`` rather than an infinite or sign-flipped
    ratio.

    Args:
        numerator: Ratio numerator.
        denominator: Ratio base.

    Returns:
        ``numerator / denominator`` or ``ZERO``.

    Example:
        >>> safe_ratio(50, 200)
        Decimal('0.25')
        >>> safe_ratio(50, -200)
        Decimal('0.00')
    """
    denom = to_decimal(denominator)
    if denom <= ZERO:
        return ZERO
    return to_decimal(numerator) / denom
