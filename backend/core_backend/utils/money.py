"""
Monetary helpers for order and delivery pricing.

Every amount is a Decimal. Floats are converted through str() so that
0.1 stays 0.1, and results are quantized to the currency's minor unit with
banker's rounding (ROUND_HALF_EVEN) so repeated rounding has no drift.
"""

from decimal import Decimal, ROUND_HALF_EVEN, InvalidOperation
from typing import Union

from django.conf import settings

ZERO = Decimal("0.00")

# Currencies whose minor unit is not 1/100
CURRENCY_EXPONENT = {
    "JPY": 0,
    "KRW": 0,
    "KWD": 3,
    "BHD": 3,
}


def default_currency() -> str:
    return settings.ORDERS.get("CURRENCY", "GBP")


def to_decimal(amount: Union[Decimal, str, int, float, None]) -> Decimal:
    """
    Convert any numeric input to Decimal without passing through binary floats.

    Raises:
        ValueError: if the value is not a finite number
    """
    if amount is None:
        return ZERO
    if isinstance(amount, Decimal):
        value = amount
    else:
        try:
            value = Decimal(str(amount))
        except InvalidOperation:
            raise ValueError(f"'{amount}' is not a valid amount")
    if not value.is_finite():
        raise ValueError(f"'{amount}' is not a valid amount")
    return value


def quantize(amount: Union[Decimal, str, int, float], currency: str = None) -> Decimal:
    """
    Round to the currency's minor unit using banker's rounding.

    Examples:
        >>> quantize("2.125")
        Decimal('2.12')
        >>> quantize("2.135")
        Decimal('2.14')
    """
    exponent = CURRENCY_EXPONENT.get((currency or default_currency()).upper(), 2)
    return to_decimal(amount).quantize(Decimal(10) ** -exponent, rounding=ROUND_HALF_EVEN)


def money_sum(amounts, currency: str = None) -> Decimal:
    """Sum amounts starting from a Decimal zero so empty input stays a Decimal."""
    return quantize(sum((to_decimal(a) for a in amounts), Decimal("0")), currency)
