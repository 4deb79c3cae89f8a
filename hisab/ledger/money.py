"""
Fixed-Point Money Helpers

DESIGN DECISION: Amounts cross the API boundary as Decimal with two
decimal places, but every sum, split and balance is computed on integer
cents. Conversion happens only here.

Floats are accepted at the boundary for convenience and converted through
str() so that 0.1 means ten cents, not 0.1000000000000000055511151231257827.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Union

from hisab.ledger.errors import InvalidAmountError


AmountLike = Union[Decimal, int, float, str]

CENT = Decimal("0.01")

CURRENCY_SYMBOLS = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "CAD": "C$",
    "INR": "₹",
}


def parse_amount(value: AmountLike) -> Decimal:
    """
    Parse a boundary value into a finite Decimal.

    Raises:
        InvalidAmountError: If the value is not a finite number
    """
    if isinstance(value, bool) or value is None:
        raise InvalidAmountError(f"Amount must be a number, got {value!r}")

    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, (int, float)):
        amount = Decimal(str(value))
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            raise InvalidAmountError("Amount must be a number, got an empty string")
        try:
            amount = Decimal(text)
        except InvalidOperation:
            raise InvalidAmountError(f"Amount must be a number, got {value!r}")
    else:
        raise InvalidAmountError(f"Amount must be a number, got {type(value).__name__}")

    if not amount.is_finite():
        raise InvalidAmountError(f"Amount must be finite, got {value!r}")

    return amount


def to_cents(amount: AmountLike) -> int:
    """Convert an amount to integer cents, rounding half away from zero."""
    quantized = parse_amount(amount).quantize(CENT, rounding=ROUND_HALF_UP)
    return int(quantized * 100)


def from_cents(cents: int) -> Decimal:
    """Convert integer cents back to a two-decimal Decimal."""
    return (Decimal(cents) / 100).quantize(CENT)


def format_currency(amount: AmountLike, currency: str) -> str:
    """Render an amount with its currency symbol, e.g. $12.50."""
    symbol = CURRENCY_SYMBOLS.get(currency, "$")
    return f"{symbol}{from_cents(to_cents(amount)):.2f}"
