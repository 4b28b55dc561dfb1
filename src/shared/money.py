"""Decimal helpers shared by the Money value objects of every domain.

Amounts travel as strings ("200.00") so that persistence and JSON never see
a binary float. All arithmetic goes through ``decimal.Decimal``.
"""

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

TWO_PLACES = Decimal("0.01")

CURRENCY_PATTERN = re.compile(r"^[A-Z]{3}$")

CURRENCY_SYMBOLS = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
}


def to_decimal(value) -> Decimal:
    """Convert a str/int/Decimal amount into a Decimal rounded to cents.

    Floats are routed through ``str`` so ``0.1`` stays ``0.10``.
    """
    if isinstance(value, Decimal):
        number = value
    else:
        try:
            number = Decimal(str(value).strip())
        except (InvalidOperation, ValueError) as exc:
            raise ValueError(f"Invalid monetary amount: {value!r}") from exc

    if not number.is_finite():
        raise ValueError(f"Invalid monetary amount: {value!r}")
    return number.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def normalize_amount(value) -> str:
    return str(to_decimal(value))


def normalize_currency(code: str) -> str:
    return (code or "").strip().upper()


def is_valid_currency(code: str) -> bool:
    return bool(code) and bool(CURRENCY_PATTERN.match(code))


def to_minor_units(value) -> int:
    """Amount in cents, rounded half-up."""
    return int((to_decimal(value) * 100).to_integral_value(rounding=ROUND_HALF_UP))


def from_minor_units(cents: int) -> str:
    return str((Decimal(int(cents)) / 100).quantize(TWO_PLACES))


def format_amount(value, currency: str) -> str:
    symbol = CURRENCY_SYMBOLS.get(currency)
    amount = f"{to_decimal(value):,.2f}"
    if symbol:
        return f"{symbol}{amount}"
    return f"{amount} {currency}"
