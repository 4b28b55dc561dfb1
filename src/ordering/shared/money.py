"""Money value object for exact monetary amounts with currency."""

from decimal import Decimal

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import String

from ordering.domain import ordering
from shared.money import (
    format_amount,
    from_minor_units,
    is_valid_currency,
    normalize_amount,
    normalize_currency,
    to_decimal,
    to_minor_units,
)


@ordering.value_object
class Money:
    """An immutable, non-negative decimal amount in a single currency.

    The amount is held as a normalized string with two fractional digits.
    Construct instances through ``Money.of()`` or ``Money.zero()`` so that
    the amount and currency are normalized before the invariants run.
    """

    amount = String(required=True, max_length=32)
    currency = String(required=True, max_length=3)

    @invariant.post
    def amount_must_be_normalized_and_non_negative(self):
        try:
            normalized = normalize_amount(self.amount)
        except ValueError as exc:
            raise ValidationError({"amount": [f"Invalid monetary amount: {self.amount}"]}) from exc

        if normalized != self.amount:
            raise ValidationError({"amount": [f"Amount must have two decimal places: {self.amount}"]})
        if Decimal(normalized) < 0:
            raise ValidationError({"amount": ["Amount cannot be negative"]})

    @invariant.post
    def currency_must_be_iso_code(self):
        if not is_valid_currency(self.currency):
            raise ValidationError({"currency": [f"Unsupported currency: {self.currency}"]})

    # -------------------------------------------------------------------
    # Factories
    # -------------------------------------------------------------------
    @classmethod
    def of(cls, amount, currency: str) -> "Money":
        try:
            normalized = normalize_amount(amount)
        except ValueError as exc:
            raise ValidationError({"amount": [str(exc)]}) from exc
        return cls(amount=normalized, currency=normalize_currency(currency))

    @classmethod
    def zero(cls, currency: str) -> "Money":
        return cls.of("0", currency)

    @classmethod
    def from_minor_units(cls, cents: int, currency: str) -> "Money":
        return cls.of(from_minor_units(cents), currency)

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    @property
    def decimal(self) -> Decimal:
        return to_decimal(self.amount)

    @property
    def minor_units(self) -> int:
        return to_minor_units(self.amount)

    def is_zero(self) -> bool:
        return self.decimal == 0

    def same_currency(self, other: "Money") -> bool:
        return self.currency == other.currency

    def format(self) -> str:
        return format_amount(self.amount, self.currency)

    # -------------------------------------------------------------------
    # Arithmetic
    # -------------------------------------------------------------------
    def _assert_same_currency(self, other: "Money") -> None:
        if not self.same_currency(other):
            raise ValidationError(
                {"currency": [f"Cannot combine {self.currency} with {other.currency}"]}
            )

    def add(self, other: "Money") -> "Money":
        self._assert_same_currency(other)
        return Money.of(self.decimal + other.decimal, self.currency)

    def subtract(self, other: "Money") -> "Money":
        self._assert_same_currency(other)
        result = self.decimal - other.decimal
        if result < 0:
            raise ValidationError({"amount": ["Subtraction would result in a negative amount"]})
        return Money.of(result, self.currency)

    def multiply(self, factor: int) -> "Money":
        if factor < 0:
            raise ValidationError({"amount": ["Cannot multiply by a negative factor"]})
        return Money.of(self.decimal * factor, self.currency)
