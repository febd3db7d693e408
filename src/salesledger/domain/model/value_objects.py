"""Value Objects shared across the domain.

Value Objects are immutable and compared by value, not identity.
They encapsulate validation so invalid values can never exist.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from salesledger.domain.exceptions import ValidationError

CENT = Decimal("0.01")


def _to_decimal(value: str | float | int | Decimal) -> Decimal:
    if isinstance(value, bool):
        raise ValidationError(f"Invalid money amount: {value!r}")
    try:
        # str() first so floats like 10.005 keep their written digits
        amount = Decimal(str(value).strip().replace(",", "."))
    except (InvalidOperation, ValueError) as exc:
        raise ValidationError(f"Invalid money amount: {value!r}") from exc
    if not amount.is_finite():
        raise ValidationError(f"Invalid money amount: {value!r}")
    return amount


@dataclass(frozen=True)
class Money:
    """Non-negative monetary amount, fixed to two decimal places.

    Uses Decimal to avoid floating-point rounding errors that would be
    unacceptable in financial calculations.  The amount is always stored
    quantized to cents, so ``Money.of("10")`` equals ``Money.of("10.00")``.
    """

    amount: Decimal

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            raise ValidationError(
                f"Money amount must be a Decimal, got {type(self.amount).__name__}"
            )
        if self.amount < Decimal("0"):
            raise ValidationError(
                f"Money amount cannot be negative, got {self.amount}"
            )
        try:
            cents = self.amount.quantize(CENT, rounding=ROUND_HALF_UP)
        except InvalidOperation:
            raise ValidationError(
                f"Money amount out of range: {self.amount}"
            ) from None
        object.__setattr__(self, "amount", cents)

    # --- Arithmetic helpers ---------------------------------------------------

    def __add__(self, other: Money) -> Money:
        return Money(self.amount + other.amount)

    def __mul__(self, factor: int) -> Money:
        if not isinstance(factor, int):
            raise TypeError(f"Can only multiply Money by int, got {type(factor).__name__}")
        return Money(self.amount * factor)

    def __lt__(self, other: Money) -> bool:
        return self.amount < other.amount

    def __le__(self, other: Money) -> bool:
        return self.amount <= other.amount

    def __gt__(self, other: Money) -> bool:
        return self.amount > other.amount

    def __ge__(self, other: Money) -> bool:
        return self.amount >= other.amount

    def differs_from(self, other: Money, tolerance: Decimal = CENT) -> bool:
        """True when the two amounts are more than *tolerance* apart."""
        return abs(self.amount - other.amount) > tolerance

    # --- Display --------------------------------------------------------------

    def __str__(self) -> str:
        return f"{self.amount:.2f}"

    # --- Factories ------------------------------------------------------------

    @staticmethod
    def zero() -> Money:
        return Money(Decimal("0"))

    @staticmethod
    def of(amount: str | float | int | Decimal) -> Money:
        """Coerce to Money, rounding half-up to the cent."""
        return Money(_to_decimal(amount))

    @staticmethod
    def price(amount: str | float | int | Decimal) -> Money:
        """Coerce a catalog price.

        Prices must be strictly positive and carry no fraction of a cent;
        ``10.005`` is rejected rather than silently rounded.
        """
        value = _to_decimal(amount)
        if value <= 0:
            raise ValidationError("Price must be greater than zero")
        try:
            cents = value.quantize(CENT)
        except InvalidOperation:
            raise ValidationError(f"Price out of range: {amount!r}") from None
        if value != cents:
            raise ValidationError("Price must have at most 2 decimal places")
        return Money(cents)

    @staticmethod
    def total_of(amounts) -> Money:
        total = Decimal("0")
        for money in amounts:
            total += money.amount
        return Money(total)


@dataclass(frozen=True)
class Quantity:
    """A positive integer quantity.

    Enforces the invariant that you cannot order zero or negative items.
    """

    value: int

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise ValidationError(
                f"Quantity must be an integer, got {type(self.value).__name__}"
            )
        if self.value <= 0:
            raise ValidationError("Quantity must be positive")

    def __str__(self) -> str:
        return str(self.value)
