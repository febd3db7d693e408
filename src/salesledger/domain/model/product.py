"""Product entity.

Products live independently of orders. They have their own lifecycle:
prices change, stock moves, products are renamed and removed from the
catalog.
"""

from __future__ import annotations

from dataclasses import dataclass

from salesledger.domain.exceptions import ValidationError
from salesledger.domain.model.value_objects import Money


@dataclass
class Product:
    """A product in the catalog.

    Identity is the lowercase ``key`` derived from the display name, so
    "Widget" and "WIDGET" are the same product.
    """

    name: str
    price: Money
    stock: int = 0

    @property
    def key(self) -> str:
        return self.name.lower()

    def reserve(self, quantity: int) -> None:
        """Take *quantity* units out of stock for an order.

        Raises ValidationError if there is not enough stock.
        """
        if quantity <= 0:
            raise ValidationError("Reservation quantity must be positive")
        if quantity > self.stock:
            raise ValidationError(
                f"Not enough stock for {self.name} "
                f"(need {quantity}, have {self.stock} available)"
            )
        self.stock -= quantity

    def release(self, quantity: int) -> None:
        """Return *quantity* units to stock (e.g. on order cancellation)."""
        if quantity <= 0:
            raise ValidationError("Release quantity must be positive")
        self.stock += quantity
