"""Order entity, the core of the ledger.

An order owns its items (product key -> quantity) and, once it has left
the ``new`` status, a snapshot of the unit price of every item.  The
snapshot keeps the totals of in-progress and finished orders stable while
catalog prices move; ``new`` orders follow the live catalog.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from salesledger.domain.exceptions import NotFoundError, ValidationError
from salesledger.domain.model.value_objects import Money


class OrderStatus(Enum):
    NEW = "new"
    IN_PROGRESS = "in_progress"
    DONE = "done"
    CANCELED = "canceled"


def now_iso8601() -> str:
    """Local time, second precision, e.g. ``2024-05-01T13:45:00``."""
    return datetime.now().strftime("%Y-%m-%dT%H:%M:%S")


@dataclass
class Order:
    """A sales order.

    The ``__init__`` is intentionally simple so the store can reconstitute
    persisted orders without re-validating; the ledger service validates
    input before anything reaches this class.
    """

    id: int
    client: str
    status: OrderStatus = OrderStatus.NEW
    items: dict[str, int] = field(default_factory=dict)
    total: Money = field(default_factory=Money.zero)
    created_at: str = field(default_factory=now_iso8601)
    frozen_prices: dict[str, Money] = field(default_factory=dict)

    # --- Items ----------------------------------------------------------------

    def add_item(self, key: str, quantity: int, price: Money | None = None) -> None:
        """Add *quantity* units of *key*, recording *price* in the snapshot.

        Past ``new`` an item that already has a snapshot price keeps it, so
        topping up an in-progress order does not reprice earlier units.
        """
        if quantity <= 0:
            raise ValidationError("Quantity must be positive")
        self.items[key] = self.items.get(key, 0) + quantity
        if price is None:
            return
        if self.status is OrderStatus.NEW or key not in self.frozen_prices:
            self.frozen_prices[key] = price

    def remove_item(self, key: str) -> int:
        """Drop *key* and its snapshot price; return the removed quantity."""
        if key not in self.items:
            raise NotFoundError(f"Item '{key}' not found in order #{self.id}")
        self.frozen_prices.pop(key, None)
        return self.items.pop(key)

    # --- Price snapshot -------------------------------------------------------

    def freeze_prices(
        self,
        price_of: Callable[[str], Money | None],
        refresh: bool = False,
    ) -> None:
        """Capture unit prices into the snapshot.

        Without *refresh* only items lacking a snapshot price are filled
        in.  Items the catalog no longer prices keep whatever they had.
        """
        for key in self.items:
            if not refresh and key in self.frozen_prices:
                continue
            price = price_of(key)
            if price is not None:
                self.frozen_prices[key] = price

    # --- Totals ---------------------------------------------------------------

    def calc_total(self, prices: Mapping[str, Money]) -> Money:
        """Compute the order total against the live price table *prices*.

        ``new`` orders price each item live, falling back to the snapshot
        when the catalog has no entry for it.  Any other status prices
        strictly from the snapshot; legacy orders without one fall back to
        live prices.  Items with no price anywhere contribute nothing.
        """
        if self.status is OrderStatus.NEW:
            def unit_price(key: str) -> Money | None:
                live = prices.get(key)
                return live if live is not None else self.frozen_prices.get(key)
        elif self.frozen_prices:
            unit_price = self.frozen_prices.get
        else:
            unit_price = prices.get

        lines = []
        for key, qty in self.items.items():
            price = unit_price(key)
            if price is not None:
                lines.append(price * qty)
        return Money.total_of(lines)

    def recalculate(self, prices: Mapping[str, Money]) -> Money:
        """Recompute and store the total; return the previous one."""
        previous = self.total
        self.total = self.calc_total(prices)
        return previous

    # --- Queries --------------------------------------------------------------

    @property
    def is_canceled(self) -> bool:
        return self.status is OrderStatus.CANCELED

    def contains(self, key: str) -> bool:
        return key in self.items
