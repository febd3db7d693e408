"""Application service: Order Ledger.

Owns the in-memory order collection and the live price table, and runs
the order lifecycle:

* Stock follows the ``canceled`` edge.  Entering ``canceled`` puts every
  item back on the shelf; leaving it takes them all out again, validated
  for the whole order before anything is reserved.
* Prices follow the ``new`` edge.  A ``new`` order is priced live from
  the catalog; leaving ``new`` freezes the current unit prices into the
  order's snapshot and the total is computed from it from then on.
  Moving back to ``new`` refreshes the snapshot and returns to live
  pricing.

Orders are addressed by id and read back as immutable ``OrderView``s.
Every mutation is written straight through to the store.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from salesledger.application.catalog_service import ProductCatalogService
from salesledger.application.dto import OrderView, StatusSummary
from salesledger.domain.exceptions import LedgerError, NotFoundError, ValidationError
from salesledger.domain.model.order import Order, OrderStatus
from salesledger.domain.model.value_objects import Money
from salesledger.domain.repository.ledger_store import LedgerStore
from salesledger.domain.validation import (
    normalize_key,
    validate_client_name,
    validate_quantity,
    validate_status,
)

logger = logging.getLogger(__name__)

ACTIVE_STATUSES = (OrderStatus.NEW, OrderStatus.IN_PROGRESS)


class OrderLedgerService:

    def __init__(self, store: LedgerStore, catalog: ProductCatalogService) -> None:
        self._store = store
        self._catalog = catalog
        self._orders: list[Order] = []
        self._prices: dict[str, Money] = catalog.price_table()
        self._next_id = 1

    # --- Commands -------------------------------------------------------------

    def create(self, client: str) -> int:
        """Open a new, empty order for *client* and return its id."""
        validate_client_name(client)
        order = Order(id=self._next_id, client=client)
        self._next_id += 1
        self._orders.append(order)
        self.persist()
        logger.info("Created order #%d for %r", order.id, client)
        return order.id

    def add_item(self, order_id: int, name: str, qty: int) -> OrderView:
        """Add *qty* units of product *name* to an order.

        Unless the order is canceled the units are reserved from catalog
        stock first, so a shortfall leaves the order untouched.
        """
        validate_quantity(qty)
        order = self._require(order_id)
        key = normalize_key(name)
        if key not in self._prices:
            raise NotFoundError(f"Product not found in catalog: '{name}'")

        if not order.is_canceled:
            if not self._catalog.has_enough_stock(key, qty):
                raise ValidationError(
                    f"Not enough stock for {key}. "
                    f"Available: {self._catalog.stock_of(key)}, needed: {qty}"
                )
            self._catalog.reserve(key, qty)

        order.add_item(key, qty, self._current_price(key))
        order.recalculate(self._prices)
        self.persist()
        logger.info("Order #%d: added %d x %s", order.id, qty, key)
        return OrderView.of(order)

    def remove_item(self, order_id: int, name: str) -> OrderView:
        """Drop an item from an order, returning its units to stock."""
        order = self._require(order_id)
        key = normalize_key(name)
        if not order.contains(key):
            raise NotFoundError(f"Item '{key}' not found in order #{order.id}")

        if not order.is_canceled:
            self._release_all({key: order.items[key]})
        qty = order.remove_item(key)

        order.recalculate(self._prices)
        self.persist()
        logger.info("Order #%d: removed %d x %s", order.id, qty, key)
        return OrderView.of(order)

    def set_status(self, order_id: int, status: str | OrderStatus) -> OrderView:
        """Move an order to *status*, applying stock and pricing effects.

        If the stock effect fails (not enough stock to un-cancel, or the
        catalog cannot be written) the order keeps its previous status,
        stock is left as it was and the error propagates.
        """
        new_status = validate_status(status)
        order = self._require(order_id)
        old_status = order.status

        if new_status is old_status:
            self.persist()
            return OrderView.of(order)

        order.status = new_status
        try:
            if old_status is OrderStatus.CANCELED:
                self._reserve_all(order)
            elif new_status is OrderStatus.CANCELED:
                self._release_all(order.items)
        except LedgerError:
            order.status = old_status
            raise

        if new_status is OrderStatus.NEW or old_status is OrderStatus.NEW:
            order.freeze_prices(self._current_price, refresh=True)
        else:
            order.freeze_prices(self._current_price)

        order.recalculate(self._prices)
        self.persist()
        logger.info(
            "Order #%d: %s -> %s", order.id, old_status.value, new_status.value
        )
        return OrderView.of(order)

    def cancel_orders_using_product(self, name: str) -> list[int]:
        """Cancel every active order that holds product *name*.

        Used before a product is removed from the catalog; each
        cancellation returns the order's units to stock.
        """
        order_ids = self.orders_using_product(name)
        for order_id in order_ids:
            self.set_status(order_id, OrderStatus.CANCELED)
        return order_ids

    def recalculate_for_product(self, name: str) -> list[int]:
        """Recompute the total of every order holding product *name*.

        Called after a catalog price or name change.  Persists only when
        some total moved by more than a cent; returns the ids that did.
        """
        key = normalize_key(name)
        changed: list[int] = []
        for order in self._orders:
            if not order.contains(key):
                continue
            previous = order.recalculate(self._prices)
            if order.total.differs_from(previous):
                changed.append(order.id)

        if changed:
            self.persist()
            logger.info("Recalculated orders %s after change to %s", changed, key)
        return changed

    def set_prices(self, snapshot: Mapping[str, Money]) -> None:
        """Replace the live price table with a catalog snapshot."""
        self._prices = {
            normalize_key(key): price if isinstance(price, Money) else Money.of(price)
            for key, price in snapshot.items()
        }

    def sync_prices(self) -> None:
        """Refresh the live price table from the catalog."""
        self.set_prices(self._catalog.price_table())

    # --- Queries --------------------------------------------------------------

    def find_by_id(self, order_id: int) -> OrderView | None:
        order = self._find(order_id)
        return OrderView.of(order) if order is not None else None

    def get(self, order_id: int) -> OrderView:
        return OrderView.of(self._require(order_id))

    def all(self) -> list[OrderView]:
        return [OrderView.of(o) for o in sorted(self._orders, key=lambda o: o.id)]

    def prices(self) -> dict[str, Money]:
        return dict(self._prices)

    def revenue(self) -> Money:
        return Money.total_of(order.total for order in self._orders)

    def status_summary(self) -> list[StatusSummary]:
        """Order count and revenue per status, in lifecycle order."""
        summary = []
        for status in OrderStatus:
            totals = [o.total for o in self._orders if o.status is status]
            summary.append(
                StatusSummary(
                    status=status.value,
                    count=len(totals),
                    revenue=Money.total_of(totals),
                )
            )
        return summary

    def orders_using_product(self, name: str, active_only: bool = True) -> list[int]:
        """Ids of orders holding product *name*.

        With *active_only* only ``new`` and ``in_progress`` orders count.
        """
        key = normalize_key(name)
        return [
            order.id
            for order in self._orders
            if order.contains(key)
            and (not active_only or order.status in ACTIVE_STATUSES)
        ]

    # --- Persistence ----------------------------------------------------------

    def load(self) -> None:
        """Replace the in-memory ledger with the stored one.

        Totals are recomputed against the current live price table and the
        id counter moves past the highest loaded id.
        """
        orders = self._store.load()
        for order in orders:
            order.recalculate(self._prices)
            self._next_id = max(self._next_id, order.id + 1)
        self._orders = orders
        logger.debug("Loaded %d orders, next id %d", len(orders), self._next_id)

    def save(self) -> None:
        self._store.save(list(self._orders))

    def persist(self) -> None:
        """Write-through hook called after every mutation."""
        self.save()

    # --- Internal helpers -----------------------------------------------------

    def _find(self, order_id: int) -> Order | None:
        for order in self._orders:
            if order.id == order_id:
                return order
        return None

    def _require(self, order_id: int) -> Order:
        order = self._find(order_id)
        if order is None:
            raise NotFoundError(f"Order #{order_id} not found")
        return order

    def _current_price(self, key: str) -> Money | None:
        """Most precise price available: the catalog, then the live table."""
        price = self._catalog.price_of(key)
        return price if price is not None else self._prices.get(key)

    def _reserve_all(self, order: Order) -> None:
        """Reserve stock for every item of *order*, all or nothing.

        Phase 1 checks every item against catalog stock and fails before
        any mutation; phase 2 reserves the whole batch in one write.
        """
        for key, qty in order.items.items():
            if not self._catalog.has_enough_stock(key, qty):
                raise ValidationError(
                    f"Not enough stock for {key}. "
                    f"Available: {self._catalog.stock_of(key)}, needed: {qty}"
                )
        self._catalog.reserve_all(order.items)

    def _release_all(self, items: Mapping[str, int]) -> None:
        """Return *items* to stock in one write, skipping deleted products."""
        for key in self._catalog.release_all(items):
            logger.warning(
                "Cannot return %d x %s to stock: product no longer in catalog",
                items[key], key,
            )
