"""Tests for the OrderLedgerService commands and queries."""

import pytest

from salesledger.domain.exceptions import IoError, NotFoundError, ValidationError
from salesledger.domain.model.order import Order, OrderStatus
from salesledger.domain.model.value_objects import Money
from tests.fakes import make_services


def _setup():
    return make_services([("Widget", "5.00", 10), ("Gadget", "2.50", 4)])


class TestCreate:

    def test_create_assigns_increasing_ids(self):
        _, ledger, _, store = _setup()
        first = ledger.create("Alice")
        second = ledger.create("Bob")
        assert (first, second) == (1, 2)
        assert [o.id for o in store.saved] == [1, 2]

    def test_new_order_state(self):
        _, ledger, _, _ = _setup()
        view = ledger.get(ledger.create("Alice"))
        assert view.status == "new"
        assert view.total == Money.zero()
        assert dict(view.items) == {}

    def test_invalid_client_rejected(self):
        _, ledger, _, store = _setup()
        with pytest.raises(ValidationError, match="Invalid client name"):
            ledger.create("Alice;Bob")
        assert store.saved == []

    def test_ids_continue_after_load(self):
        _, ledger, _, _ = make_services(
            [("Widget", "5.00", 10)],
            orders=[Order(id=4, client="Old"), Order(id=9, client="Older")],
        )
        assert ledger.create("Alice") == 10


class TestAddItem:

    def test_add_reserves_stock_and_prices_order(self):
        catalog, ledger, _, store = _setup()
        order_id = ledger.create("Alice")
        view = ledger.add_item(order_id, "Widget", 3)
        assert dict(view.items) == {"widget": 3}
        assert view.total == Money.of("15.00")
        assert catalog.stock_of("widget") == 7
        assert store.saved_order(order_id).total == Money.of("15.00")

    def test_case_insensitive_key(self):
        catalog, ledger, _, _ = _setup()
        order_id = ledger.create("Alice")
        ledger.add_item(order_id, "widget", 1)
        view = ledger.add_item(order_id, "WIDGET", 2)
        assert dict(view.items) == {"widget": 3}
        assert catalog.stock_of("Widget") == 7

    def test_unknown_product_rejected(self):
        _, ledger, _, _ = _setup()
        order_id = ledger.create("Alice")
        with pytest.raises(NotFoundError, match="not found in catalog"):
            ledger.add_item(order_id, "Sprocket", 1)

    def test_unknown_order_rejected(self):
        _, ledger, _, _ = _setup()
        with pytest.raises(NotFoundError, match="Order #42 not found"):
            ledger.add_item(42, "Widget", 1)

    @pytest.mark.parametrize("qty", [0, -1])
    def test_non_positive_quantity_rejected(self, qty):
        _, ledger, _, _ = _setup()
        order_id = ledger.create("Alice")
        with pytest.raises(ValidationError, match="must be positive"):
            ledger.add_item(order_id, "Widget", qty)

    def test_insufficient_stock_leaves_order_untouched(self):
        catalog, ledger, _, _ = _setup()
        order_id = ledger.create("Alice")
        with pytest.raises(ValidationError, match="Available: 4, needed: 5"):
            ledger.add_item(order_id, "Gadget", 5)
        assert dict(ledger.get(order_id).items) == {}
        assert catalog.stock_of("gadget") == 4

    def test_canceled_order_does_not_touch_stock(self):
        catalog, ledger, _, _ = _setup()
        order_id = ledger.create("Alice")
        ledger.set_status(order_id, "canceled")
        view = ledger.add_item(order_id, "Gadget", 100)
        assert dict(view.items) == {"gadget": 100}
        assert catalog.stock_of("gadget") == 4

    def test_records_snapshot_price(self):
        _, ledger, _, _ = _setup()
        order_id = ledger.create("Alice")
        view = ledger.add_item(order_id, "Gadget", 1)
        assert dict(view.frozen_prices) == {"gadget": Money.of("2.50")}


class TestRemoveItem:

    def test_remove_returns_stock(self):
        catalog, ledger, _, _ = _setup()
        order_id = ledger.create("Alice")
        ledger.add_item(order_id, "Widget", 3)
        ledger.add_item(order_id, "Gadget", 2)
        view = ledger.remove_item(order_id, "WIDGET")
        assert dict(view.items) == {"gadget": 2}
        assert "widget" not in view.frozen_prices
        assert view.total == Money.of("5.00")
        assert catalog.stock_of("widget") == 10

    def test_remove_missing_item_rejected(self):
        _, ledger, _, _ = _setup()
        order_id = ledger.create("Alice")
        with pytest.raises(NotFoundError, match="not found in order"):
            ledger.remove_item(order_id, "Widget")

    def test_remove_from_canceled_order_keeps_stock(self):
        catalog, ledger, _, _ = _setup()
        order_id = ledger.create("Alice")
        ledger.add_item(order_id, "Widget", 3)
        ledger.set_status(order_id, "canceled")
        assert catalog.stock_of("widget") == 10
        ledger.remove_item(order_id, "Widget")
        assert catalog.stock_of("widget") == 10

    def test_remove_item_of_deleted_product(self):
        catalog, ledger, _, _ = _setup()
        order_id = ledger.create("Alice")
        ledger.add_item(order_id, "Widget", 3)
        catalog.remove("Widget")
        ledger.sync_prices()
        view = ledger.remove_item(order_id, "widget")
        assert dict(view.items) == {}


class TestSetStatus:

    def test_invalid_status_rejected(self):
        _, ledger, _, _ = _setup()
        order_id = ledger.create("Alice")
        with pytest.raises(ValidationError, match="Invalid status"):
            ledger.set_status(order_id, "shipped")
        assert ledger.get(order_id).status == "new"

    def test_any_transition_allowed(self):
        _, ledger, _, _ = _setup()
        order_id = ledger.create("Alice")
        for status in ("done", "new", "in_progress", "done", "canceled", "new"):
            assert ledger.set_status(order_id, status).status == status

    def test_cancel_releases_stock(self):
        catalog, ledger, _, _ = _setup()
        order_id = ledger.create("Alice")
        ledger.add_item(order_id, "Widget", 3)
        ledger.set_status(order_id, OrderStatus.CANCELED)
        assert catalog.stock_of("widget") == 10

    def test_uncancel_reserves_stock(self):
        catalog, ledger, _, _ = _setup()
        order_id = ledger.create("Alice")
        ledger.add_item(order_id, "Widget", 3)
        ledger.set_status(order_id, "canceled")
        ledger.set_status(order_id, "in_progress")
        assert catalog.stock_of("widget") == 7

    def test_non_cancel_transitions_leave_stock_alone(self):
        catalog, ledger, _, _ = _setup()
        order_id = ledger.create("Alice")
        ledger.add_item(order_id, "Widget", 3)
        ledger.set_status(order_id, "in_progress")
        ledger.set_status(order_id, "done")
        ledger.set_status(order_id, "new")
        assert catalog.stock_of("widget") == 7

    def test_cancel_with_deleted_product_is_best_effort(self):
        catalog, ledger, _, _ = _setup()
        order_id = ledger.create("Alice")
        ledger.add_item(order_id, "Widget", 3)
        ledger.add_item(order_id, "Gadget", 1)
        catalog.remove("Widget")
        ledger.set_status(order_id, "canceled")
        assert ledger.get(order_id).status == "canceled"
        assert catalog.stock_of("gadget") == 4

    def test_status_change_persisted(self):
        _, ledger, _, store = _setup()
        order_id = ledger.create("Alice")
        ledger.set_status(order_id, "done")
        assert store.saved_order(order_id).status is OrderStatus.DONE


class TestQueries:

    def test_find_by_id(self):
        _, ledger, _, _ = _setup()
        order_id = ledger.create("Alice")
        assert ledger.find_by_id(order_id).client == "Alice"
        assert ledger.find_by_id(99) is None

    def test_views_are_read_only(self):
        _, ledger, _, _ = _setup()
        order_id = ledger.create("Alice")
        ledger.add_item(order_id, "Widget", 1)
        view = ledger.get(order_id)
        with pytest.raises(TypeError):
            view.items["widget"] = 50
        assert ledger.get(order_id).items["widget"] == 1

    def test_all_sorted_by_id(self):
        _, ledger, _, _ = make_services(
            orders=[Order(id=3, client="C"), Order(id=1, client="A")]
        )
        assert [v.id for v in ledger.all()] == [1, 3]

    def test_revenue_sums_all_totals(self):
        _, ledger, _, _ = _setup()
        a = ledger.create("Alice")
        b = ledger.create("Bob")
        ledger.add_item(a, "Widget", 2)
        ledger.add_item(b, "Gadget", 3)
        assert ledger.revenue() == Money.of("17.50")

    def test_status_summary(self):
        _, ledger, _, _ = _setup()
        a = ledger.create("Alice")
        b = ledger.create("Bob")
        ledger.add_item(a, "Widget", 2)
        ledger.add_item(b, "Gadget", 2)
        ledger.set_status(b, "done")
        summary = {row.status: row for row in ledger.status_summary()}
        assert list(summary) == ["new", "in_progress", "done", "canceled"]
        assert (summary["new"].count, summary["new"].revenue) == (1, Money.of("10.00"))
        assert (summary["done"].count, summary["done"].revenue) == (1, Money.of("5.00"))
        assert summary["canceled"].count == 0

    def test_orders_using_product(self):
        _, ledger, _, _ = _setup()
        a = ledger.create("Alice")
        b = ledger.create("Bob")
        c = ledger.create("Carol")
        for order_id in (a, b, c):
            ledger.add_item(order_id, "Widget", 1)
        ledger.set_status(b, "done")
        assert ledger.orders_using_product("WIDGET") == [a, c]
        assert ledger.orders_using_product("widget", active_only=False) == [a, b, c]
        assert ledger.orders_using_product("gadget") == []

    def test_cancel_orders_using_product(self):
        catalog, ledger, _, _ = _setup()
        a = ledger.create("Alice")
        b = ledger.create("Bob")
        ledger.add_item(a, "Widget", 2)
        ledger.add_item(b, "Gadget", 1)
        assert ledger.cancel_orders_using_product("Widget") == [a]
        assert ledger.get(a).status == "canceled"
        assert ledger.get(b).status == "new"
        assert catalog.stock_of("widget") == 10

    def test_prices_is_a_copy(self):
        _, ledger, _, _ = _setup()
        prices = ledger.prices()
        prices.clear()
        assert ledger.prices() == {"widget": Money.of("5.00"), "gadget": Money.of("2.50")}


class TestPersistence:

    def test_load_recomputes_totals(self):
        stale = Order(
            id=1, client="Alice", items={"widget": 2}, total=Money.of("999")
        )
        _, ledger, _, _ = make_services([("Widget", "5.00", 10)], orders=[stale])
        assert ledger.get(1).total == Money.of("10.00")

    def test_save_failure_surfaces_io_error(self):
        _, ledger, _, store = _setup()
        store.fail_on_save = True
        with pytest.raises(IoError, match="cannot open file"):
            ledger.create("Alice")

    def test_failed_catalog_write_on_cancel_rolls_back(self):
        catalog, ledger, catalog_store, store = _setup()
        order_id = ledger.create("Alice")
        ledger.add_item(order_id, "Widget", 2)
        ledger.add_item(order_id, "Gadget", 2)
        catalog_store.fail_on_save = True
        with pytest.raises(IoError):
            ledger.set_status(order_id, "canceled")
        assert ledger.get(order_id).status == "new"
        assert (catalog.stock_of("widget"), catalog.stock_of("gadget")) == (8, 2)
        assert store.saved_order(order_id).status is OrderStatus.NEW

    def test_failed_catalog_write_on_uncancel_rolls_back(self):
        catalog, ledger, catalog_store, _ = _setup()
        order_id = ledger.create("Alice")
        ledger.add_item(order_id, "Widget", 2)
        ledger.add_item(order_id, "Gadget", 2)
        ledger.set_status(order_id, "canceled")
        catalog_store.fail_on_save = True
        with pytest.raises(IoError):
            ledger.set_status(order_id, "in_progress")
        assert ledger.get(order_id).status == "canceled"
        assert (catalog.stock_of("widget"), catalog.stock_of("gadget")) == (10, 4)

    def test_failed_catalog_write_on_add_item_leaves_order_untouched(self):
        catalog, ledger, catalog_store, _ = _setup()
        order_id = ledger.create("Alice")
        catalog_store.fail_on_save = True
        with pytest.raises(IoError):
            ledger.add_item(order_id, "Widget", 3)
        assert dict(ledger.get(order_id).items) == {}
        assert catalog.stock_of("widget") == 10

    def test_failed_catalog_write_on_remove_item_keeps_item(self):
        catalog, ledger, catalog_store, _ = _setup()
        order_id = ledger.create("Alice")
        ledger.add_item(order_id, "Widget", 3)
        catalog_store.fail_on_save = True
        with pytest.raises(IoError):
            ledger.remove_item(order_id, "Widget")
        view = ledger.get(order_id)
        assert dict(view.items) == {"widget": 3}
        assert view.total == Money.of("15.00")
        assert catalog.stock_of("widget") == 7

    def test_every_mutation_writes_through(self):
        _, ledger, _, store = _setup()
        order_id = ledger.create("Alice")
        ledger.add_item(order_id, "Widget", 1)
        ledger.set_status(order_id, "done")
        ledger.remove_item(order_id, "Widget")
        assert store.save_count == 4
