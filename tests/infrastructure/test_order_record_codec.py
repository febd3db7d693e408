"""Tests for the ledger record line codec."""

import re

import pytest

from salesledger.domain.exceptions import ValidationError
from salesledger.domain.model.order import Order, OrderStatus
from salesledger.domain.model.value_objects import Money
from salesledger.infrastructure.persistence.order_record_codec import (
    decode_order,
    encode_order,
)


def _order(**overrides) -> Order:
    fields = dict(
        id=7,
        client="Alice",
        status=OrderStatus.IN_PROGRESS,
        items={"widget": 3, "gadget": 1},
        total=Money.of("17.5"),
        created_at="2024-05-01T13:45:00",
        frozen_prices={"widget": Money.of("5"), "gadget": Money.of("2.5")},
    )
    fields.update(overrides)
    return Order(**fields)


class TestEncode:

    def test_full_line(self):
        assert encode_order(_order()) == (
            "7;Alice;in_progress;17.50;2024-05-01T13:45:00;"
            "widget:3,gadget:1|widget:5.00,gadget:2.50"
        )

    def test_no_snapshot_suffix_without_frozen_prices(self):
        line = encode_order(_order(status=OrderStatus.NEW, frozen_prices={}))
        assert line == "7;Alice;new;17.50;2024-05-01T13:45:00;widget:3,gadget:1"

    def test_empty_order(self):
        line = encode_order(_order(items={}, frozen_prices={}, total=Money.zero()))
        assert line == "7;Alice;in_progress;0.00;2024-05-01T13:45:00;"


class TestDecode:

    def test_round_trip(self):
        original = _order()
        decoded = decode_order(encode_order(original))
        assert decoded == original

    def test_round_trip_reencodes_identically(self):
        line = "3;Bob;done;12.00;2024-01-02T03:04:05;a:1,b:2|a:4.00,b:4.00"
        assert encode_order(decode_order(line + "\n")) == line

    def test_keys_are_lowercased(self):
        order = decode_order("1;Bob;done;5.00;2024-01-01T00:00:00;Widget:1|WIDGET:5.00")
        assert order.items == {"widget": 1}
        assert order.frozen_prices == {"widget": Money.of("5.00")}

    def test_missing_created_at_is_backfilled(self):
        order = decode_order("1;Bob;new;0.00")
        assert re.fullmatch(r"\d{4}-\d\d-\d\dT\d\d:\d\d:\d\d", order.created_at)
        assert order.items == {}

    def test_comma_decimal_total(self):
        assert decode_order("1;Bob;new;12,5;2024-01-01T00:00:00;").total == Money.of("12.50")

    def test_snapshot_prices_for_unknown_items_dropped(self):
        order = decode_order("1;Bob;done;5.00;2024-01-01T00:00:00;a:1|a:5.00,b:1.00")
        assert order.frozen_prices == {"a": Money.of("5.00")}

    def test_items_without_snapshot_suffix(self):
        order = decode_order("1;Bob;new;7.00;2024-01-01T00:00:00;a:2,b:1")
        assert order.items == {"a": 2, "b": 1}
        assert order.frozen_prices == {}

    def test_snapshot_taken_after_last_separator(self):
        order = decode_order("1;Bob;done;7.00;2024-01-01T00:00:00;a:2,b:1|a:3.00,b:1.00")
        assert order.items == {"a": 2, "b": 1}
        assert order.frozen_prices == {"a": Money.of("3.00"), "b": Money.of("1.00")}

    @pytest.mark.parametrize(
        "line",
        [
            "1;Bob;new",
            "1;Bob;new;1e30;2024-01-01T00:00:00;a:1",
            "x;Bob;new;0.00;2024-01-01T00:00:00;",
            "1;Bob;shipped;0.00;2024-01-01T00:00:00;",
            "1;Bob;new;abc;2024-01-01T00:00:00;",
            "1;Bob;new;0.00;2024-01-01T00:00:00;a:many",
        ],
    )
    def test_malformed_lines_rejected(self, line):
        with pytest.raises(ValidationError):
            decode_order(line)
