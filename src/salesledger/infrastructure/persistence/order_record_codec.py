"""One order <-> one line of the ledger record file.

Line layout::

    id;client;status;total;createdAt;key1:qty1,key2:qty2[|key1:price1,key2:price2]

The optional ``|`` suffix holds the frozen-price snapshot.  Totals and
prices are always written with exactly two decimals.
"""

from __future__ import annotations

from salesledger.domain.exceptions import ValidationError
from salesledger.domain.model.order import Order, OrderStatus, now_iso8601
from salesledger.domain.model.value_objects import Money

FIELD_SEP = ";"
ITEM_SEP = ","
PAIR_SEP = ":"
SNAPSHOT_SEP = "|"


def encode_order(order: Order) -> str:
    items = ITEM_SEP.join(f"{key}{PAIR_SEP}{qty}" for key, qty in order.items.items())
    line = FIELD_SEP.join(
        [
            str(order.id),
            order.client,
            order.status.value,
            str(order.total),
            order.created_at,
            items,
        ]
    )
    if order.frozen_prices:
        snapshot = ITEM_SEP.join(
            f"{key}{PAIR_SEP}{price}" for key, price in order.frozen_prices.items()
        )
        line += SNAPSHOT_SEP + snapshot
    return line


def decode_order(line: str) -> Order:
    """Parse one record line.

    Raises ValidationError when the line cannot be turned into an order;
    the store decides whether that skips the line or aborts the load.
    """
    fields = line.rstrip("\r\n").split(FIELD_SEP, 5)
    if len(fields) < 4:
        raise ValidationError(f"Malformed order record: {line!r}")

    id_str, client, status_str, total_str = fields[:4]
    created_at = fields[4].strip() if len(fields) > 4 else ""
    items_field = fields[5] if len(fields) > 5 else ""

    try:
        order_id = int(id_str.strip())
    except ValueError:
        raise ValidationError(f"Malformed order id {id_str!r}") from None

    try:
        status = OrderStatus(status_str.strip())
    except ValueError:
        raise ValidationError(
            f"Unknown status {status_str!r} in order #{order_id}"
        ) from None

    items_part, sep, snapshot_part = items_field.rpartition(SNAPSHOT_SEP)
    if not sep:
        items_part, snapshot_part = items_field, ""

    items = _decode_items(items_part)
    frozen = {
        key: price
        for key, price in _decode_prices(snapshot_part).items()
        if key in items
    }

    return Order(
        id=order_id,
        client=client,
        status=status,
        items=items,
        total=Money.of(total_str),
        created_at=created_at or now_iso8601(),
        frozen_prices=frozen,
    )


def _decode_items(raw: str) -> dict[str, int]:
    items: dict[str, int] = {}
    for pair in raw.split(ITEM_SEP):
        key, sep, qty_str = pair.partition(PAIR_SEP)
        if not sep:
            continue
        try:
            qty = int(qty_str.strip())
        except ValueError:
            raise ValidationError(f"Malformed item quantity in {pair!r}") from None
        if qty > 0:
            items[key.lower()] = qty
    return items


def _decode_prices(raw: str) -> dict[str, Money]:
    prices: dict[str, Money] = {}
    for pair in raw.split(ITEM_SEP):
        key, sep, price_str = pair.partition(PAIR_SEP)
        if not sep:
            continue
        prices[key.lower()] = Money.of(price_str)
    return prices
