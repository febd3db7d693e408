"""Data Transfer Objects: read-only views that cross layer boundaries.

Presentation code (the CLI here, any GUI elsewhere) only ever sees these
frozen copies; it changes state through the service commands, addressing
orders by id and products by name.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType

from salesledger.domain.model.order import Order
from salesledger.domain.model.product import Product
from salesledger.domain.model.value_objects import Money


@dataclass(frozen=True)
class ProductView:
    key: str
    name: str
    price: Money
    stock: int

    @staticmethod
    def of(product: Product) -> ProductView:
        return ProductView(
            key=product.key,
            name=product.name,
            price=product.price,
            stock=product.stock,
        )


@dataclass(frozen=True)
class OrderView:
    """A complete order as shown to the user."""

    id: int
    client: str
    status: str
    items: Mapping[str, int]
    total: Money
    created_at: str
    frozen_prices: Mapping[str, Money]

    @staticmethod
    def of(order: Order) -> OrderView:
        return OrderView(
            id=order.id,
            client=order.client,
            status=order.status.value,
            items=MappingProxyType(dict(order.items)),
            total=order.total,
            created_at=order.created_at,
            frozen_prices=MappingProxyType(dict(order.frozen_prices)),
        )


@dataclass(frozen=True)
class StatusSummary:
    """Order count and revenue for one status."""

    status: str
    count: int
    revenue: Money
