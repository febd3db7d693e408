"""Application service: Product Catalog.

Owns the in-memory product collection and enforces the catalog rules:
one product per case-insensitive name, prices above zero with at most two
decimals, stock never below zero.  Every mutation is written straight
through to the store.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from decimal import Decimal

from salesledger.application.dto import ProductView
from salesledger.domain.exceptions import LedgerError, NotFoundError, ValidationError
from salesledger.domain.model.product import Product
from salesledger.domain.model.value_objects import Money
from salesledger.domain.repository.catalog_store import CatalogStore
from salesledger.domain.validation import (
    normalize_key,
    validate_product_name,
    validate_quantity,
    validate_stock,
)

logger = logging.getLogger(__name__)


class ProductCatalogService:

    def __init__(self, store: CatalogStore) -> None:
        self._store = store
        self._products: dict[str, Product] = {}

    # --- Commands -------------------------------------------------------------

    def add(self, name: str, price: str | float | Decimal, stock: int = 0) -> ProductView:
        """Add a new product to the catalog."""
        validate_product_name(name)
        unit_price = Money.price(price)
        validate_stock(stock)

        key = normalize_key(name)
        if key in self._products:
            raise ValidationError(f"Product '{name}' already exists")

        product = Product(name=name, price=unit_price, stock=stock)
        self._products[key] = product
        self.persist()
        logger.info("Added product %r at %s (stock %d)", name, unit_price, stock)
        return ProductView.of(product)

    def remove(self, name: str) -> None:
        """Delete a product.

        Orders that still reference it are the caller's business; see
        ``OrderLedgerService.cancel_orders_using_product``.
        """
        key = normalize_key(name)
        if key not in self._products:
            raise NotFoundError(f"Product not found: '{name}'")
        del self._products[key]
        self.persist()
        logger.info("Removed product %r", name)

    def rename_and_reprice(
        self,
        old_name: str,
        new_name: str,
        new_price: str | float | Decimal,
        new_stock: int | None = None,
    ) -> ProductView:
        """Rename and reprice a product, optionally resetting its stock."""
        old_key = normalize_key(old_name)
        product = self._products.get(old_key)
        if product is None:
            raise NotFoundError(f"Product not found: '{old_name}'")

        validate_product_name(new_name)
        unit_price = Money.price(new_price)
        if new_stock is not None:
            validate_stock(new_stock)

        new_key = normalize_key(new_name)
        if new_key != old_key and new_key in self._products:
            raise ValidationError(f"Product '{new_name}' already exists")

        del self._products[old_key]
        product.name = new_name
        product.price = unit_price
        if new_stock is not None:
            product.stock = new_stock
        self._products[new_key] = product
        self.persist()
        logger.info(
            "Updated product %r -> %r at %s (stock %d)",
            old_name, new_name, unit_price, product.stock,
        )
        return ProductView.of(product)

    def restock(self, name: str, stock: int) -> ProductView:
        """Set the stock level of a product."""
        product = self._require(name)
        product.stock = validate_stock(stock)
        self.persist()
        return ProductView.of(product)

    # --- Stock reservation ----------------------------------------------------

    def reserve(self, name: str, qty: int) -> None:
        """Take *qty* units out of stock; ValidationError if short."""
        self.reserve_all({name: qty})

    def release(self, name: str, qty: int) -> None:
        """Put *qty* units back into stock."""
        validate_quantity(qty)
        self._require(name)
        self.release_all({name: qty})

    def reserve_all(self, items: Mapping[str, int]) -> None:
        """Take every ``name -> qty`` out of stock, all or nothing.

        The batch is written once.  If any item is short or the write
        fails, stock is restored before the error propagates.
        """
        wanted = [
            (self._require(name), validate_quantity(qty)) for name, qty in items.items()
        ]
        if not wanted:
            return
        applied: list[tuple[Product, int]] = []
        try:
            for product, qty in wanted:
                product.reserve(qty)
                applied.append((product, qty))
            self.persist()
        except LedgerError:
            for product, qty in applied:
                product.release(qty)
            raise

    def release_all(self, items: Mapping[str, int]) -> list[str]:
        """Put every ``name -> qty`` back into stock in one write.

        Names no longer in the catalog are skipped and returned.  A failed
        write restores stock before the error propagates.
        """
        missing: list[str] = []
        wanted: list[tuple[Product, int]] = []
        for name, qty in items.items():
            validate_quantity(qty)
            product = self._products.get(normalize_key(name))
            if product is None:
                missing.append(name)
            else:
                wanted.append((product, qty))
        if not wanted:
            return missing

        for product, qty in wanted:
            product.release(qty)
        try:
            self.persist()
        except LedgerError:
            for product, qty in wanted:
                product.reserve(qty)
            raise
        return missing

    # --- Queries --------------------------------------------------------------

    def has_enough_stock(self, name: str, qty: int) -> bool:
        product = self._products.get(normalize_key(name))
        return product is not None and product.stock >= qty

    def stock_of(self, name: str) -> int:
        product = self._products.get(normalize_key(name))
        return product.stock if product is not None else 0

    def price_of(self, name: str) -> Money | None:
        product = self._products.get(normalize_key(name))
        return product.price if product is not None else None

    def get(self, name: str) -> ProductView | None:
        product = self._products.get(normalize_key(name))
        return ProductView.of(product) if product is not None else None

    def all(self) -> list[ProductView]:
        return [ProductView.of(self._products[key]) for key in sorted(self._products)]

    def price_table(self) -> dict[str, Money]:
        """Snapshot of key -> current price, for the ledger's live table."""
        return {key: product.price for key, product in self._products.items()}

    # --- Persistence ----------------------------------------------------------

    def load(self) -> None:
        """Replace the in-memory catalog with the stored one.

        Prices are normalized to cents; entries without a positive price
        are dropped as corrupt and negative stock is clamped to zero.
        """
        loaded = self._store.load()
        products: dict[str, Product] = {}
        for key, product in loaded.items():
            product.price = Money.of(product.price.amount)
            if product.price.amount <= 0:
                logger.warning("Dropping product %r with non-positive price", product.name)
                continue
            if product.stock < 0:
                product.stock = 0
            products[key] = product
        self._products = products
        logger.debug("Loaded %d products", len(products))

    def save(self) -> None:
        self._store.save(dict(self._products))

    def persist(self) -> None:
        """Write-through hook called after every mutation."""
        self.save()

    # --- Internal helpers -----------------------------------------------------

    def _require(self, name: str) -> Product:
        product = self._products.get(normalize_key(name))
        if product is None:
            raise NotFoundError(f"Product not found: '{name}'")
        return product
