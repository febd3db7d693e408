"""Flat-text-file implementation of CatalogStore.

One product per line: ``name;price;stock``.  Reading is lenient: blank
lines and empty names are skipped, and a price or stock that does not
parse is read as 0 (the catalog service drops the zero-priced entries).
"""

from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation
from pathlib import Path

from salesledger.domain.exceptions import IoError, ValidationError
from salesledger.domain.model.product import Product
from salesledger.domain.model.value_objects import Money
from salesledger.domain.repository.catalog_store import CatalogStore

logger = logging.getLogger(__name__)


class TxtCatalogStore(CatalogStore):

    def __init__(self, file_path: Path) -> None:
        self._file_path = Path(file_path)

    # --- CatalogStore interface -----------------------------------------------

    def load(self) -> dict[str, Product]:
        products: dict[str, Product] = {}
        if not self._file_path.exists():
            logger.debug("No catalog file at %s; starting empty", self._file_path)
            return products

        with self._file_path.open(encoding="utf-8") as fh:
            for line in fh:
                product = self._to_domain(line)
                if product is not None:
                    products[product.key] = product
        return products

    def save(self, products: dict[str, Product]) -> None:
        lines = [self._to_raw(p) for p in products.values()]
        try:
            with self._file_path.open("w", encoding="utf-8") as fh:
                fh.writelines(lines)
        except OSError as exc:
            raise IoError(
                f"Cannot open products file for write: {self._file_path}"
            ) from exc
        logger.debug("Wrote %d products to %s", len(products), self._file_path)

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(product: Product) -> str:
        return f"{product.name};{product.price};{product.stock}\n"

    @staticmethod
    def _to_domain(line: str) -> Product | None:
        if not line.strip():
            return None
        fields = line.rstrip("\r\n").split(";")
        name = fields[0].strip()
        if not name:
            return None
        price_str = fields[1] if len(fields) > 1 else ""
        stock_str = fields[2] if len(fields) > 2 else ""
        return Product(
            name=name,
            price=_parse_price(price_str),
            stock=_parse_int(stock_str),
        )


def _parse_price(raw: str) -> Money:
    cleaned = "".join(raw.split()).replace(",", ".")
    try:
        value = Decimal(cleaned)
    except InvalidOperation:
        return Money.zero()
    if not value.is_finite() or value <= 0:
        return Money.zero()
    try:
        return Money(value)
    except ValidationError:
        return Money.zero()


def _parse_int(raw: str) -> int:
    cleaned = "".join(raw.split())
    try:
        return int(cleaned)
    except ValueError:
        return 0
