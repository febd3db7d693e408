"""Composition root: wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.
"""

from __future__ import annotations

from dataclasses import dataclass

from salesledger.application.catalog_service import ProductCatalogService
from salesledger.application.ledger_service import OrderLedgerService
from salesledger.infrastructure.config import Settings
from salesledger.infrastructure.persistence.txt_catalog_store import TxtCatalogStore
from salesledger.infrastructure.persistence.txt_ledger_store import TxtLedgerStore


@dataclass
class Services:
    catalog: ProductCatalogService
    ledger: OrderLedgerService


def build_services(settings: Settings | None = None) -> Services:
    """Build both services around the text stores and load them.

    The catalog loads first so the ledger's live price table, and with it
    every recomputed order total, reflects the stored prices.
    """
    settings = settings or Settings.from_env()
    settings.data_dir.mkdir(parents=True, exist_ok=True)

    catalog = ProductCatalogService(TxtCatalogStore(settings.products_path))
    catalog.load()

    ledger = OrderLedgerService(TxtLedgerStore(settings.orders_path), catalog)
    ledger.load()

    return Services(catalog=catalog, ledger=ledger)
