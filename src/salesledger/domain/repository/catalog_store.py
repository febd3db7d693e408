"""Abstract store for the product catalog.

Defined in the domain layer so the domain never depends on
infrastructure. Concrete implementations (flat text file, in-memory)
live in the infrastructure layer and in the tests.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from salesledger.domain.model.product import Product


class CatalogStore(ABC):

    @abstractmethod
    def load(self) -> dict[str, Product]:
        """Return every stored product keyed by its lowercase name.

        A missing backing file yields an empty catalog.
        """

    @abstractmethod
    def save(self, products: dict[str, Product]) -> None:
        """Replace the stored catalog with *products*."""
