"""Abstract store for the order ledger."""

from __future__ import annotations

from abc import ABC, abstractmethod

from salesledger.domain.model.order import Order


class LedgerStore(ABC):

    @abstractmethod
    def load(self) -> list[Order]:
        """Return every stored order in file order (empty if no file)."""

    @abstractmethod
    def save(self, orders: list[Order]) -> None:
        """Replace the stored ledger with *orders*."""
