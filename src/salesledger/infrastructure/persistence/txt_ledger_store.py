"""Flat-text-file implementation of LedgerStore, one order per line."""

from __future__ import annotations

import logging
from pathlib import Path

from salesledger.domain.exceptions import IoError, ValidationError
from salesledger.domain.model.order import Order
from salesledger.domain.repository.ledger_store import LedgerStore
from salesledger.infrastructure.persistence.order_record_codec import (
    decode_order,
    encode_order,
)

logger = logging.getLogger(__name__)


class TxtLedgerStore(LedgerStore):

    def __init__(self, file_path: Path) -> None:
        self._file_path = Path(file_path)

    # --- LedgerStore interface ------------------------------------------------

    def load(self) -> list[Order]:
        if not self._file_path.exists():
            logger.debug("No ledger file at %s; starting empty", self._file_path)
            return []

        orders: list[Order] = []
        with self._file_path.open(encoding="utf-8") as fh:
            for lineno, line in enumerate(fh, start=1):
                if not line.strip():
                    continue
                try:
                    orders.append(decode_order(line))
                except ValidationError as exc:
                    logger.warning(
                        "Skipping %s line %d: %s", self._file_path.name, lineno, exc
                    )
        return orders

    def save(self, orders: list[Order]) -> None:
        lines = [encode_order(order) + "\n" for order in orders]
        try:
            with self._file_path.open("w", encoding="utf-8") as fh:
                fh.writelines(lines)
        except OSError as exc:
            raise IoError(f"Cannot open file for write: {self._file_path}") from exc
        logger.debug("Wrote %d orders to %s", len(orders), self._file_path)
