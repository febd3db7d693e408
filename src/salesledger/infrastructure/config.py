"""Runtime settings: where the record files live and how loudly to log."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

DATA_DIR_ENV = "SALESLEDGER_DATA_DIR"
LOG_LEVEL_ENV = "SALESLEDGER_LOG_LEVEL"
DEFAULT_LOG_LEVEL = "WARNING"

# Resolve data directory relative to the project root.
# When installed in editable mode the project root is the repo root.
DEFAULT_DATA_DIR = Path(__file__).resolve().parents[3] / "data"


@dataclass(frozen=True)
class Settings:
    data_dir: Path = DEFAULT_DATA_DIR
    orders_file: str = "orders.txt"
    products_file: str = "products.txt"
    log_level: str = DEFAULT_LOG_LEVEL

    @property
    def orders_path(self) -> Path:
        return self.data_dir / self.orders_file

    @property
    def products_path(self) -> Path:
        return self.data_dir / self.products_file

    @staticmethod
    def from_env() -> Settings:
        """Defaults, overridden by ``SALESLEDGER_*`` environment variables."""
        data_dir = os.environ.get(DATA_DIR_ENV)
        log_level = os.environ.get(LOG_LEVEL_ENV, DEFAULT_LOG_LEVEL).strip().upper()
        # getLevelName maps known names to their number, anything else to a str
        if not isinstance(logging.getLevelName(log_level), int):
            log_level = DEFAULT_LOG_LEVEL
        return Settings(
            data_dir=Path(data_dir).expanduser() if data_dir else DEFAULT_DATA_DIR,
            log_level=log_level,
        )
