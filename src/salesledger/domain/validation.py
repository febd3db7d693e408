"""Input rules shared by the catalog and the ledger.

Names end up inside ``;``/``,``/``:``/``|`` delimited record lines, so the
patterns below keep those separators out of anything that gets persisted.
"""

from __future__ import annotations

import re

from salesledger.domain.exceptions import ValidationError
from salesledger.domain.model.order import OrderStatus
from salesledger.domain.model.value_objects import Quantity

_CLIENT_NAME_RE = re.compile(
    r"^[A-Za-zА-Яа-яЁё0-9]+(?:[ .\-][A-Za-zА-Яа-яЁё0-9]+)*$"
)
_PRODUCT_NAME_RE = re.compile(r"^[^\s|:;,](?:[^|:;,]*[^\s|:;,])?$")


def normalize_key(name: str) -> str:
    """Catalog key for a product name (case-insensitive identity)."""
    return name.lower()


def validate_client_name(name: str) -> str:
    if not isinstance(name, str) or not _CLIENT_NAME_RE.fullmatch(name):
        raise ValidationError(f"Invalid client name: {name!r}")
    return name


def validate_product_name(name: str) -> str:
    if not isinstance(name, str) or not _PRODUCT_NAME_RE.fullmatch(name):
        raise ValidationError(f"Invalid product name: {name!r}")
    return name


def validate_quantity(qty: int) -> int:
    return Quantity(qty).value


def validate_stock(stock: int) -> int:
    if isinstance(stock, bool) or not isinstance(stock, int):
        raise ValidationError(f"Stock must be an integer, got {stock!r}")
    if stock < 0:
        raise ValidationError("Stock cannot be negative")
    return stock


def validate_status(value: str | OrderStatus) -> OrderStatus:
    """Resolve one of the four status strings to an OrderStatus."""
    if isinstance(value, OrderStatus):
        return value
    try:
        return OrderStatus(value)
    except ValueError:
        raise ValidationError(
            f"Invalid status {value!r}; expected one of "
            f"{', '.join(s.value for s in OrderStatus)}"
        ) from None
