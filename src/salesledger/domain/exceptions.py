"""Domain-level exceptions.

Every failure the ledger raises is a LedgerError tagged with an ErrorKind,
so the CLI layer can catch them uniformly and display user-friendly messages.
The subclasses exist so callers can still ``except NotFoundError`` directly.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(Enum):
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    IO = "io"


class LedgerError(Exception):
    """Base class for all ledger errors."""

    kind: ErrorKind = ErrorKind.VALIDATION

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(LedgerError):
    """Input was malformed or a business rule was violated."""

    kind = ErrorKind.VALIDATION


class NotFoundError(LedgerError):
    """A referenced order, product or order item does not exist."""

    kind = ErrorKind.NOT_FOUND


class IoError(LedgerError):
    """A record file could not be written."""

    kind = ErrorKind.IO
