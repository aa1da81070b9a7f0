# backend/errors.py

"""
LEDGER ERROR TAXONOMY

Every domain failure raised by a service derives from LedgerError.
Each class carries the HTTP status it maps to; backend.exception_handler
turns them into {"detail": "..."} responses.

Classes:
- NotFoundError          -> 404 (missing product / warehouse / batch / approver / company)
- ConflictError          -> 409 (duplicate serials, batch numbers, names)
- InvalidStateError      -> 400 (wrong workflow state, bad quantities)
  - InsufficientStockError   (not enough opening or committed stock)
  - StockReleaseError        (committed stock cannot cover a release)
  - InvalidTransitionError   (state machine refused the move)
"""

from __future__ import annotations


class LedgerError(Exception):
    """Base exception for all ledger service failures."""

    status_code = 400
    default_message = "Request could not be processed"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFoundError(LedgerError):
    status_code = 404
    default_message = "Not found"


class ConflictError(LedgerError):
    status_code = 409
    default_message = "Conflict"


class InvalidStateError(LedgerError):
    status_code = 400
    default_message = "Invalid state"


class InsufficientStockError(InvalidStateError):
    """Raised when opening or committed stock cannot cover a request."""


class StockReleaseError(InvalidStateError):
    """Raised when committed stock cannot be returned in full."""


class InvalidTransitionError(InvalidStateError):
    """Raised when a workflow refuses a status change."""
