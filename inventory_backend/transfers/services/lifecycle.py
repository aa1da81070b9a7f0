"""
TRANSFER LIFECYCLE DOMAIN RULES

This module defines the ONLY allowed lifecycle transitions
for StockRequest entities.

DESIGN PRINCIPLES:
- No database writes
- No stock mutation
- Single source of truth
"""

from backend.errors import InvalidTransitionError
from transfers.models import StockRequest

# ============================================================
# STATE DEFINITIONS
# ============================================================

TERMINAL_STATES = {
    StockRequest.STATUS_REJECT,
    StockRequest.STATUS_CONFIRM,
    StockRequest.STATUS_COMPLETED,
}

ALLOWED_TRANSITIONS = {
    StockRequest.STATUS_PENDING: {
        StockRequest.STATUS_APPROVED,
        StockRequest.STATUS_REJECT,
    },
    StockRequest.STATUS_APPROVED: {
        StockRequest.STATUS_REJECT,
        StockRequest.STATUS_CONFIRM,
        StockRequest.STATUS_COMPLETED,
    },
}

# Statuses the approver may set through the approval endpoint.
APPROVAL_DECISIONS = {StockRequest.STATUS_APPROVED, StockRequest.STATUS_REJECT}

# Statuses that move stock when set through the confirmation endpoint.
CONFIRMATION_STATES = {StockRequest.STATUS_CONFIRM, StockRequest.STATUS_COMPLETED}

EDITABLE_STATES = {StockRequest.STATUS_PENDING}
DELETABLE_STATES = {StockRequest.STATUS_PENDING, StockRequest.STATUS_REJECT}


# ============================================================
# DOMAIN RULES
# ============================================================


def can_transition(*, from_status: str, to_status: str) -> bool:
    if from_status in TERMINAL_STATES:
        return False

    return to_status in ALLOWED_TRANSITIONS.get(from_status, set())


def validate_transition(*, request: StockRequest, target_status: str):
    if not can_transition(
        from_status=request.status,
        to_status=target_status,
    ):
        raise InvalidTransitionError(
            f"Stock request {request.request_number} cannot transition from "
            f"'{request.status}' to '{target_status}'"
        )
