"""
SALES ORDER LIFECYCLE DOMAIN RULES

This module defines the ONLY allowed lifecycle transitions
for SalesOrder entities.

DESIGN PRINCIPLES:
- No database writes
- No stock mutation
- Single source of truth
"""

from backend.errors import InvalidTransitionError
from sales.models import SalesOrder

# ============================================================
# STATE DEFINITIONS
# ============================================================

TERMINAL_STATES = {
    SalesOrder.STATUS_REJECT,
    SalesOrder.STATUS_COMPLETED,
    SalesOrder.STATUS_CANCELLED,
}

ALLOWED_TRANSITIONS = {
    SalesOrder.STATUS_DRAFT: {
        SalesOrder.STATUS_PENDING,
        SalesOrder.STATUS_APPROVED,
        SalesOrder.STATUS_CANCELLED,
    },
    SalesOrder.STATUS_PENDING: {
        SalesOrder.STATUS_APPROVED,
        SalesOrder.STATUS_REJECT,
        SalesOrder.STATUS_CANCELLED,
    },
    SalesOrder.STATUS_APPROVED: {
        SalesOrder.STATUS_COMPLETED,
        SalesOrder.STATUS_CANCELLED,
    },
}


# ============================================================
# DOMAIN RULES
# ============================================================


def can_transition(*, from_status: str, to_status: str) -> bool:
    if from_status in TERMINAL_STATES:
        return False

    return to_status in ALLOWED_TRANSITIONS.get(from_status, set())


def validate_transition(*, order: SalesOrder, target_status: str):
    if not can_transition(
        from_status=order.status,
        to_status=target_status,
    ):
        raise InvalidTransitionError(
            f"Sales order {order.order_number} cannot transition from "
            f"'{order.status}' to '{target_status}'"
        )
