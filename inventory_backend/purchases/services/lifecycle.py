"""
PURCHASE ORDER LIFECYCLE DOMAIN RULES

The ONLY allowed transitions for PurchaseOrder entities.
No database writes, no stock mutation.
"""

from backend.errors import InvalidTransitionError
from purchases.models import PurchaseOrder

TERMINAL_STATES = {
    PurchaseOrder.STATUS_REJECT,
    PurchaseOrder.STATUS_COMPLETED,
    PurchaseOrder.STATUS_CANCELLED,
}

ALLOWED_TRANSITIONS = {
    PurchaseOrder.STATUS_DRAFT: {
        PurchaseOrder.STATUS_PENDING,
        PurchaseOrder.STATUS_APPROVED,
        PurchaseOrder.STATUS_CANCELLED,
    },
    PurchaseOrder.STATUS_PENDING: {
        PurchaseOrder.STATUS_APPROVED,
        PurchaseOrder.STATUS_REJECT,
        PurchaseOrder.STATUS_CANCELLED,
    },
    PurchaseOrder.STATUS_APPROVED: {
        PurchaseOrder.STATUS_COMPLETED,
        PurchaseOrder.STATUS_CANCELLED,
    },
}


def can_transition(*, from_status: str, to_status: str) -> bool:
    if from_status in TERMINAL_STATES:
        return False

    return to_status in ALLOWED_TRANSITIONS.get(from_status, set())


def validate_transition(*, order: PurchaseOrder, target_status: str):
    if not can_transition(from_status=order.status, to_status=target_status):
        raise InvalidTransitionError(
            f"Purchase order {order.order_number} cannot transition from "
            f"'{order.status}' to '{target_status}'"
        )
