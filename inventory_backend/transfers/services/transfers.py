"""
======================================================
PATH: transfers/services/transfers.py
======================================================
STOCK TRANSFER WORKFLOW (APPLICATION SERVICE)

Purpose:
- Create a transfer request (PENDING) and notify its approver.
- Approve / reject it (designated approver only).
- Confirm it (APPROVED only): every line leaves its source batch and arrives
  as a new batch in the receiving warehouse, atomically.
- Edit (PENDING, initiator) and delete (PENDING / REJECT).

Rules:
- Creating a request validates source availability but moves no stock.
- Confirmation re-checks every source batch with a conditional decrement;
  any shortfall rolls back the whole confirmation.
- Product.total_stock is unchanged by a transfer.
"""

from __future__ import annotations

import logging
from collections import defaultdict

from django.core.exceptions import PermissionDenied
from django.db import transaction
from django.utils import timezone

from backend.errors import InsufficientStockError, InvalidStateError, NotFoundError
from notifications.models import Notification
from notifications.services.notify import notify
from products.models import Product, StockBatch
from products.services.line_items import to_int_qty
from products.services.numbering import next_document_number
from products.services.stock_ledger import transfer_from_batch
from transfers.models import StockRequest, StockRequestItem
from transfers.services.lifecycle import (
    APPROVAL_DECISIONS,
    CONFIRMATION_STATES,
    DELETABLE_STATES,
    EDITABLE_STATES,
    validate_transition,
)
from users.models import User

logger = logging.getLogger(__name__)

REQUEST_PREFIX = "REQ"
REQUEST_MODULE = "stock_request"


# ============================================================
# HELPERS
# ============================================================


def get_request(*, company, request_id, lock: bool = False) -> StockRequest:
    qs = StockRequest.objects.filter(company=company, pk=request_id)
    if lock:
        qs = qs.select_for_update()
    req = qs.select_related("sending_warehouse", "receiving_warehouse").first()
    if req is None:
        raise NotFoundError(f"Stock request {request_id} not found")
    return req


def _get_approver(*, company, approver_id) -> User:
    approver = User.objects.filter(company=company, pk=approver_id, is_active=True).first()
    if approver is None:
        raise NotFoundError(f"Approver {approver_id} not found")
    return approver


def _build_items(*, company, sending_warehouse, items) -> list[StockRequestItem]:
    """
    Validate lines against the sending warehouse and return unsaved rows.

    Quantities drawn from the same batch are summed before the availability
    check.
    """
    if not items:
        raise InvalidStateError("At least one item is required")

    rows = []
    per_batch = defaultdict(int)
    batches = {}

    for raw in items:
        qty = to_int_qty(raw.get("quantity"))
        if qty <= 0:
            raise InvalidStateError("quantity must be greater than zero")

        product = Product.objects.filter(company=company, pk=raw.get("product_id")).first()
        if product is None:
            raise NotFoundError(f"Product {raw.get('product_id')} not found")

        batch = StockBatch.objects.filter(
            company=company,
            pk=raw.get("batch_id"),
            product=product,
            warehouse=sending_warehouse,
        ).first()
        if batch is None:
            raise NotFoundError(
                f"Stock batch {raw.get('batch_id')} not found for product "
                f"{product.name} in warehouse {sending_warehouse.name}"
            )

        per_batch[batch.pk] += qty
        batches[batch.pk] = batch
        rows.append(
            StockRequestItem(
                product=product,
                source_batch=batch,
                quantity=qty,
                unit_cost=batch.unit_cost,
            )
        )

    for batch_id, wanted in per_batch.items():
        batch = batches[batch_id]
        if int(batch.opening_stock) < wanted:
            raise InsufficientStockError(
                f"Insufficient quantity for product {batch.product.name} in batch {batch.batch_number}"
            )

    return rows


def _assert_approver(*, req: StockRequest, user):
    if getattr(user, "is_superuser", False):
        return
    if req.approver_id != getattr(user, "pk", None):
        raise PermissionDenied("Only the designated approver can act on this request.")


def _context(req: StockRequest, **extra) -> dict:
    ctx = {
        "number": req.request_number,
        "sending": req.sending_warehouse.name,
        "receiving": req.receiving_warehouse.name,
        "requester": req.requested_by.display_name if req.requested_by else "",
        "approver": req.approver.display_name,
    }
    ctx.update(extra)
    return ctx


# ============================================================
# CREATE / EDIT / DELETE
# ============================================================


@transaction.atomic
def create_transfer_request(
    *,
    company,
    sending_warehouse,
    receiving_warehouse,
    approver_id,
    items,
    comment: str = "",
    request_date=None,
    user=None,
) -> StockRequest:
    if sending_warehouse.pk == receiving_warehouse.pk:
        raise InvalidStateError("Sending and receiving warehouse must differ")

    approver = _get_approver(company=company, approver_id=approver_id)
    rows = _build_items(company=company, sending_warehouse=sending_warehouse, items=items)

    req = StockRequest.objects.create(
        company=company,
        request_number=next_document_number(
            company=company, prefix=REQUEST_PREFIX, module=REQUEST_MODULE
        ),
        sending_warehouse=sending_warehouse,
        receiving_warehouse=receiving_warehouse,
        requested_by=user,
        approver=approver,
        comment=(comment or "").strip(),
        request_date=request_date or timezone.localdate(),
    )
    for row in rows:
        row.request = req
    StockRequestItem.objects.bulk_create(rows)

    notify(
        kind=Notification.KIND_TRANSFER_REQUEST,
        recipient=approver,
        context=_context(req),
        company=company,
    )

    logger.info(
        "transfer requested",
        extra={
            "company_id": str(company.pk),
            "request": req.request_number,
            "lines": len(rows),
        },
    )
    return req


@transaction.atomic
def update_transfer_request(
    *,
    company,
    request_id,
    user,
    receiving_warehouse=None,
    approver_id=None,
    items=None,
    comment=None,
) -> StockRequest:
    req = get_request(company=company, request_id=request_id, lock=True)

    if req.status not in EDITABLE_STATES:
        raise InvalidStateError(f"Stock request {req.request_number} can no longer be edited")
    if req.requested_by_id != getattr(user, "pk", None) and not getattr(user, "is_superuser", False):
        raise PermissionDenied("Only the initiator can edit this request.")

    if receiving_warehouse is not None:
        if receiving_warehouse.pk == req.sending_warehouse_id:
            raise InvalidStateError("Sending and receiving warehouse must differ")
        req.receiving_warehouse = receiving_warehouse
    if approver_id is not None:
        req.approver = _get_approver(company=company, approver_id=approver_id)
    if comment is not None:
        req.comment = comment.strip()

    if items is not None:
        rows = _build_items(company=company, sending_warehouse=req.sending_warehouse, items=items)
        req.items.all().delete()
        for row in rows:
            row.request = req
        StockRequestItem.objects.bulk_create(rows)

    req.save()
    return req


@transaction.atomic
def delete_transfer_request(*, company, request_id, user=None) -> None:
    req = get_request(company=company, request_id=request_id, lock=True)
    if req.status not in DELETABLE_STATES:
        raise InvalidStateError(
            f"Stock request {req.request_number} cannot be deleted in status {req.status}"
        )
    number = req.request_number
    req.delete()
    logger.info("transfer deleted", extra={"company_id": str(company.pk), "request": number})


# ============================================================
# APPROVAL
# ============================================================


@transaction.atomic
def decide_transfer_request(*, company, request_id, status: str, comment: str = "", user) -> StockRequest:
    """
    Approver sets APPROVED or REJECT. No stock moves on either decision.
    """
    if status not in APPROVAL_DECISIONS:
        raise InvalidStateError(f"Invalid approval status '{status}'")

    req = get_request(company=company, request_id=request_id, lock=True)
    _assert_approver(req=req, user=user)
    validate_transition(request=req, target_status=status)

    req.status = status
    if comment:
        req.comment = comment.strip()
    if status == StockRequest.STATUS_APPROVED:
        req.approved_at = timezone.now()
    req.save()

    kind = (
        Notification.KIND_TRANSFER_APPROVED
        if status == StockRequest.STATUS_APPROVED
        else Notification.KIND_TRANSFER_REJECTED
    )
    notify(
        kind=kind,
        recipient=req.requested_by,
        context=_context(req, comment=req.comment),
        company=company,
    )

    logger.info(
        "transfer decided",
        extra={"request": req.request_number, "status": status, "user_id": str(user.pk)},
    )
    return req


# ============================================================
# CONFIRMATION (MOVES STOCK)
# ============================================================


@transaction.atomic
def confirm_transfer_request(
    *,
    company,
    request_id,
    status: str = StockRequest.STATUS_CONFIRM,
    user=None,
) -> StockRequest:
    """
    Only an APPROVED request can be confirmed. Every line moves; a failure on
    any line rolls back the lines before it.
    """
    req = get_request(company=company, request_id=request_id, lock=True)

    if req.status != StockRequest.STATUS_APPROVED:
        raise InvalidStateError(
            f"Stock request {req.request_number} must be APPROVED before confirmation"
        )
    validate_transition(request=req, target_status=status)

    items = list(req.items.select_related("product", "source_batch"))
    if not items:
        raise InvalidStateError("Stock request has no items")

    if status in CONFIRMATION_STATES:
        for item in items:
            if not Product.objects.filter(company=company, pk=item.product_id).exists():
                raise NotFoundError(f"Product {item.product_id} not found")

            received = transfer_from_batch(
                company=company,
                source_batch_id=item.source_batch_id,
                receiving_warehouse=req.receiving_warehouse,
                quantity=item.quantity,
                request_id=req.pk,
                user=user,
            )
            item.received_batch = received
            item.save(update_fields=["received_batch"])

        req.confirmed_at = timezone.now()
        req.confirmed_by = user

    req.status = status
    req.save()

    if status in CONFIRMATION_STATES:
        notify(
            kind=Notification.KIND_TRANSFER_CONFIRMED,
            recipient=req.requested_by,
            context=_context(req),
            company=company,
        )

    logger.info(
        "transfer confirmed",
        extra={
            "company_id": str(company.pk),
            "request": req.request_number,
            "status": status,
            "lines": len(items),
        },
    )
    return req
