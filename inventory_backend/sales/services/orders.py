"""
======================================================
PATH: sales/services/orders.py
======================================================
SALES ORDER SERVICE

Purpose:
- Create DRAFT or APPROVAL orders (numbered SO-0000001).
- Submitting an order reserves every line FIFO (opening -> committed),
  all-or-nothing.
- Orders above SALES_APPROVAL_QUANTITY_THRESHOLD wait for an approver
  (PENDING); smaller orders are APPROVED immediately.
- Reject / cancel release the reservation (committed -> opening).

Rules:
- Every status change goes through sales.services.lifecycle.
- stock_reserved tracks whether the order currently holds committed stock.
"""

from __future__ import annotations

import logging

from django.conf import settings
from django.core.exceptions import PermissionDenied
from django.db import transaction
from django.utils import timezone

from backend.errors import InvalidStateError, NotFoundError
from notifications.models import Notification
from notifications.services.notify import notify
from products.models import StockMovement
from products.services.document_lines import resolve_document_lines
from products.services.line_items import lines_from_rows, total_amount, total_quantity
from products.services.numbering import next_document_number
from products.services.stock_ledger import release_lines, reserve_lines
from sales.models import SalesOrder, SalesOrderItem
from sales.services.customers import get_customer
from sales.services.lifecycle import validate_transition
from users.models import User

logger = logging.getLogger(__name__)

ORDER_PREFIX = "SO"
ORDER_MODULE = "sales_order"


def approval_threshold() -> int:
    return int(getattr(settings, "SALES_APPROVAL_QUANTITY_THRESHOLD", 1000))


def get_order(*, company, order_id, lock: bool = False) -> SalesOrder:
    qs = SalesOrder.objects.filter(company=company, pk=order_id)
    if lock:
        qs = qs.select_for_update()
    order = qs.select_related("customer").first()
    if order is None:
        raise NotFoundError(f"Sales order {order_id} not found")
    return order


def _context(order: SalesOrder, **extra) -> dict:
    ctx = {
        "number": order.order_number,
        "customer": order.customer.name,
        "requester": order.created_by.display_name if order.created_by else "",
        "approver": order.approver.display_name if order.approver else "",
    }
    ctx.update(extra)
    return ctx


def _assert_approver(*, order: SalesOrder, user):
    if getattr(user, "is_superuser", False):
        return
    if order.approver_id != getattr(user, "pk", None):
        raise PermissionDenied("Only the designated approver can act on this order.")


def _write_lines(order: SalesOrder, doc_lines) -> None:
    SalesOrderItem.objects.bulk_create(
        [SalesOrderItem(order=order, **dl.row_kwargs()) for dl in doc_lines]
    )
    lines = [dl.line for dl in doc_lines]
    order.total_quantity = total_quantity(lines)
    order.total_amount = total_amount(lines)


def _reserve(order: SalesOrder, *, user, approver_id=None) -> SalesOrder:
    """
    Reserve all lines and move the order to PENDING or APPROVED.
    """
    lines = lines_from_rows(order.items.all())

    needs_approval = order.total_quantity > approval_threshold()
    target = SalesOrder.STATUS_PENDING if needs_approval else SalesOrder.STATUS_APPROVED
    validate_transition(order=order, target_status=target)

    if needs_approval:
        if not approver_id:
            raise InvalidStateError(
                f"Orders above {approval_threshold()} units require an approver"
            )
        approver = User.objects.filter(
            company=order.company, pk=approver_id, is_active=True
        ).first()
        if approver is None:
            raise NotFoundError(f"Approver {approver_id} not found")
        order.approver = approver

    reserve_lines(
        company=order.company,
        lines=lines,
        user=user,
        source_type=StockMovement.SourceType.SALES_ORDER,
        source_id=order.pk,
    )

    order.order_type = SalesOrder.TYPE_APPROVAL
    order.stock_reserved = True
    order.status = target
    if target == SalesOrder.STATUS_APPROVED:
        order.approved_at = timezone.now()
    order.save()

    if needs_approval:
        notify(
            kind=Notification.KIND_SALES_APPROVAL,
            recipient=order.approver,
            context=_context(order),
            company=order.company,
        )
    return order


def _release(order: SalesOrder, *, user) -> None:
    if not order.stock_reserved:
        return
    release_lines(
        company=order.company,
        lines=lines_from_rows(order.items.all()),
        user=user,
        source_type=StockMovement.SourceType.SALES_ORDER,
        source_id=order.pk,
    )
    order.stock_reserved = False


# ============================================================
# CREATE / EDIT / SUBMIT
# ============================================================


@transaction.atomic
def create_sales_order(
    *,
    company,
    customer_id,
    items,
    order_type: str = SalesOrder.TYPE_DRAFT,
    approver_id=None,
    order_date=None,
    comment: str = "",
    user=None,
) -> SalesOrder:
    customer = get_customer(company=company, customer_id=customer_id)
    doc_lines = resolve_document_lines(company=company, items=items)

    order = SalesOrder.objects.create(
        company=company,
        order_number=next_document_number(company=company, prefix=ORDER_PREFIX, module=ORDER_MODULE),
        customer=customer,
        order_type=SalesOrder.TYPE_DRAFT,
        status=SalesOrder.STATUS_DRAFT,
        created_by=user,
        order_date=order_date or timezone.localdate(),
        comment=(comment or "").strip(),
    )
    _write_lines(order, doc_lines)
    order.save(update_fields=["total_quantity", "total_amount", "updated_at"])

    if order_type == SalesOrder.TYPE_APPROVAL:
        _reserve(order, user=user, approver_id=approver_id)

    logger.info(
        "sales order created",
        extra={
            "company_id": str(company.pk),
            "order": order.order_number,
            "status": order.status,
            "quantity": order.total_quantity,
        },
    )
    return order


@transaction.atomic
def update_sales_order(*, company, order_id, items=None, customer_id=None, comment=None, user=None) -> SalesOrder:
    order = get_order(company=company, order_id=order_id, lock=True)
    if order.status != SalesOrder.STATUS_DRAFT:
        raise InvalidStateError(f"Sales order {order.order_number} is no longer a draft")

    if customer_id is not None:
        order.customer = get_customer(company=company, customer_id=customer_id)
    if comment is not None:
        order.comment = comment.strip()
    if items is not None:
        doc_lines = resolve_document_lines(company=company, items=items)
        order.items.all().delete()
        _write_lines(order, doc_lines)

    order.save()
    return order


@transaction.atomic
def submit_sales_order(*, company, order_id, approver_id=None, user=None) -> SalesOrder:
    order = get_order(company=company, order_id=order_id, lock=True)
    if order.status != SalesOrder.STATUS_DRAFT:
        raise InvalidStateError(f"Sales order {order.order_number} is not a draft")
    return _reserve(order, user=user, approver_id=approver_id)


# ============================================================
# APPROVAL
# ============================================================


@transaction.atomic
def approve_sales_order(*, company, order_id, user) -> SalesOrder:
    order = get_order(company=company, order_id=order_id, lock=True)
    _assert_approver(order=order, user=user)
    validate_transition(order=order, target_status=SalesOrder.STATUS_APPROVED)

    order.status = SalesOrder.STATUS_APPROVED
    order.approved_at = timezone.now()
    order.save()

    notify(
        kind=Notification.KIND_SALES_APPROVED,
        recipient=order.created_by,
        context=_context(order),
        company=company,
    )
    logger.info("sales order approved", extra={"order": order.order_number, "user_id": str(user.pk)})
    return order


@transaction.atomic
def reject_sales_order(*, company, order_id, comment: str = "", user) -> SalesOrder:
    order = get_order(company=company, order_id=order_id, lock=True)
    _assert_approver(order=order, user=user)
    validate_transition(order=order, target_status=SalesOrder.STATUS_REJECT)

    _release(order, user=user)
    order.status = SalesOrder.STATUS_REJECT
    if comment:
        order.comment = comment.strip()
    order.save()

    notify(
        kind=Notification.KIND_SALES_REJECTED,
        recipient=order.created_by,
        context=_context(order, comment=order.comment),
        company=company,
    )
    logger.info("sales order rejected", extra={"order": order.order_number, "user_id": str(user.pk)})
    return order


@transaction.atomic
def cancel_sales_order(*, company, order_id, user=None) -> SalesOrder:
    order = get_order(company=company, order_id=order_id, lock=True)
    validate_transition(order=order, target_status=SalesOrder.STATUS_CANCELLED)

    _release(order, user=user)
    order.status = SalesOrder.STATUS_CANCELLED
    order.save()

    logger.info("sales order cancelled", extra={"order": order.order_number})
    return order
