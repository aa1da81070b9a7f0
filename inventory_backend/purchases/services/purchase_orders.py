"""
======================================================
PATH: purchases/services/purchase_orders.py
======================================================
PURCHASE ORDER SERVICE

Lifecycle:
- create (DRAFT, or APPROVAL -> PENDING with an approver / APPROVED without)
- submit / approve / reject / cancel
- confirm (APPROVED only): goods receipt

Goods receipt (atomic):
1) Lock order
2) For each line: intake_batch() in the line's warehouse, unit cost = rate,
   Product.total_stock += quantity
3) PurchaseTransaction per line
4) PurchaseConfirmation row
5) Order -> COMPLETED

No stock moves before confirmation.
"""

from __future__ import annotations

import logging
from decimal import Decimal

from django.core.exceptions import PermissionDenied
from django.db import transaction
from django.utils import timezone

from backend.errors import InvalidStateError, NotFoundError
from notifications.models import Notification
from notifications.services.notify import notify
from products.models import StockMovement
from products.services.document_lines import resolve_document_lines
from products.services.line_items import total_amount, total_quantity
from products.services.numbering import next_document_number
from products.services.stock_intake import intake_batch
from purchases.models import (
    PurchaseConfirmation,
    PurchaseOrder,
    PurchaseOrderItem,
    PurchaseTransaction,
    Supplier,
)
from purchases.services.lifecycle import validate_transition
from users.models import User

logger = logging.getLogger(__name__)

ORDER_PREFIX = "PO"
ORDER_MODULE = "purchase_order"


def get_supplier(*, company, supplier_id) -> Supplier:
    supplier = Supplier.objects.filter(company=company, pk=supplier_id).first()
    if supplier is None:
        raise NotFoundError(f"Supplier {supplier_id} not found")
    return supplier


def get_purchase_order(*, company, order_id, lock: bool = False) -> PurchaseOrder:
    qs = PurchaseOrder.objects.filter(company=company, pk=order_id)
    if lock:
        qs = qs.select_for_update()
    order = qs.select_related("supplier").first()
    if order is None:
        raise NotFoundError(f"Purchase order {order_id} not found")
    return order


def _context(order: PurchaseOrder, **extra) -> dict:
    ctx = {
        "number": order.order_number,
        "supplier": order.supplier.name,
        "requester": order.created_by.display_name if order.created_by else "",
        "approver": order.approver.display_name if order.approver else "",
    }
    ctx.update(extra)
    return ctx


def _assert_approver(*, order: PurchaseOrder, user):
    if getattr(user, "is_superuser", False):
        return
    if order.approver_id != getattr(user, "pk", None):
        raise PermissionDenied("Only the designated approver can act on this order.")


def _submit(order: PurchaseOrder, *, approver_id=None) -> PurchaseOrder:
    if approver_id:
        approver = User.objects.filter(
            company=order.company, pk=approver_id, is_active=True
        ).first()
        if approver is None:
            raise NotFoundError(f"Approver {approver_id} not found")
        target = PurchaseOrder.STATUS_PENDING
    else:
        approver = None
        target = PurchaseOrder.STATUS_APPROVED

    validate_transition(order=order, target_status=target)

    order.order_type = PurchaseOrder.TYPE_APPROVAL
    order.approver = approver
    order.status = target
    if target == PurchaseOrder.STATUS_APPROVED:
        order.approved_at = timezone.now()
    order.save()

    if approver is not None:
        notify(
            kind=Notification.KIND_PURCHASE_APPROVAL,
            recipient=approver,
            context=_context(order),
            company=order.company,
        )
    return order


@transaction.atomic
def create_purchase_order(
    *,
    company,
    supplier_id,
    items,
    order_type: str = PurchaseOrder.TYPE_DRAFT,
    approver_id=None,
    order_date=None,
    comment: str = "",
    user=None,
) -> PurchaseOrder:
    supplier = get_supplier(company=company, supplier_id=supplier_id)
    doc_lines = resolve_document_lines(company=company, items=items)
    lines = [dl.line for dl in doc_lines]

    order = PurchaseOrder.objects.create(
        company=company,
        order_number=next_document_number(company=company, prefix=ORDER_PREFIX, module=ORDER_MODULE),
        supplier=supplier,
        order_type=PurchaseOrder.TYPE_DRAFT,
        status=PurchaseOrder.STATUS_DRAFT,
        order_date=order_date or timezone.localdate(),
        comment=(comment or "").strip(),
        total_quantity=total_quantity(lines),
        total_amount=total_amount(lines),
        created_by=user,
    )
    PurchaseOrderItem.objects.bulk_create(
        [PurchaseOrderItem(order=order, **dl.row_kwargs()) for dl in doc_lines]
    )

    if order_type == PurchaseOrder.TYPE_APPROVAL:
        _submit(order, approver_id=approver_id)

    logger.info(
        "purchase order created",
        extra={"company_id": str(company.pk), "order": order.order_number, "status": order.status},
    )
    return order


@transaction.atomic
def submit_purchase_order(*, company, order_id, approver_id=None, user=None) -> PurchaseOrder:
    order = get_purchase_order(company=company, order_id=order_id, lock=True)
    if order.status != PurchaseOrder.STATUS_DRAFT:
        raise InvalidStateError(f"Purchase order {order.order_number} is not a draft")
    return _submit(order, approver_id=approver_id)


@transaction.atomic
def approve_purchase_order(*, company, order_id, user) -> PurchaseOrder:
    order = get_purchase_order(company=company, order_id=order_id, lock=True)
    _assert_approver(order=order, user=user)
    validate_transition(order=order, target_status=PurchaseOrder.STATUS_APPROVED)

    order.status = PurchaseOrder.STATUS_APPROVED
    order.approved_at = timezone.now()
    order.save()

    notify(
        kind=Notification.KIND_PURCHASE_APPROVED,
        recipient=order.created_by,
        context=_context(order),
        company=company,
    )
    return order


@transaction.atomic
def reject_purchase_order(*, company, order_id, comment: str = "", user) -> PurchaseOrder:
    order = get_purchase_order(company=company, order_id=order_id, lock=True)
    _assert_approver(order=order, user=user)
    validate_transition(order=order, target_status=PurchaseOrder.STATUS_REJECT)

    order.status = PurchaseOrder.STATUS_REJECT
    if comment:
        order.comment = comment.strip()
    order.save()

    notify(
        kind=Notification.KIND_PURCHASE_REJECTED,
        recipient=order.created_by,
        context=_context(order, comment=order.comment),
        company=company,
    )
    return order


@transaction.atomic
def cancel_purchase_order(*, company, order_id, user=None) -> PurchaseOrder:
    order = get_purchase_order(company=company, order_id=order_id, lock=True)
    validate_transition(order=order, target_status=PurchaseOrder.STATUS_CANCELLED)
    order.status = PurchaseOrder.STATUS_CANCELLED
    order.save()
    return order


@transaction.atomic
def confirm_purchase_order(*, company, order_id, comment: str = "", user=None) -> PurchaseConfirmation:
    order = get_purchase_order(company=company, order_id=order_id, lock=True)

    if order.status != PurchaseOrder.STATUS_APPROVED:
        raise InvalidStateError(
            f"Purchase order {order.order_number} must be APPROVED before confirmation"
        )

    items = list(order.items.select_related("product", "warehouse"))
    if not items:
        raise InvalidStateError("Purchase order has no items")

    transactions = []
    for item in items:
        batch = intake_batch(
            company=company,
            product=item.product,
            warehouse=item.warehouse,
            quantity=item.quantity,
            unit_cost=item.rate,
            user=user,
            reason=StockMovement.Reason.RECEIPT,
            source_type=StockMovement.SourceType.PURCHASE_ORDER,
            source_id=order.pk,
            increment_total_stock=True,
        )
        item.received_batch = batch
        item.save(update_fields=["received_batch"])

        transactions.append(
            PurchaseTransaction(
                company=company,
                order=order,
                supplier=order.supplier,
                product=item.product,
                warehouse=item.warehouse,
                batch=batch,
                quantity=item.quantity,
                rate=item.rate,
                amount=item.amount,
            )
        )
    PurchaseTransaction.objects.bulk_create(transactions)

    confirmation = PurchaseConfirmation.objects.create(
        company=company,
        order=order,
        confirmed_by=user,
        total_quantity=sum(int(i.quantity) for i in items),
        total_amount=sum((i.amount for i in items), Decimal("0.00")),
        comment=(comment or "").strip(),
    )

    validate_transition(order=order, target_status=PurchaseOrder.STATUS_COMPLETED)
    order.status = PurchaseOrder.STATUS_COMPLETED
    order.save()

    logger.info(
        "purchase order confirmed",
        extra={
            "company_id": str(company.pk),
            "order": order.order_number,
            "lines": len(items),
        },
    )
    return confirmation
