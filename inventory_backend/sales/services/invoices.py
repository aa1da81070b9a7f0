"""
======================================================
PATH: sales/services/invoices.py
======================================================
INVOICE SERVICE

create_invoice:
- the sales order must be APPROVED (holding its reservation)
- each product's invoiced quantity must not exceed Product.total_stock
- committed stock is consumed FIFO (FULFIL movements); opening stock and
  Product.total_stock are untouched
- the order becomes COMPLETED, the invoice starts UNPAID

cancel_invoice:
- refused for PAID or already CANCELLED invoices
- every FULFIL movement of the invoice is reversed onto the same batch's
  opening stock, and Product.total_stock grows by the invoiced quantity
- sales transactions of the invoice are voided
"""

from __future__ import annotations

import logging
from collections import defaultdict

from django.db import transaction
from django.utils import timezone

from backend.errors import ConflictError, InsufficientStockError, InvalidStateError, NotFoundError
from products.models import Product
from products.services.line_items import lines_from_rows, total_amount, total_quantity
from products.services.numbering import next_document_number
from products.services.stock_ledger import consume_committed, restore_invoice_stock
from sales.models import Invoice, InvoiceItem, SalesOrder, SalesTransaction
from sales.services.customers import update_customer_balance
from sales.services.lifecycle import validate_transition
from sales.services.orders import get_order

logger = logging.getLogger(__name__)

INVOICE_PREFIX = "INV"
INVOICE_MODULE = "invoice"


def get_invoice(*, company, invoice_id, lock: bool = False) -> Invoice:
    qs = Invoice.objects.filter(company=company, pk=invoice_id)
    if lock:
        qs = qs.select_for_update()
    invoice = qs.select_related("customer").first()
    if invoice is None:
        raise NotFoundError(f"Invoice {invoice_id} not found")
    return invoice


def _check_total_stock(*, company, lines) -> None:
    per_product = defaultdict(int)
    for line in lines:
        per_product[line.product_id] += int(line.quantity)

    for product_id, qty in per_product.items():
        product = Product.objects.filter(company=company, pk=product_id).first()
        if product is None:
            raise NotFoundError(f"Product {product_id} not found")
        if qty > int(product.total_stock):
            raise InsufficientStockError(f"Insufficient quantity for product {product.name}")


@transaction.atomic
def create_invoice(
    *,
    company,
    sales_order_id,
    invoice_date=None,
    due_date=None,
    comment: str = "",
    user=None,
) -> Invoice:
    order = get_order(company=company, order_id=sales_order_id, lock=True)

    if order.invoices.exclude(payment_status=Invoice.STATUS_CANCELLED).exists():
        raise ConflictError(f"Sales order {order.order_number} is already invoiced")
    if order.status != SalesOrder.STATUS_APPROVED:
        raise InvalidStateError(
            f"Sales order {order.order_number} must be APPROVED before invoicing"
        )

    order_items = list(order.items.select_related("warehouse"))
    lines = lines_from_rows(order_items)
    _check_total_stock(company=company, lines=lines)

    invoice = Invoice.objects.create(
        company=company,
        invoice_number=next_document_number(
            company=company, prefix=INVOICE_PREFIX, module=INVOICE_MODULE
        ),
        sales_order=order,
        customer=order.customer,
        created_by=user,
        invoice_date=invoice_date or timezone.localdate(),
        due_date=due_date,
        total_quantity=total_quantity(lines),
        total_amount=total_amount(lines),
        comment=(comment or "").strip(),
    )
    InvoiceItem.objects.bulk_create(
        [
            InvoiceItem(
                invoice=invoice,
                product_id=item.product_id,
                warehouse_id=item.warehouse_id,
                warehouse_name=item.warehouse_name or item.warehouse.name,
                quantity=item.quantity,
                rate=item.rate,
                amount=item.amount,
            )
            for item in order_items
        ]
    )

    consume_committed(company=company, lines=lines, invoice_id=invoice.pk, user=user)

    validate_transition(order=order, target_status=SalesOrder.STATUS_COMPLETED)
    order.status = SalesOrder.STATUS_COMPLETED
    order.stock_reserved = False
    order.save()

    update_customer_balance(order.customer)

    logger.info(
        "invoice created",
        extra={
            "company_id": str(company.pk),
            "invoice": invoice.invoice_number,
            "order": order.order_number,
            "amount": str(invoice.total_amount),
        },
    )
    return invoice


@transaction.atomic
def cancel_invoice(*, company, invoice_id, comment: str = "", user=None) -> Invoice:
    invoice = get_invoice(company=company, invoice_id=invoice_id, lock=True)

    if invoice.payment_status == Invoice.STATUS_CANCELLED:
        raise InvalidStateError(f"Invoice {invoice.invoice_number} is already cancelled")
    if invoice.payment_status == Invoice.STATUS_PAID:
        raise InvalidStateError(f"Invoice {invoice.invoice_number} is fully paid")

    restore_invoice_stock(
        company=company,
        invoice_id=invoice.pk,
        lines=lines_from_rows(invoice.items.all()),
        user=user,
    )

    now = timezone.now()
    invoice.payment_status = Invoice.STATUS_CANCELLED
    invoice.cancelled_at = now
    invoice.cancelled_by = user
    if comment:
        invoice.comment = comment.strip()
    invoice.save()

    SalesTransaction.objects.filter(invoice=invoice, is_voided=False).update(
        is_voided=True, voided_at=now
    )

    update_customer_balance(invoice.customer)

    logger.info(
        "invoice cancelled",
        extra={"company_id": str(company.pk), "invoice": invoice.invoice_number},
    )
    return invoice
