# sales/services/payments.py

"""
PAYMENT SERVICE

- One payment per call, against one open (UNPAID / PART) invoice.
- Overpayment is refused; the invoice becomes PART or PAID.
- The first payment of an invoice writes its SalesTransaction rows.
- Customer balance is recomputed afterwards.
"""

from __future__ import annotations

import logging
from decimal import Decimal

from django.db import transaction
from django.utils import timezone

from backend.errors import InvalidStateError
from products.services.line_items import money
from sales.models import Invoice, Payment, SalesTransaction
from sales.services.customers import update_customer_balance
from sales.services.invoices import get_invoice

logger = logging.getLogger(__name__)


def _record_sales_transactions(invoice: Invoice) -> int:
    rows = [
        SalesTransaction(
            company_id=invoice.company_id,
            invoice=invoice,
            customer_id=invoice.customer_id,
            product_id=item.product_id,
            warehouse_id=item.warehouse_id,
            salesperson_id=invoice.created_by_id,
            quantity=item.quantity,
            rate=item.rate,
            amount=item.amount,
        )
        for item in invoice.items.all()
    ]
    SalesTransaction.objects.bulk_create(rows)
    return len(rows)


@transaction.atomic
def create_payment(
    *,
    company,
    invoice_id,
    amount,
    mode: str = Payment.MODE_CASH,
    reference: str = "",
    paid_at=None,
    user=None,
) -> Payment:
    invoice = get_invoice(company=company, invoice_id=invoice_id, lock=True)

    if invoice.payment_status not in Invoice.OPEN_STATUSES:
        raise InvalidStateError(
            f"Invoice {invoice.invoice_number} cannot take payments ({invoice.payment_status})"
        )
    if mode not in dict(Payment.MODE_CHOICES):
        raise InvalidStateError(f"Unknown payment mode {mode}")

    amt = money(amount)
    if amt <= Decimal("0.00"):
        raise InvalidStateError("Payment amount must be greater than zero")
    if amt > invoice.amount_due:
        raise InvalidStateError(
            f"Payment of {amt} exceeds amount due {invoice.amount_due} on {invoice.invoice_number}"
        )

    first_payment = not invoice.payments.exists()

    payment = Payment.objects.create(
        company=company,
        invoice=invoice,
        customer=invoice.customer,
        amount=amt,
        mode=mode,
        reference=(reference or "").strip(),
        received_by=user,
        paid_at=paid_at or timezone.now(),
    )

    invoice.amount_paid = (invoice.amount_paid or Decimal("0.00")) + amt
    invoice.payment_status = (
        Invoice.STATUS_PAID if invoice.amount_paid >= invoice.total_amount else Invoice.STATUS_PART
    )
    invoice.save(update_fields=["amount_paid", "payment_status", "updated_at"])

    if first_payment:
        _record_sales_transactions(invoice)

    update_customer_balance(invoice.customer)

    logger.info(
        "payment recorded",
        extra={
            "company_id": str(company.pk),
            "invoice": invoice.invoice_number,
            "amount": str(amt),
            "mode": mode,
            "status": invoice.payment_status,
        },
    )
    return payment
