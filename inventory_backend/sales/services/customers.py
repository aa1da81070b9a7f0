# sales/services/customers.py

"""
CUSTOMER BALANCE SERVICE

balance = total_payment_amount - total_invoice_amount

- invoices: every non-cancelled invoice of the customer
- payments: CASH / TRANSFER payments against non-cancelled invoices
"""

from __future__ import annotations

from decimal import Decimal

from django.db.models import Sum
from django.db.models.functions import Coalesce

from backend.errors import NotFoundError
from sales.models import Customer, Invoice, Payment

ZERO = Decimal("0.00")


def get_customer(*, company, customer_id) -> Customer:
    customer = Customer.objects.filter(company=company, pk=customer_id).first()
    if customer is None:
        raise NotFoundError(f"Customer {customer_id} not found")
    return customer


def update_customer_balance(customer: Customer) -> Customer:
    invoiced = (
        Invoice.objects.filter(customer=customer)
        .exclude(payment_status=Invoice.STATUS_CANCELLED)
        .aggregate(total=Coalesce(Sum("total_amount"), ZERO))["total"]
    )
    paid = (
        Payment.objects.filter(customer=customer, mode__in=Payment.RECEIVED_MODES)
        .exclude(invoice__payment_status=Invoice.STATUS_CANCELLED)
        .aggregate(total=Coalesce(Sum("amount"), ZERO))["total"]
    )

    customer.total_invoice_amount = invoiced
    customer.total_payment_amount = paid
    customer.balance = paid - invoiced
    customer.save(
        update_fields=["total_invoice_amount", "total_payment_amount", "balance", "updated_at"]
    )
    return customer
