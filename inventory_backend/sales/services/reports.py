"""
======================================================
PATH: sales/services/reports.py
======================================================
REPORTING AGGREGATORS (READ-ONLY)

inventory_metrics(company, start, end):
- per product of the tenant:
  total_sold / total_sales_amount        (non-voided SalesTransaction rows)
  total_purchase_quantity / _amount      (PurchaseTransaction rows)
  quantity_left = total_stock - total_sold + total_purchase_quantity

debtors_report(company, start, end):
- per customer with UNPAID / PART invoices created in range:
  total_invoice_amount, total_payment_amount (CASH / TRANSFER payments in
  range against those invoices), balance = paid - invoiced, invoice numbers,
  salespeople

RULES:
- READ-ONLY: no writes, ever
- Date range is half-open: [start 00:00, end + 1 day 00:00) in the active
  time zone
"""

from __future__ import annotations

from collections import OrderedDict
from datetime import date as date_cls
from datetime import datetime, time, timedelta
from decimal import Decimal

from django.db.models import Sum
from django.db.models.functions import Coalesce
from django.utils import timezone

from backend.errors import InvalidStateError
from products.models import Product
from purchases.models import PurchaseTransaction
from sales.models import Invoice, Payment, SalesTransaction

ZERO = Decimal("0.00")


def parse_report_date(value, *, default: date_cls | None = None) -> date_cls:
    """YYYY-MM-DD (zero-padded), or `default` (today) when empty."""
    if value in (None, ""):
        return default or timezone.localdate()

    raw = str(value).strip()
    try:
        parsed = datetime.strptime(raw, "%Y-%m-%d").date()
    except ValueError as exc:
        raise InvalidStateError(f"Invalid date '{value}', expected YYYY-MM-DD") from exc

    # strptime also takes unpadded months and days
    if parsed.strftime("%Y-%m-%d") != raw:
        raise InvalidStateError(f"Invalid date '{value}', expected YYYY-MM-DD")
    return parsed


def range_bounds(start: date_cls, end: date_cls) -> tuple[datetime, datetime]:
    if end < start:
        raise InvalidStateError("end date must not be before start date")

    tz = timezone.get_current_timezone()
    lower = timezone.make_aware(datetime.combine(start, time.min), tz)
    upper = timezone.make_aware(datetime.combine(end + timedelta(days=1), time.min), tz)
    return lower, upper


def inventory_metrics(*, company, start: date_cls, end: date_cls) -> list[dict]:
    lower, upper = range_bounds(start, end)

    sold = {
        row["product_id"]: row
        for row in SalesTransaction.objects.filter(
            company=company,
            is_voided=False,
            created_at__gte=lower,
            created_at__lt=upper,
        )
        .values("product_id")
        .annotate(qty=Sum("quantity"), amount=Coalesce(Sum("amount"), ZERO))
    }

    bought = {
        row["product_id"]: row
        for row in PurchaseTransaction.objects.filter(
            company=company,
            created_at__gte=lower,
            created_at__lt=upper,
        )
        .values("product_id")
        .annotate(qty=Sum("quantity"), amount=Coalesce(Sum("amount"), ZERO))
    }

    rows = []
    for product in Product.objects.filter(company=company).order_by("name"):
        s = sold.get(product.pk, {})
        b = bought.get(product.pk, {})

        total_sold = int(s.get("qty") or 0)
        restocked = int(b.get("qty") or 0)

        rows.append(
            {
                "product_id": str(product.pk),
                "product_name": product.name,
                "sku": product.sku,
                "total_stock": int(product.total_stock),
                "total_sold": total_sold,
                "total_sales_amount": s.get("amount") or ZERO,
                "total_purchase_quantity": restocked,
                "total_purchase_amount": b.get("amount") or ZERO,
                "quantity_left": int(product.total_stock) - total_sold + restocked,
            }
        )
    return rows


def debtors_report(*, company, start: date_cls, end: date_cls) -> list[dict]:
    lower, upper = range_bounds(start, end)

    invoices = (
        Invoice.objects.filter(
            company=company,
            payment_status__in=Invoice.OPEN_STATUSES,
            created_at__gte=lower,
            created_at__lt=upper,
        )
        .select_related("customer", "created_by")
        .order_by("created_at")
    )

    report: "OrderedDict[object, dict]" = OrderedDict()
    for inv in invoices:
        entry = report.get(inv.customer_id)
        if entry is None:
            entry = {
                "customer_id": str(inv.customer_id),
                "customer_name": inv.customer.name,
                "invoice_ids": [],
                "invoice_numbers": [],
                "salespeople": [],
                "total_invoice_amount": ZERO,
                "total_payment_amount": ZERO,
            }
            report[inv.customer_id] = entry

        entry["invoice_ids"].append(inv.pk)
        entry["invoice_numbers"].append(inv.invoice_number)
        entry["total_invoice_amount"] += inv.total_amount or ZERO
        salesperson = inv.created_by.display_name if inv.created_by else ""
        if salesperson and salesperson not in entry["salespeople"]:
            entry["salespeople"].append(salesperson)

    rows = []
    for entry in report.values():
        paid = Payment.objects.filter(
            company=company,
            invoice_id__in=entry.pop("invoice_ids"),
            mode__in=Payment.RECEIVED_MODES,
            paid_at__gte=lower,
            paid_at__lt=upper,
        ).aggregate(total=Coalesce(Sum("amount"), ZERO))["total"]

        entry["total_payment_amount"] = paid
        entry["balance"] = paid - entry["total_invoice_amount"]
        rows.append(entry)

    return rows
