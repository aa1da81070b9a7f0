# sales/tests/test_reports.py

from datetime import date, datetime
from decimal import Decimal

from django.test import TestCase
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIClient

from backend.errors import InvalidStateError
from permissions.roles import ROLE_ACCOUNTANT, ROLE_SALES, ROLE_STOREKEEPER
from sales.models import SalesOrder, SalesTransaction
from sales.services.invoices import create_invoice
from sales.services.orders import create_sales_order
from sales.services.payments import create_payment
from sales.services.reports import (
    debtors_report,
    inventory_metrics,
    parse_report_date,
    range_bounds,
)
from tenants.tests.helpers import (
    make_company,
    make_customer,
    make_product,
    make_user,
    make_warehouse,
)


def _aware(*args):
    return timezone.make_aware(datetime(*args))


class ReportDateTests(TestCase):
    """
    GUARANTEES:
    - Dates parse as YYYY-MM-DD and default to today
    - Ranges are half-open on the day after `end`
    """

    def test_parse_valid_date(self):
        self.assertEqual(parse_report_date("2024-03-09"), date(2024, 3, 9))

    def test_parse_empty_defaults(self):
        self.assertEqual(parse_report_date(""), timezone.localdate())
        self.assertEqual(parse_report_date(None, default=date(2024, 1, 1)), date(2024, 1, 1))

    def test_parse_garbage_raises(self):
        for raw in ("09/03/2024", "2024-13-01", "2024-1-5", "yesterday"):
            with self.subTest(raw=raw):
                with self.assertRaises(InvalidStateError):
                    parse_report_date(raw)

    def test_range_is_half_open(self):
        lower, upper = range_bounds(date(2024, 3, 9), date(2024, 3, 10))
        self.assertEqual(lower, _aware(2024, 3, 9, 0, 0))
        self.assertEqual(upper, _aware(2024, 3, 11, 0, 0))

    def test_inverted_range_raises(self):
        with self.assertRaises(InvalidStateError):
            range_bounds(date(2024, 3, 10), date(2024, 3, 9))


class ReportAggregationTests(TestCase):
    """
    GUARANTEES:
    - Only non-voided sales transactions inside the range are counted
    - A row stamped exactly at end + 1 day is excluded
    - Debtors lists open invoices with paid - invoiced as the balance
    """

    def setUp(self):
        self.company = make_company()
        self.salesperson = make_user(self.company, role=ROLE_SALES, first_name="Ada")
        self.warehouse = make_warehouse(self.company)
        self.product = make_product(self.company, opening=[(self.warehouse, 100)])
        self.customer = make_customer(self.company)

        order = create_sales_order(
            company=self.company,
            customer_id=self.customer.pk,
            items=[
                {
                    "product_id": self.product.pk,
                    "warehouse_id": self.warehouse.pk,
                    "quantity": 10,
                    "rate": "10.00",
                }
            ],
            order_type=SalesOrder.TYPE_APPROVAL,
            user=self.salesperson,
        )
        self.invoice = create_invoice(
            company=self.company, sales_order_id=order.pk, user=self.salesperson
        )
        create_payment(company=self.company, invoice_id=self.invoice.pk, amount="25.00")

    def _metrics_row(self, start, end):
        rows = inventory_metrics(company=self.company, start=start, end=end)
        return next(r for r in rows if r["product_id"] == str(self.product.pk))

    def test_inventory_metrics_today(self):
        today = timezone.localdate()
        row = self._metrics_row(today, today)

        self.assertEqual(row["total_sold"], 10)
        self.assertEqual(row["total_sales_amount"], Decimal("100.00"))
        self.assertEqual(row["total_stock"], 100)
        self.assertEqual(row["quantity_left"], 90)

    def test_transaction_on_upper_bound_is_excluded(self):
        SalesTransaction.objects.update(created_at=_aware(2024, 3, 11, 0, 0))

        inside = self._metrics_row(date(2024, 3, 11), date(2024, 3, 11))
        outside = self._metrics_row(date(2024, 3, 9), date(2024, 3, 10))

        self.assertEqual(inside["total_sold"], 10)
        self.assertEqual(outside["total_sold"], 0)

    def test_voided_transactions_are_ignored(self):
        SalesTransaction.objects.update(is_voided=True)
        today = timezone.localdate()

        self.assertEqual(self._metrics_row(today, today)["total_sold"], 0)

    def test_debtors_report(self):
        today = timezone.localdate()
        rows = debtors_report(company=self.company, start=today, end=today)

        self.assertEqual(len(rows), 1)
        row = rows[0]
        self.assertEqual(row["customer_name"], self.customer.name)
        self.assertEqual(row["invoice_numbers"], [self.invoice.invoice_number])
        self.assertEqual(row["total_invoice_amount"], Decimal("100.00"))
        self.assertEqual(row["total_payment_amount"], Decimal("25.00"))
        self.assertEqual(row["balance"], Decimal("-75.00"))
        self.assertEqual(len(row["salespeople"]), 1)

    def test_paid_invoice_drops_off_debtors(self):
        create_payment(company=self.company, invoice_id=self.invoice.pk, amount="75.00")
        today = timezone.localdate()

        self.assertEqual(debtors_report(company=self.company, start=today, end=today), [])


class ReportApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.company = make_company()
        self.accountant = make_user(self.company, role=ROLE_ACCOUNTANT)
        self.storekeeper = make_user(self.company, role=ROLE_STOREKEEPER)
        make_product(self.company, opening=[(make_warehouse(self.company), 3)])

    def test_accountant_reads_inventory_metrics(self):
        self.client.force_authenticate(self.accountant)

        response = self.client.get(
            reverse("reports:inventory-metrics"), {"start": "2024-03-01", "end": "2024-03-31"}
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["start"], "2024-03-01")
        self.assertEqual(response.data["count"], 1)
        self.assertEqual(response.data["results"][0]["total_stock"], 3)

    def test_bad_date_returns_400(self):
        self.client.force_authenticate(self.accountant)
        response = self.client.get(reverse("reports:debtors"), {"start": "03/01/2024"})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_storekeeper_cannot_read_reports(self):
        self.client.force_authenticate(self.storekeeper)
        response = self.client.get(reverse("reports:debtors"))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
