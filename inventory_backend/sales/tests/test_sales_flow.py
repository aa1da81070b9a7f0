# sales/tests/test_sales_flow.py

from decimal import Decimal

from django.core.exceptions import PermissionDenied
from django.test import TestCase, override_settings

from backend.errors import (
    ConflictError,
    InsufficientStockError,
    InvalidStateError,
    InvalidTransitionError,
)
from notifications.models import Notification
from permissions.roles import ROLE_MANAGER, ROLE_SALES
from products.models import Product, StockBatch
from sales.models import Invoice, SalesOrder, SalesTransaction
from sales.services.invoices import cancel_invoice, create_invoice
from sales.services.orders import (
    approve_sales_order,
    cancel_sales_order,
    create_sales_order,
    reject_sales_order,
    submit_sales_order,
    update_sales_order,
)
from sales.services.payments import create_payment
from tenants.tests.helpers import (
    make_company,
    make_customer,
    make_product,
    make_user,
    make_warehouse,
)


class SalesFlowBase(TestCase):
    def setUp(self):
        self.company = make_company()
        self.salesperson = make_user(self.company, role=ROLE_SALES)
        self.manager = make_user(self.company, role=ROLE_MANAGER)
        self.warehouse = make_warehouse(self.company)
        self.product = make_product(self.company, opening=[(self.warehouse, 100)])
        self.batch = StockBatch.objects.get(product=self.product)
        self.customer = make_customer(self.company)

    def _items(self, qty=30, rate="10.00"):
        return [
            {
                "product_id": self.product.pk,
                "warehouse_id": self.warehouse.pk,
                "quantity": qty,
                "rate": rate,
            }
        ]

    def _order(self, qty=30, order_type=SalesOrder.TYPE_APPROVAL, **kwargs):
        return create_sales_order(
            company=self.company,
            customer_id=self.customer.pk,
            items=self._items(qty),
            order_type=order_type,
            user=self.salesperson,
            **kwargs,
        )

    def _batch(self):
        self.batch.refresh_from_db()
        return self.batch.opening_stock, self.batch.committed_quantity

    def _total_stock(self):
        return Product.objects.get(pk=self.product.pk).total_stock


class SalesOrderTests(SalesFlowBase):
    """
    Sales order tests.

    GUARANTEES:
    - Drafts hold no stock
    - Submitting reserves every line or nothing
    - Cancel and reject release exactly what was reserved
    - Large orders wait for their approver
    """

    def test_draft_reserves_nothing(self):
        order = self._order(order_type=SalesOrder.TYPE_DRAFT)

        self.assertEqual(order.status, SalesOrder.STATUS_DRAFT)
        self.assertFalse(order.stock_reserved)
        self.assertEqual(order.order_number, "SO-0000001")
        self.assertEqual(order.total_amount, Decimal("300.00"))
        self.assertEqual(self._batch(), (100, 0))

    def test_submit_reserves_and_approves(self):
        order = self._order(order_type=SalesOrder.TYPE_DRAFT)

        order = submit_sales_order(company=self.company, order_id=order.pk, user=self.salesperson)

        self.assertEqual(order.status, SalesOrder.STATUS_APPROVED)
        self.assertTrue(order.stock_reserved)
        self.assertEqual(self._batch(), (70, 30))

    def test_insufficient_stock_creates_nothing(self):
        with self.assertRaises(InsufficientStockError):
            self._order(qty=101)

        self.assertFalse(SalesOrder.objects.exists())
        self.assertEqual(self._batch(), (100, 0))

    def test_draft_can_be_edited(self):
        order = self._order(order_type=SalesOrder.TYPE_DRAFT)

        order = update_sales_order(
            company=self.company, order_id=order.pk, items=self._items(qty=4, rate="2.50")
        )

        self.assertEqual(order.total_quantity, 4)
        self.assertEqual(order.total_amount, Decimal("10.00"))
        self.assertEqual(order.items.count(), 1)

    def test_approved_order_cannot_be_edited(self):
        order = self._order()
        with self.assertRaises(InvalidStateError):
            update_sales_order(company=self.company, order_id=order.pk, comment="late")

    def test_cancel_releases_reservation(self):
        order = self._order()

        order = cancel_sales_order(company=self.company, order_id=order.pk, user=self.salesperson)

        self.assertEqual(order.status, SalesOrder.STATUS_CANCELLED)
        self.assertFalse(order.stock_reserved)
        self.assertEqual(self._batch(), (100, 0))

    def test_cancelled_order_cannot_be_cancelled_again(self):
        order = self._order()
        cancel_sales_order(company=self.company, order_id=order.pk)

        with self.assertRaises(InvalidTransitionError):
            cancel_sales_order(company=self.company, order_id=order.pk)

    @override_settings(SALES_APPROVAL_QUANTITY_THRESHOLD=20)
    def test_large_order_requires_approver(self):
        with self.assertRaises(InvalidStateError):
            self._order(qty=30)

    @override_settings(SALES_APPROVAL_QUANTITY_THRESHOLD=20)
    def test_large_order_waits_for_approval(self):
        order = self._order(qty=30, approver_id=self.manager.pk)

        self.assertEqual(order.status, SalesOrder.STATUS_PENDING)
        self.assertEqual(self._batch(), (70, 30))
        self.assertTrue(
            Notification.objects.filter(
                recipient=self.manager, kind=Notification.KIND_SALES_APPROVAL
            ).exists()
        )

        with self.assertRaises(PermissionDenied):
            approve_sales_order(company=self.company, order_id=order.pk, user=self.salesperson)

        order = approve_sales_order(company=self.company, order_id=order.pk, user=self.manager)
        self.assertEqual(order.status, SalesOrder.STATUS_APPROVED)
        self.assertIsNotNone(order.approved_at)

    @override_settings(SALES_APPROVAL_QUANTITY_THRESHOLD=20)
    def test_rejection_releases_reservation(self):
        order = self._order(qty=30, approver_id=self.manager.pk)

        order = reject_sales_order(
            company=self.company, order_id=order.pk, comment="credit hold", user=self.manager
        )

        self.assertEqual(order.status, SalesOrder.STATUS_REJECT)
        self.assertEqual(self._batch(), (100, 0))
        note = Notification.objects.get(
            recipient=self.salesperson, kind=Notification.KIND_SALES_REJECTED
        )
        self.assertIn("credit hold", note.message)


class InvoiceTests(SalesFlowBase):
    """
    Invoice tests.

    GUARANTEES:
    - Invoicing consumes committed stock and leaves total_stock unchanged
    - Cancelling restores opening stock and adds the quantity to total_stock
    - An order is invoiced at most once
    """

    def test_reserve_invoice_cancel_scenario(self):
        order = self._order(qty=30)
        self.assertEqual(self._batch(), (70, 30))

        invoice = create_invoice(company=self.company, sales_order_id=order.pk, user=self.salesperson)
        self.assertEqual(self._batch(), (70, 0))
        self.assertEqual(self._total_stock(), 100)

        order.refresh_from_db()
        self.assertEqual(order.status, SalesOrder.STATUS_COMPLETED)
        self.assertFalse(order.stock_reserved)
        self.assertEqual(invoice.invoice_number, "INV-0000001")
        self.assertEqual(invoice.total_amount, Decimal("300.00"))
        self.assertEqual(invoice.payment_status, Invoice.STATUS_UNPAID)

        cancel_invoice(company=self.company, invoice_id=invoice.pk, user=self.manager)
        self.assertEqual(self._batch(), (100, 0))
        self.assertEqual(self._total_stock(), 130)

        invoice.refresh_from_db()
        self.assertEqual(invoice.payment_status, Invoice.STATUS_CANCELLED)
        self.assertEqual(invoice.cancelled_by, self.manager)

    def test_second_invoice_for_same_order_conflicts(self):
        order = self._order()
        create_invoice(company=self.company, sales_order_id=order.pk)

        with self.assertRaises(ConflictError):
            create_invoice(company=self.company, sales_order_id=order.pk)

    def test_draft_order_cannot_be_invoiced(self):
        order = self._order(order_type=SalesOrder.TYPE_DRAFT)
        with self.assertRaises(InvalidStateError):
            create_invoice(company=self.company, sales_order_id=order.pk)

    def test_invoice_updates_customer_balance(self):
        order = self._order()
        create_invoice(company=self.company, sales_order_id=order.pk)

        self.customer.refresh_from_db()
        self.assertEqual(self.customer.total_invoice_amount, Decimal("300.00"))
        self.assertEqual(self.customer.balance, Decimal("-300.00"))

    def test_cancelled_invoice_cannot_be_cancelled_twice(self):
        order = self._order()
        invoice = create_invoice(company=self.company, sales_order_id=order.pk)
        cancel_invoice(company=self.company, invoice_id=invoice.pk)

        with self.assertRaises(InvalidStateError):
            cancel_invoice(company=self.company, invoice_id=invoice.pk)
        self.assertEqual(self._total_stock(), 130)


class PaymentTests(SalesFlowBase):
    """
    Payment tests.

    GUARANTEES:
    - Partial payments mark the invoice PART, full payment PAID
    - Overpayment is refused
    - The first payment writes one sales transaction per invoice line
    - A paid invoice cannot be cancelled
    """

    def setUp(self):
        super().setUp()
        order = self._order(qty=10)
        self.invoice = create_invoice(company=self.company, sales_order_id=order.pk)

    def _pay(self, amount, mode="CASH"):
        return create_payment(
            company=self.company, invoice_id=self.invoice.pk, amount=amount, mode=mode
        )

    def test_partial_then_full_payment(self):
        self._pay("40.00")
        self.invoice.refresh_from_db()
        self.assertEqual(self.invoice.payment_status, Invoice.STATUS_PART)
        self.assertEqual(self.invoice.amount_due, Decimal("60.00"))

        self._pay("60.00", mode="TRANSFER")
        self.invoice.refresh_from_db()
        self.assertEqual(self.invoice.payment_status, Invoice.STATUS_PAID)

        self.customer.refresh_from_db()
        self.assertEqual(self.customer.balance, Decimal("0.00"))

    def test_overpayment_is_refused(self):
        with self.assertRaises(InvalidStateError):
            self._pay("100.01")

    def test_first_payment_records_sales_transactions(self):
        self._pay("10.00")
        self._pay("10.00")

        rows = SalesTransaction.objects.filter(invoice=self.invoice)
        self.assertEqual(rows.count(), 1)
        self.assertEqual(rows.get().quantity, 10)

    def test_paid_invoice_cannot_be_cancelled(self):
        self._pay("100.00")
        with self.assertRaises(InvalidStateError):
            cancel_invoice(company=self.company, invoice_id=self.invoice.pk)

    def test_cancel_voids_sales_transactions(self):
        self._pay("10.00")
        cancel_invoice(company=self.company, invoice_id=self.invoice.pk)

        self.assertTrue(SalesTransaction.objects.get(invoice=self.invoice).is_voided)

    def test_cancelled_invoice_takes_no_payment(self):
        cancel_invoice(company=self.company, invoice_id=self.invoice.pk)
        with self.assertRaises(InvalidStateError):
            self._pay("1.00")
