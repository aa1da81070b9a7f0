# purchases/tests/test_purchases.py

from decimal import Decimal

from django.core.exceptions import PermissionDenied
from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from backend.errors import InvalidStateError, InvalidTransitionError
from notifications.models import Notification
from permissions.roles import ROLE_MANAGER, ROLE_SALES, ROLE_STOREKEEPER
from products.models import Product, StockBatch, StockMovement
from purchases.models import PurchaseOrder, PurchaseTransaction, Supplier
from purchases.services.purchase_orders import (
    approve_purchase_order,
    cancel_purchase_order,
    confirm_purchase_order,
    create_purchase_order,
    reject_purchase_order,
    submit_purchase_order,
)
from tenants.tests.helpers import make_company, make_product, make_user, make_warehouse


class PurchaseOrderServiceTests(TestCase):
    """
    Purchase order tests.

    GUARANTEES:
    - No stock moves before confirmation
    - Confirmation needs APPROVED and creates one batch per line at the line rate
    - total_stock grows by the received quantity
    - Confirmation happens once
    """

    def setUp(self):
        self.company = make_company()
        self.buyer = make_user(self.company, role=ROLE_STOREKEEPER)
        self.manager = make_user(self.company, role=ROLE_MANAGER)
        self.main = make_warehouse(self.company, name="Main")
        self.branch = make_warehouse(self.company, name="Branch")
        self.product = make_product(self.company, opening=[(self.main, 10)])
        self.supplier = Supplier.objects.create(company=self.company, name="Delta Metals")

    def _create(self, *, order_type=PurchaseOrder.TYPE_APPROVAL, approver_id=None):
        return create_purchase_order(
            company=self.company,
            supplier_id=self.supplier.pk,
            items=[
                {
                    "product_id": self.product.pk,
                    "warehouse_id": self.main.pk,
                    "quantity": 20,
                    "rate": "4.50",
                },
                {
                    "product_id": self.product.pk,
                    "warehouse_id": self.branch.pk,
                    "quantity": 5,
                    "rate": "5.00",
                },
            ],
            order_type=order_type,
            approver_id=approver_id,
            user=self.buyer,
        )

    def _total_stock(self):
        return Product.objects.get(pk=self.product.pk).total_stock

    def test_approval_without_approver_is_approved(self):
        order = self._create()

        self.assertEqual(order.order_number, "PO-0000001")
        self.assertEqual(order.status, PurchaseOrder.STATUS_APPROVED)
        self.assertEqual(order.total_quantity, 25)
        self.assertEqual(order.total_amount, Decimal("115.00"))
        self.assertEqual(self._total_stock(), 10)

    def test_approval_with_approver_waits(self):
        order = self._create(approver_id=self.manager.pk)

        self.assertEqual(order.status, PurchaseOrder.STATUS_PENDING)
        self.assertTrue(
            Notification.objects.filter(
                recipient=self.manager, kind=Notification.KIND_PURCHASE_APPROVAL
            ).exists()
        )

    def test_only_approver_decides(self):
        order = self._create(approver_id=self.manager.pk)

        with self.assertRaises(PermissionDenied):
            approve_purchase_order(company=self.company, order_id=order.pk, user=self.buyer)

        order = approve_purchase_order(company=self.company, order_id=order.pk, user=self.manager)
        self.assertEqual(order.status, PurchaseOrder.STATUS_APPROVED)

    def test_rejection_notifies_creator(self):
        order = self._create(approver_id=self.manager.pk)

        order = reject_purchase_order(
            company=self.company, order_id=order.pk, comment="too pricey", user=self.manager
        )

        self.assertEqual(order.status, PurchaseOrder.STATUS_REJECT)
        note = Notification.objects.get(recipient=self.buyer)
        self.assertEqual(note.kind, Notification.KIND_PURCHASE_REJECTED)

    def test_draft_submit(self):
        order = self._create(order_type=PurchaseOrder.TYPE_DRAFT)
        self.assertEqual(order.status, PurchaseOrder.STATUS_DRAFT)

        order = submit_purchase_order(company=self.company, order_id=order.pk)
        self.assertEqual(order.status, PurchaseOrder.STATUS_APPROVED)

        with self.assertRaises(InvalidStateError):
            submit_purchase_order(company=self.company, order_id=order.pk)

    def test_confirm_receives_stock(self):
        order = self._create()

        confirmation = confirm_purchase_order(company=self.company, order_id=order.pk, user=self.buyer)

        self.assertEqual(confirmation.total_quantity, 25)
        self.assertEqual(confirmation.total_amount, Decimal("115.00"))
        self.assertEqual(self._total_stock(), 35)

        received = StockBatch.objects.filter(
            stock_movements__source_type=StockMovement.SourceType.PURCHASE_ORDER,
            stock_movements__source_id=order.pk,
        ).distinct()
        self.assertEqual(
            sorted((b.warehouse_name, b.opening_stock, b.unit_cost) for b in received),
            [("Branch", 5, Decimal("5.00")), ("Main", 20, Decimal("4.50"))],
        )

        order.refresh_from_db()
        self.assertEqual(order.status, PurchaseOrder.STATUS_COMPLETED)
        self.assertEqual(PurchaseTransaction.objects.filter(order=order).count(), 2)
        self.assertTrue(all(item.received_batch_id for item in order.items.all()))

    def test_confirm_requires_approval(self):
        order = self._create(approver_id=self.manager.pk)

        with self.assertRaises(InvalidStateError):
            confirm_purchase_order(company=self.company, order_id=order.pk)
        self.assertEqual(self._total_stock(), 10)
        self.assertEqual(StockBatch.objects.count(), 1)

    def test_confirm_twice_is_refused(self):
        order = self._create()
        confirm_purchase_order(company=self.company, order_id=order.pk)

        with self.assertRaises(InvalidStateError):
            confirm_purchase_order(company=self.company, order_id=order.pk)
        self.assertEqual(self._total_stock(), 35)

    def test_completed_order_cannot_be_cancelled(self):
        order = self._create()
        confirm_purchase_order(company=self.company, order_id=order.pk)

        with self.assertRaises(InvalidTransitionError):
            cancel_purchase_order(company=self.company, order_id=order.pk)


class PurchaseApiTests(TestCase):
    """
    GUARANTEES:
    - A storekeeper orders and receives, a manager decides
    - Other roles cannot touch purchasing
    """

    def setUp(self):
        self.client = APIClient()
        self.company = make_company()
        self.buyer = make_user(self.company, role=ROLE_STOREKEEPER)
        self.manager = make_user(self.company, role=ROLE_MANAGER)
        self.sales = make_user(self.company, role=ROLE_SALES)
        self.warehouse = make_warehouse(self.company)
        self.product = make_product(self.company)

    def _supplier(self):
        self.client.force_authenticate(self.buyer)
        response = self.client.post(
            reverse("purchases:suppliers"), {"name": "Delta Metals"}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        return response.data["id"]

    def _order(self, supplier_id):
        return self.client.post(
            reverse("purchases:orders"),
            {
                "supplier_id": supplier_id,
                "order_type": "APPROVAL",
                "approver_id": str(self.manager.pk),
                "items": [
                    {
                        "product_id": str(self.product.pk),
                        "warehouse_id": str(self.warehouse.pk),
                        "quantity": 12,
                        "rate": "3.00",
                    }
                ],
            },
            format="json",
        )

    def test_order_decide_confirm(self):
        created = self._order(self._supplier())
        self.assertEqual(created.status_code, status.HTTP_201_CREATED, created.data)
        order_id = created.data["id"]

        denied = self.client.post(
            reverse("purchases:order-decision", args=[order_id]), {"status": "APPROVED"}, format="json"
        )
        self.assertEqual(denied.status_code, status.HTTP_403_FORBIDDEN)

        early = self.client.post(reverse("purchases:order-confirm", args=[order_id]), {}, format="json")
        self.assertEqual(early.status_code, status.HTTP_400_BAD_REQUEST)

        self.client.force_authenticate(self.manager)
        decided = self.client.post(
            reverse("purchases:order-decision", args=[order_id]), {"status": "APPROVED"}, format="json"
        )
        self.assertEqual(decided.status_code, status.HTTP_200_OK, decided.data)

        self.client.force_authenticate(self.buyer)
        confirmed = self.client.post(
            reverse("purchases:order-confirm", args=[order_id]), {"comment": "all boxes"}, format="json"
        )
        self.assertEqual(confirmed.status_code, status.HTTP_201_CREATED, confirmed.data)
        self.assertEqual(confirmed.data["total_quantity"], 12)

        self.product.refresh_from_db()
        self.assertEqual(self.product.total_stock, 12)

        detail = self.client.get(reverse("purchases:order-detail", args=[order_id]))
        self.assertEqual(detail.data["status"], "COMPLETED")
        self.assertIsNotNone(detail.data["items"][0]["received_batch"])

    def test_unknown_supplier_returns_404(self):
        self.client.force_authenticate(self.buyer)
        response = self._order("00000000-0000-0000-0000-000000000000")
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_sales_role_is_forbidden(self):
        self.client.force_authenticate(self.sales)
        response = self.client.get(reverse("purchases:orders"))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
