# transfers/tests/test_transfers.py

from django.core.exceptions import PermissionDenied
from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from backend.errors import InsufficientStockError, InvalidStateError
from notifications.models import Notification
from permissions.roles import ROLE_MANAGER, ROLE_SALES, ROLE_STOREKEEPER
from products.models import Product, StockBatch, StockMovement
from transfers.models import StockRequest
from transfers.services.transfers import (
    confirm_transfer_request,
    create_transfer_request,
    decide_transfer_request,
    delete_transfer_request,
    update_transfer_request,
)
from tenants.tests.helpers import make_company, make_product, make_user, make_warehouse


class TransferServiceTests(TestCase):
    """
    Transfer workflow tests.

    GUARANTEES:
    - Creating or approving a request never moves stock
    - Confirmation is only possible from APPROVED
    - Confirmation moves every line into new batches at the destination
    - Only the designated approver decides
    """

    def setUp(self):
        self.company = make_company()
        self.requester = make_user(self.company, role=ROLE_STOREKEEPER)
        self.approver = make_user(self.company, role=ROLE_MANAGER)

        self.main = make_warehouse(self.company, name="Main")
        self.branch = make_warehouse(self.company, name="Branch")

        self.product = make_product(self.company, opening=[(self.main, 40)])
        self.batch = StockBatch.objects.get(product=self.product)

    def _create(self, qty=15):
        return create_transfer_request(
            company=self.company,
            sending_warehouse=self.main,
            receiving_warehouse=self.branch,
            approver_id=self.approver.pk,
            items=[{"product_id": self.product.pk, "batch_id": self.batch.pk, "quantity": qty}],
            user=self.requester,
        )

    def _approve(self, req):
        return decide_transfer_request(
            company=self.company,
            request_id=req.pk,
            status=StockRequest.STATUS_APPROVED,
            user=self.approver,
        )

    def test_create_is_pending_and_numbered(self):
        req = self._create()

        self.assertEqual(req.status, StockRequest.STATUS_PENDING)
        self.assertEqual(req.request_number, "REQ-0000001")
        self.assertEqual(req.items.count(), 1)

        self.batch.refresh_from_db()
        self.assertEqual(self.batch.opening_stock, 40)

    def test_create_notifies_approver(self):
        self._create()

        note = Notification.objects.get(recipient=self.approver)
        self.assertEqual(note.kind, Notification.KIND_TRANSFER_REQUEST)
        self.assertIn("REQ-0000001", note.title)
        self.assertIn("Main", note.message)

    def test_create_over_batch_quantity_raises(self):
        with self.assertRaises(InsufficientStockError):
            self._create(qty=41)
        self.assertFalse(StockRequest.objects.exists())

    def test_same_warehouse_is_rejected(self):
        with self.assertRaises(InvalidStateError):
            create_transfer_request(
                company=self.company,
                sending_warehouse=self.main,
                receiving_warehouse=self.main,
                approver_id=self.approver.pk,
                items=[{"product_id": self.product.pk, "batch_id": self.batch.pk, "quantity": 1}],
                user=self.requester,
            )

    def test_approval_moves_no_stock(self):
        req = self._approve(self._create())

        self.assertEqual(req.status, StockRequest.STATUS_APPROVED)
        self.assertIsNotNone(req.approved_at)
        self.batch.refresh_from_db()
        self.assertEqual(self.batch.opening_stock, 40)

    def test_only_designated_approver_decides(self):
        req = self._create()
        with self.assertRaises(PermissionDenied):
            decide_transfer_request(
                company=self.company,
                request_id=req.pk,
                status=StockRequest.STATUS_APPROVED,
                user=self.requester,
            )

    def test_confirm_from_pending_is_refused(self):
        req = self._create()
        with self.assertRaises(InvalidStateError):
            confirm_transfer_request(company=self.company, request_id=req.pk, user=self.requester)

        req.refresh_from_db()
        self.assertEqual(req.status, StockRequest.STATUS_PENDING)

    def test_confirm_moves_stock_to_destination(self):
        req = self._approve(self._create())
        total_before = Product.objects.get(pk=self.product.pk).total_stock

        req = confirm_transfer_request(company=self.company, request_id=req.pk, user=self.requester)

        self.assertEqual(req.status, StockRequest.STATUS_CONFIRM)
        self.assertEqual(req.confirmed_by, self.requester)

        self.batch.refresh_from_db()
        self.assertEqual(self.batch.opening_stock, 25)

        received = StockBatch.objects.get(warehouse=self.branch)
        self.assertEqual(received.opening_stock, 15)
        self.assertEqual(received.unit_cost, self.batch.unit_cost)
        self.assertEqual(req.items.get().received_batch, received)

        self.assertEqual(Product.objects.get(pk=self.product.pk).total_stock, total_before)
        self.assertEqual(
            StockMovement.objects.filter(source_id=req.pk).count(), 2
        )

    def test_confirm_twice_is_refused(self):
        req = self._approve(self._create())
        confirm_transfer_request(company=self.company, request_id=req.pk, user=self.requester)

        with self.assertRaises(InvalidStateError):
            confirm_transfer_request(company=self.company, request_id=req.pk, user=self.requester)
        self.assertEqual(StockBatch.objects.filter(warehouse=self.branch).count(), 1)

    def test_confirm_fails_when_batch_was_drained_after_approval(self):
        req = self._approve(self._create(qty=30))
        StockBatch.objects.filter(pk=self.batch.pk).update(opening_stock=10)

        with self.assertRaises(InsufficientStockError):
            confirm_transfer_request(company=self.company, request_id=req.pk, user=self.requester)

        req.refresh_from_db()
        self.assertEqual(req.status, StockRequest.STATUS_APPROVED)
        self.assertFalse(StockBatch.objects.filter(warehouse=self.branch).exists())

    def test_failed_line_rolls_back_every_line(self):
        conduit = make_product(self.company, name="PVC Conduit", opening=[(self.main, 10)])
        conduit_batch = StockBatch.objects.get(product=conduit)

        req = create_transfer_request(
            company=self.company,
            sending_warehouse=self.main,
            receiving_warehouse=self.branch,
            approver_id=self.approver.pk,
            items=[
                {"product_id": self.product.pk, "batch_id": self.batch.pk, "quantity": 4},
                {"product_id": conduit.pk, "batch_id": conduit_batch.pk, "quantity": 6},
            ],
            user=self.requester,
        )
        self._approve(req)
        StockBatch.objects.filter(pk=conduit_batch.pk).update(opening_stock=2)

        with self.assertRaises(InsufficientStockError):
            confirm_transfer_request(company=self.company, request_id=req.pk, user=self.requester)

        self.batch.refresh_from_db()
        self.assertEqual(self.batch.opening_stock, 40)
        self.assertFalse(StockBatch.objects.filter(warehouse=self.branch).exists())
        self.assertFalse(req.items.filter(received_batch__isnull=False).exists())

        StockBatch.objects.filter(pk=conduit_batch.pk).update(opening_stock=10)
        confirm_transfer_request(company=self.company, request_id=req.pk, user=self.requester)

        received = sorted(
            StockBatch.objects.filter(warehouse=self.branch).values_list("opening_stock", flat=True)
        )
        self.assertEqual(received, [4, 6])
        self.batch.refresh_from_db()
        self.assertEqual(self.batch.opening_stock, 36)

    def test_only_pending_requests_are_editable(self):
        req = self._create()
        req = update_transfer_request(
            company=self.company, request_id=req.pk, user=self.requester, comment="urgent"
        )
        self.assertEqual(req.comment, "urgent")

        self._approve(req)
        with self.assertRaises(InvalidStateError):
            update_transfer_request(
                company=self.company, request_id=req.pk, user=self.requester, comment="late"
            )

    def test_rejected_request_can_be_deleted(self):
        req = self._create()
        decide_transfer_request(
            company=self.company,
            request_id=req.pk,
            status=StockRequest.STATUS_REJECT,
            user=self.approver,
        )

        delete_transfer_request(company=self.company, request_id=req.pk, user=self.requester)
        self.assertFalse(StockRequest.objects.exists())


class TransferApiTests(TestCase):
    """
    GUARANTEES:
    - The full request -> decision -> confirm flow works over HTTP
    - Workflow errors come back as 400, unknown ids as 404
    """

    def setUp(self):
        self.client = APIClient()
        self.company = make_company()
        self.requester = make_user(self.company, role=ROLE_STOREKEEPER)
        self.approver = make_user(self.company, role=ROLE_MANAGER)
        self.sales = make_user(self.company, role=ROLE_SALES)

        self.main = make_warehouse(self.company, name="Main")
        self.branch = make_warehouse(self.company, name="Branch")
        self.product = make_product(self.company, opening=[(self.main, 20)])
        self.batch = StockBatch.objects.get(product=self.product)

    def _payload(self, qty=5):
        return {
            "sending_warehouse_id": str(self.main.pk),
            "receiving_warehouse_id": str(self.branch.pk),
            "approver_id": str(self.approver.pk),
            "items": [
                {"product_id": str(self.product.pk), "batch_id": str(self.batch.pk), "quantity": qty}
            ],
        }

    def test_full_flow(self):
        self.client.force_authenticate(self.requester)
        created = self.client.post(reverse("transfers:stock-request-list"), self._payload(), format="json")
        self.assertEqual(created.status_code, status.HTTP_201_CREATED, created.data)
        request_id = created.data["id"]

        early = self.client.post(reverse("transfers:stock-request-confirm", args=[request_id]), {}, format="json")
        self.assertEqual(early.status_code, status.HTTP_400_BAD_REQUEST)

        self.client.force_authenticate(self.approver)
        decided = self.client.post(
            reverse("transfers:stock-request-decision", args=[request_id]),
            {"status": "APPROVED"},
            format="json",
        )
        self.assertEqual(decided.status_code, status.HTTP_200_OK, decided.data)
        self.assertEqual(decided.data["status"], "APPROVED")

        self.client.force_authenticate(self.requester)
        confirmed = self.client.post(
            reverse("transfers:stock-request-confirm", args=[request_id]), {}, format="json"
        )
        self.assertEqual(confirmed.status_code, status.HTTP_200_OK, confirmed.data)
        self.assertEqual(confirmed.data["status"], "CONFIRM")
        self.assertIsNotNone(confirmed.data["items"][0]["received_batch"])

    def test_sales_role_cannot_request_transfers(self):
        self.client.force_authenticate(self.sales)
        response = self.client.post(reverse("transfers:stock-request-list"), self._payload(), format="json")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_storekeeper_cannot_decide(self):
        self.client.force_authenticate(self.requester)
        created = self.client.post(reverse("transfers:stock-request-list"), self._payload(), format="json")

        response = self.client.post(
            reverse("transfers:stock-request-decision", args=[created.data["id"]]),
            {"status": "APPROVED"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_confirm_unknown_request_returns_404(self):
        self.client.force_authenticate(self.requester)
        response = self.client.post(
            reverse(
                "transfers:stock-request-confirm",
                args=["00000000-0000-0000-0000-000000000000"],
            ),
            {},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_over_quantity_request_returns_400(self):
        self.client.force_authenticate(self.requester)
        response = self.client.post(
            reverse("transfers:stock-request-list"), self._payload(qty=21), format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("Insufficient quantity", response.data["detail"])
