# products/tests/test_adjustments.py

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.test import TestCase

from backend.errors import InvalidStateError, NotFoundError
from products.models import InventoryAdjustment, Product, StockBatch, StockMovement
from products.services.stock_adjustments import adjust_inventory
from tenants.tests.helpers import add_batch, make_company, make_product, make_user, make_warehouse


class InventoryAdjustmentTests(TestCase):
    """
    Direct adjustment tests.

    GUARANTEES:
    - QUANTITY sets the batch's opening stock and moves total_stock by the delta
    - total_stock never drops below zero
    - Every adjustment writes exactly one audit row
    """

    def setUp(self):
        self.company = make_company()
        self.user = make_user(self.company)
        self.warehouse = make_warehouse(self.company)
        self.product = make_product(self.company, opening=[(self.warehouse, 50)])
        self.batch = StockBatch.objects.get(product=self.product)

    def _adjust(self, **kwargs):
        kwargs.setdefault("company", self.company)
        kwargs.setdefault("product", self.product)
        kwargs.setdefault("warehouse", self.warehouse)
        kwargs.setdefault("user", self.user)
        return adjust_inventory(**kwargs)

    def test_increase_adds_delta_to_total_stock(self):
        result = self._adjust(new_quantity=80, reason="recount")

        self.batch.refresh_from_db()
        self.assertEqual(self.batch.opening_stock, 80)
        self.assertEqual(result.quantity_delta, 30)
        self.assertEqual(Product.objects.get(pk=self.product.pk).total_stock, 80)

        audit = InventoryAdjustment.objects.get()
        self.assertEqual(audit.previous_quantity, 50)
        self.assertEqual(audit.new_quantity, 80)
        self.assertEqual(audit.quantity_delta, 30)
        self.assertEqual(audit.previous_total_stock, 50)
        self.assertEqual(audit.new_total_stock, 80)
        self.assertEqual(audit.reason, "recount")
        self.assertEqual(audit.performed_by, self.user)

    def test_decrease_is_floored_at_zero(self):
        Product.objects.filter(pk=self.product.pk).update(total_stock=10)

        result = self._adjust(new_quantity=20)

        self.assertEqual(result.quantity_delta, -30)
        self.assertEqual(Product.objects.get(pk=self.product.pk).total_stock, 0)
        self.batch.refresh_from_db()
        self.assertEqual(self.batch.opening_stock, 20)

    def test_quantity_adjustment_writes_movement(self):
        self._adjust(new_quantity=45)

        movement = StockMovement.objects.get(reason=StockMovement.Reason.ADJUSTMENT)
        self.assertEqual(movement.quantity, 5)
        self.assertEqual(movement.opening_delta, -5)

    def test_no_op_adjustment_still_audited(self):
        self._adjust(new_quantity=50)

        self.assertEqual(InventoryAdjustment.objects.count(), 1)
        self.assertFalse(
            StockMovement.objects.filter(reason=StockMovement.Reason.ADJUSTMENT).exists()
        )

    def test_value_adjustment_changes_cost_only(self):
        self._adjust(
            adjustment_type=InventoryAdjustment.AdjustmentType.VALUE,
            new_unit_cost="8.25",
        )

        self.batch.refresh_from_db()
        self.assertEqual(self.batch.unit_cost, Decimal("8.25"))
        self.assertEqual(self.batch.opening_stock, 50)

        audit = InventoryAdjustment.objects.get()
        self.assertEqual(audit.previous_unit_cost, Decimal("6.00"))
        self.assertEqual(audit.new_unit_cost, Decimal("8.25"))
        self.assertEqual(audit.quantity_delta, 0)

    def test_explicit_batch_is_adjusted(self):
        second = add_batch(self.company, self.product, self.warehouse, 5)

        self._adjust(batch_id=second.pk, new_quantity=9)

        second.refresh_from_db()
        self.batch.refresh_from_db()
        self.assertEqual(second.opening_stock, 9)
        self.assertEqual(self.batch.opening_stock, 50)

    def test_missing_quantity_is_rejected(self):
        with self.assertRaises(InvalidStateError):
            self._adjust(new_quantity=None)
        self.assertFalse(InventoryAdjustment.objects.exists())

    def test_no_batch_in_warehouse_raises_not_found(self):
        empty = make_warehouse(self.company, name="Empty Yard")
        with self.assertRaises(NotFoundError):
            self._adjust(warehouse=empty, new_quantity=3)

    def test_audit_rows_are_immutable(self):
        audit = self._adjust(new_quantity=60).adjustment
        audit.reason = "edited"
        with self.assertRaises(ValidationError):
            audit.save()
