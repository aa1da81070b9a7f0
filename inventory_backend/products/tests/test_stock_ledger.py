# products/tests/test_stock_ledger.py

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.test import TestCase

from backend.errors import InsufficientStockError, StockReleaseError
from products.models import Product, StockBatch, StockMovement
from products.services.line_items import LineItem
from products.services.stock_ledger import (
    consume_committed,
    release_lines,
    reserve_lines,
    restore_invoice_stock,
    transfer_from_batch,
)
from tenants.tests.helpers import add_batch, make_company, make_product, make_user, make_warehouse


def _on_hand(product) -> int:
    return sum(b.opening_stock + b.committed_quantity for b in StockBatch.objects.filter(product=product))


class StockLedgerReserveTests(TestCase):
    """
    FIFO reservation tests.

    GUARANTEES:
    - Oldest batch is drained first
    - A shortfall on any line leaves every batch untouched
    - Reservation moves stock between buckets, never creates or destroys it
    """

    def setUp(self):
        self.company = make_company()
        self.user = make_user(self.company)
        self.warehouse = make_warehouse(self.company)
        self.product = make_product(self.company)

        self.old = add_batch(self.company, self.product, self.warehouse, 5)
        self.new = add_batch(self.company, self.product, self.warehouse, 10)

    def _line(self, qty, product=None):
        return LineItem.build(
            product_id=(product or self.product).pk,
            warehouse_id=self.warehouse.pk,
            quantity=qty,
        )

    def test_reserve_drains_oldest_batch_first(self):
        reserve_lines(company=self.company, lines=[self._line(8)], user=self.user)

        self.old.refresh_from_db()
        self.new.refresh_from_db()

        self.assertEqual(self.old.opening_stock, 0)
        self.assertEqual(self.old.committed_quantity, 5)
        self.assertEqual(self.new.opening_stock, 7)
        self.assertEqual(self.new.committed_quantity, 3)

    def test_reserve_writes_one_movement_per_batch_touched(self):
        movements = reserve_lines(company=self.company, lines=[self._line(8)], user=self.user)

        self.assertEqual(len(movements), 2)
        self.assertEqual([m.quantity for m in movements], [5, 3])
        for m in movements:
            self.assertEqual(m.reason, StockMovement.Reason.RESERVE)
            self.assertEqual(m.opening_delta, -m.quantity)
            self.assertEqual(m.committed_delta, m.quantity)

    def test_reserve_conserves_on_hand_quantity(self):
        before = _on_hand(self.product)
        reserve_lines(company=self.company, lines=[self._line(12)])
        self.assertEqual(_on_hand(self.product), before)

    def test_reserve_does_not_touch_total_stock(self):
        before = Product.objects.get(pk=self.product.pk).total_stock
        reserve_lines(company=self.company, lines=[self._line(4)])
        self.assertEqual(Product.objects.get(pk=self.product.pk).total_stock, before)

    def test_shortfall_raises_and_changes_nothing(self):
        with self.assertRaises(InsufficientStockError) as ctx:
            reserve_lines(company=self.company, lines=[self._line(16)])

        self.assertIn("Insufficient quantity", str(ctx.exception))
        self.old.refresh_from_db()
        self.new.refresh_from_db()
        self.assertEqual((self.old.opening_stock, self.old.committed_quantity), (5, 0))
        self.assertEqual((self.new.opening_stock, self.new.committed_quantity), (10, 0))
        self.assertFalse(
            StockMovement.objects.filter(reason=StockMovement.Reason.RESERVE).exists()
        )

    def test_second_line_shortfall_rolls_back_first_line(self):
        other = make_product(self.company, name="Steel Pipe")
        add_batch(self.company, other, self.warehouse, 2)

        with self.assertRaises(InsufficientStockError):
            reserve_lines(
                company=self.company,
                lines=[self._line(8), self._line(3, product=other)],
            )

        self.old.refresh_from_db()
        self.new.refresh_from_db()
        self.assertEqual(self.old.opening_stock, 5)
        self.assertEqual(self.new.opening_stock, 10)
        self.assertEqual(self.old.committed_quantity + self.new.committed_quantity, 0)

    def test_batches_in_other_warehouses_are_ignored(self):
        branch = make_warehouse(self.company, name="Branch")
        add_batch(self.company, self.product, branch, 100)

        with self.assertRaises(InsufficientStockError):
            reserve_lines(company=self.company, lines=[self._line(20)])


class StockLedgerReleaseTests(TestCase):
    """
    Release tests.

    GUARANTEES:
    - Committed stock returns to opening stock, oldest batch first
    - A release larger than committed stock fails without side effects
    """

    def setUp(self):
        self.company = make_company()
        self.warehouse = make_warehouse(self.company)
        self.product = make_product(self.company)
        self.batch = add_batch(self.company, self.product, self.warehouse, 10)
        self.line = LineItem.build(
            product_id=self.product.pk, warehouse_id=self.warehouse.pk, quantity=6
        )
        reserve_lines(company=self.company, lines=[self.line])

    def test_release_returns_committed_to_opening(self):
        release_lines(company=self.company, lines=[self.line])

        self.batch.refresh_from_db()
        self.assertEqual(self.batch.opening_stock, 10)
        self.assertEqual(self.batch.committed_quantity, 0)

    def test_release_more_than_committed_raises(self):
        too_much = LineItem.build(
            product_id=self.product.pk, warehouse_id=self.warehouse.pk, quantity=7
        )

        with self.assertRaises(StockReleaseError) as ctx:
            release_lines(company=self.company, lines=[too_much])

        self.assertIn("Unable to return all quantities", str(ctx.exception))
        self.batch.refresh_from_db()
        self.assertEqual(self.batch.opening_stock, 4)
        self.assertEqual(self.batch.committed_quantity, 6)


class StockLedgerInvoiceTests(TestCase):
    """
    Consume + restore tests.

    GUARANTEES:
    - Invoicing removes committed stock and leaves total_stock alone
    - Cancelling puts the exact quantities back on the batches they left
    - Cancelling increments total_stock by the invoiced quantity
    """

    def setUp(self):
        self.company = make_company()
        self.warehouse = make_warehouse(self.company)
        self.product = make_product(self.company, opening=[(self.warehouse, 100)])
        self.batch = StockBatch.objects.get(product=self.product)
        self.line = LineItem.build(
            product_id=self.product.pk, warehouse_id=self.warehouse.pk, quantity=30
        )
        self.invoice_id = "8f4c2b8e-3a4d-4e55-9a0f-111111111111"

    def test_full_reserve_invoice_cancel_cycle(self):
        reserve_lines(company=self.company, lines=[self.line])
        self.batch.refresh_from_db()
        self.assertEqual((self.batch.opening_stock, self.batch.committed_quantity), (70, 30))

        consume_committed(company=self.company, lines=[self.line], invoice_id=self.invoice_id)
        self.batch.refresh_from_db()
        self.assertEqual((self.batch.opening_stock, self.batch.committed_quantity), (70, 0))
        self.assertEqual(Product.objects.get(pk=self.product.pk).total_stock, 100)

        restore_invoice_stock(company=self.company, invoice_id=self.invoice_id, lines=[self.line])
        self.batch.refresh_from_db()
        self.assertEqual(self.batch.opening_stock, 100)
        self.assertEqual(self.batch.committed_quantity, 0)
        self.assertEqual(Product.objects.get(pk=self.product.pk).total_stock, 130)

    def test_consume_without_reservation_raises(self):
        with self.assertRaises(InsufficientStockError):
            consume_committed(company=self.company, lines=[self.line], invoice_id=self.invoice_id)

    def test_restore_is_not_applied_twice_to_batches(self):
        reserve_lines(company=self.company, lines=[self.line])
        consume_committed(company=self.company, lines=[self.line], invoice_id=self.invoice_id)

        restore_invoice_stock(company=self.company, invoice_id=self.invoice_id, lines=[self.line])
        second = restore_invoice_stock(
            company=self.company, invoice_id=self.invoice_id, lines=[self.line]
        )

        self.assertEqual(second, [])
        self.batch.refresh_from_db()
        self.assertEqual(self.batch.opening_stock, 100)


class StockTransferLedgerTests(TestCase):
    """
    Batch-to-warehouse transfer tests.

    GUARANTEES:
    - Source opening stock decreases by the moved quantity
    - A new batch carrying the source unit cost appears at the destination
    - total_stock is unchanged
    """

    def setUp(self):
        self.company = make_company()
        self.main = make_warehouse(self.company, name="Main")
        self.branch = make_warehouse(self.company, name="Branch")
        self.product = make_product(self.company)
        self.source = add_batch(
            self.company, self.product, self.main, 20, unit_cost=Decimal("7.50")
        )

    def test_transfer_moves_quantity_into_new_batch(self):
        total_before = Product.objects.get(pk=self.product.pk).total_stock

        received = transfer_from_batch(
            company=self.company,
            source_batch_id=self.source.pk,
            receiving_warehouse=self.branch,
            quantity=8,
        )

        self.source.refresh_from_db()
        self.assertEqual(self.source.opening_stock, 12)
        self.assertEqual(received.warehouse, self.branch)
        self.assertEqual(received.opening_stock, 8)
        self.assertEqual(received.unit_cost, Decimal("7.50"))
        self.assertNotEqual(received.batch_number, self.source.batch_number)
        self.assertEqual(Product.objects.get(pk=self.product.pk).total_stock, total_before)

    def test_transfer_more_than_opening_raises(self):
        with self.assertRaises(InsufficientStockError):
            transfer_from_batch(
                company=self.company,
                source_batch_id=self.source.pk,
                receiving_warehouse=self.branch,
                quantity=21,
            )

        self.source.refresh_from_db()
        self.assertEqual(self.source.opening_stock, 20)
        self.assertFalse(StockBatch.objects.filter(warehouse=self.branch).exists())


class StockMovementImmutabilityTests(TestCase):
    def setUp(self):
        company = make_company()
        warehouse = make_warehouse(company)
        product = make_product(company, opening=[(warehouse, 5)])
        self.movement = StockMovement.objects.get(product=product)

    def test_movement_cannot_be_updated(self):
        self.movement.quantity = 99
        with self.assertRaises(ValidationError):
            self.movement.save()

    def test_movement_cannot_be_deleted(self):
        with self.assertRaises(ValidationError):
            self.movement.delete()
