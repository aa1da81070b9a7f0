# products/models/stock_movement.py

"""
CANONICAL INVENTORY LEDGER

Immutable ledger entry: one row per batch touched by a ledger operation.

GUARANTEES:
- Append-only (no updates, no deletes)
- opening_delta / committed_delta are the signed changes applied to the batch
- Each reason has a fixed delta shape (validated in clean())
- source_type + source_id point at the document that caused the movement
  (sales order, invoice, stock request, purchase order, adjustment, product)

Invoice cancellation reverses exactly the FULFIL rows written for that invoice.
"""

import uuid
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models

from .product import Product
from .stock_batch import StockBatch


class StockMovement(models.Model):
    class Reason(models.TextChoices):
        RECEIPT = "RECEIPT", "Stock Receipt"
        RESERVE = "RESERVE", "Sales Reservation"
        RELEASE = "RELEASE", "Reservation Release"
        FULFIL = "FULFIL", "Invoice Fulfilment"
        INVOICE_CANCEL = "INVOICE_CANCEL", "Invoice Cancellation"
        ADJUSTMENT = "ADJUSTMENT", "Manual Adjustment"
        TRANSFER_OUT = "TRANSFER_OUT", "Transfer Out"
        TRANSFER_IN = "TRANSFER_IN", "Transfer In"

    class SourceType(models.TextChoices):
        PRODUCT = "PRODUCT", "Product"
        SALES_ORDER = "SALES_ORDER", "Sales Order"
        INVOICE = "INVOICE", "Invoice"
        STOCK_REQUEST = "STOCK_REQUEST", "Stock Request"
        PURCHASE_ORDER = "PURCHASE_ORDER", "Purchase Order"
        ADJUSTMENT = "ADJUSTMENT", "Inventory Adjustment"

    # sign of (opening_delta, committed_delta); None = any
    REASON_SHAPES = {
        Reason.RECEIPT: (1, 0),
        Reason.RESERVE: (-1, 1),
        Reason.RELEASE: (1, -1),
        Reason.FULFIL: (0, -1),
        Reason.INVOICE_CANCEL: (1, 0),
        Reason.ADJUSTMENT: (None, 0),
        Reason.TRANSFER_OUT: (-1, 0),
        Reason.TRANSFER_IN: (1, 0),
    }

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    company = models.ForeignKey(
        "tenants.Company", on_delete=models.CASCADE, related_name="stock_movements"
    )
    product = models.ForeignKey(
        Product, on_delete=models.CASCADE, related_name="stock_movements"
    )
    batch = models.ForeignKey(
        StockBatch, on_delete=models.CASCADE, related_name="stock_movements"
    )

    reason = models.CharField(max_length=20, choices=Reason.choices, db_index=True)

    quantity = models.PositiveIntegerField()
    opening_delta = models.IntegerField(default=0)
    committed_delta = models.IntegerField(default=0)

    unit_cost_snapshot = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text="Unit cost snapshot from batch at movement time (immutable).",
    )

    source_type = models.CharField(max_length=20, choices=SourceType.choices)
    source_id = models.UUIDField(null=True, blank=True, db_index=True)

    performed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="stock_movements",
    )

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        ordering = ["created_at"]

    def clean(self):
        if self.quantity is None or self.quantity <= 0:
            raise ValidationError("quantity must be greater than zero")

        if self.batch_id and self.product_id and self.batch.product_id != self.product_id:
            raise ValidationError("Batch does not belong to product")

        shape = self.REASON_SHAPES.get(self.reason)
        if shape is None:
            raise ValidationError(f"Unknown reason {self.reason}")

        for expected, actual, label in (
            (shape[0], self.opening_delta, "opening_delta"),
            (shape[1], self.committed_delta, "committed_delta"),
        ):
            if expected is None:
                continue
            if expected == 0 and actual != 0:
                raise ValidationError(f"{self.reason} must not change {label}")
            if expected > 0 and actual <= 0:
                raise ValidationError(f"{self.reason} requires a positive {label}")
            if expected < 0 and actual >= 0:
                raise ValidationError(f"{self.reason} requires a negative {label}")

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("StockMovement records are immutable")

        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError(
            "StockMovement records are immutable and cannot be deleted"
        )

    def __str__(self):
        return f"{self.product} | {self.reason} | {self.quantity}"
