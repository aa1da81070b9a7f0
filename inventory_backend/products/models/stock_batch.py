# products/models/stock_batch.py

"""
STOCK BATCH (FIFO UNIT OF INVENTORY)

Represents ONE discrete quantity of a product placed in a warehouse at a point
in time (product opening stock, purchase receipt, or transfer arrival).

CANONICAL MODEL:
- opening_stock       = available for new reservations
- committed_quantity  = reserved against approved sales orders, not yet invoiced
- created_at          = FIFO order (oldest first), ties broken by batch_number
- batch_number        = globally unique, generated by products.services.numbering
- both quantities are non-negative (DB check constraints) and mutated ONLY via
  products.services.stock_ledger / stock_adjustments (conditional updates)
- warehouse is a real FK; warehouse_name is a display snapshot
"""

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q
from django.utils import timezone

from .product import Product


class StockBatch(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    company = models.ForeignKey(
        "tenants.Company",
        on_delete=models.CASCADE,
        related_name="stock_batches",
    )

    product = models.ForeignKey(
        Product,
        on_delete=models.CASCADE,
        related_name="stock_batches",
    )

    warehouse = models.ForeignKey(
        "warehouses.Warehouse",
        on_delete=models.PROTECT,
        related_name="stock_batches",
    )
    warehouse_name = models.CharField(max_length=255, blank=True)

    batch_number = models.CharField(max_length=64)

    opening_stock = models.PositiveIntegerField(default=0)
    committed_quantity = models.PositiveIntegerField(default=0)

    unit_cost = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text="Unit cost carried by this batch (copied forward on transfer).",
    )

    created_at = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        ordering = ["created_at", "batch_number"]
        constraints = [
            models.UniqueConstraint(
                fields=["company", "batch_number"],
                name="uniq_stockbatch_number_per_company",
            ),
            models.CheckConstraint(
                condition=Q(opening_stock__gte=0),
                name="chk_stockbatch_opening_gte_zero",
            ),
            models.CheckConstraint(
                condition=Q(committed_quantity__gte=0),
                name="chk_stockbatch_committed_gte_zero",
            ),
        ]

    # -------------------------------------------------
    # VALIDATION
    # -------------------------------------------------

    def clean(self):
        if self.unit_cost is not None and self.unit_cost < Decimal("0.00"):
            raise ValidationError({"unit_cost": "unit_cost cannot be negative"})

        if self.product_id and self.company_id:
            product_company = (
                Product.objects.filter(pk=self.product_id)
                .values_list("company_id", flat=True)
                .first()
            )
            if product_company is not None and product_company != self.company_id:
                raise ValidationError("Batch company must match product company")

        if self.warehouse_id and self.company_id:
            if self.warehouse.company_id != self.company_id:
                raise ValidationError("Batch company must match warehouse company")

    def save(self, *args, **kwargs):
        if self.warehouse_id and not self.warehouse_name:
            self.warehouse_name = self.warehouse.name
        # batch_number uniqueness is left to the database constraint
        self.full_clean(validate_unique=False)
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        """
        Audit safety: once a batch has movements, it must never be deleted.
        """
        from products.models.stock_movement import StockMovement

        if StockMovement.objects.filter(batch=self).exists():
            raise ValidationError("Cannot delete StockBatch: it has StockMovement audit history.")
        return super().delete(*args, **kwargs)

    # -------------------------------------------------
    # READ-ONLY HELPERS
    # -------------------------------------------------

    @property
    def on_hand(self) -> int:
        return int(self.opening_stock or 0) + int(self.committed_quantity or 0)

    @property
    def total_remaining_value(self) -> Decimal:
        return (self.unit_cost or Decimal("0.00")) * Decimal(int(self.opening_stock or 0))

    def __str__(self):
        return f"{self.warehouse_name} | {self.product} | Batch {self.batch_number}"
