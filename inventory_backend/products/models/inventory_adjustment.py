# products/models/inventory_adjustment.py

"""
INVENTORY ADJUSTMENT (AUDIT ROW)

One immutable row per manual adjustment, QUANTITY or VALUE.

- QUANTITY rows record the batch's opening stock before/after and the
  product total_stock before/after (after the zero floor is applied).
- VALUE rows record the unit cost before/after; stock quantities are untouched.
"""

import uuid
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models


class InventoryAdjustment(models.Model):
    class AdjustmentType(models.TextChoices):
        QUANTITY = "QUANTITY", "Quantity"
        VALUE = "VALUE", "Value"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    company = models.ForeignKey(
        "tenants.Company", on_delete=models.CASCADE, related_name="inventory_adjustments"
    )
    product = models.ForeignKey(
        "products.Product", on_delete=models.CASCADE, related_name="adjustments"
    )
    warehouse = models.ForeignKey(
        "warehouses.Warehouse", on_delete=models.PROTECT, related_name="adjustments"
    )
    batch = models.ForeignKey(
        "products.StockBatch", on_delete=models.PROTECT, related_name="adjustments"
    )

    adjustment_type = models.CharField(max_length=10, choices=AdjustmentType.choices)

    previous_quantity = models.PositiveIntegerField(default=0)
    new_quantity = models.PositiveIntegerField(default=0)
    quantity_delta = models.IntegerField(default=0)

    previous_total_stock = models.PositiveIntegerField(default=0)
    new_total_stock = models.PositiveIntegerField(default=0)

    previous_unit_cost = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )
    new_unit_cost = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )

    reason = models.CharField(max_length=255, blank=True)

    performed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="inventory_adjustments",
    )

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        ordering = ["-created_at"]

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("InventoryAdjustment records are immutable")
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("InventoryAdjustment records are immutable and cannot be deleted")

    def __str__(self):
        return f"{self.product} | {self.adjustment_type} | {self.quantity_delta:+d}"
