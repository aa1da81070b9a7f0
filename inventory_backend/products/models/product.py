# products/models/product.py

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q, Sum


class Product(models.Model):
    """
    Represents a stocked product owned by one company.

    STOCK MODEL (IMPORTANT):
    - Physical stock lives in StockBatch (opening_stock + committed_quantity).
    - total_stock is a DENORMALIZED counter maintained by the ledger services:
        + product opening stock and purchase receipts
        + invoice cancellation
        +/- quantity adjustments (floor-clamped at zero)
      Reservation, invoicing and transfers never touch it.
    - It is never recomputed from batches.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    company = models.ForeignKey(
        "tenants.Company",
        on_delete=models.CASCADE,
        related_name="products",
    )

    name = models.CharField(max_length=255, db_index=True)
    sku = models.CharField(max_length=128, blank=True, default="")
    description = models.TextField(blank=True)

    category = models.ForeignKey(
        "products.Category",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="products",
    )

    # Unit metadata
    unit = models.CharField(max_length=32, default="unit")
    unit_price = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00"),
        help_text="Default selling rate.",
    )
    cost_price = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00"),
        help_text="Default purchase rate.",
    )

    total_stock = models.PositiveIntegerField(
        default=0,
        help_text="Denormalized stock counter (service-managed only)",
    )

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        constraints = [
            models.UniqueConstraint(
                fields=["company", "sku"],
                condition=~Q(sku=""),
                name="uniq_product_sku_per_company",
            ),
            models.CheckConstraint(
                condition=Q(total_stock__gte=0),
                name="chk_product_total_stock_gte_zero",
            ),
        ]

    def clean(self):
        self.name = (self.name or "").strip()
        if not self.name:
            raise ValidationError({"name": "name is required"})

        if self.unit_price is not None and Decimal(self.unit_price) < 0:
            raise ValidationError({"unit_price": "unit_price cannot be negative"})

        if self.cost_price is not None and Decimal(self.cost_price) < 0:
            raise ValidationError({"cost_price": "cost_price cannot be negative"})

        if self.category_id and self.category.company_id != self.company_id:
            raise ValidationError({"category": "category belongs to another company"})

    def batch_totals(self) -> dict:
        """
        Read-only helper: sums of opening and committed stock across batches.
        """
        agg = self.stock_batches.aggregate(
            opening=Sum("opening_stock"),
            committed=Sum("committed_quantity"),
        )
        return {
            "opening_stock": int(agg.get("opening") or 0),
            "committed_quantity": int(agg.get("committed") or 0),
        }

    def __str__(self):
        return self.name
