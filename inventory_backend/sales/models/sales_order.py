# sales/models/sales_order.py

import uuid
from decimal import Decimal

from django.conf import settings
from django.db import models

User = settings.AUTH_USER_MODEL


class SalesOrder(models.Model):
    """
    Customer order.

    GUARANTEES:
    - Status only moves through sales.services.lifecycle
    - stock_reserved is True exactly while the order holds committed stock
      (RESERVE movements not yet released or fulfilled)
    """

    TYPE_DRAFT = "DRAFT"
    TYPE_APPROVAL = "APPROVAL"

    TYPE_CHOICES = [
        (TYPE_DRAFT, "Draft"),
        (TYPE_APPROVAL, "Approval"),
    ]

    STATUS_DRAFT = "DRAFT"
    STATUS_PENDING = "PENDING"
    STATUS_APPROVED = "APPROVED"
    STATUS_REJECT = "REJECT"
    STATUS_COMPLETED = "COMPLETED"
    STATUS_CANCELLED = "CANCELLED"

    STATUS_CHOICES = [
        (STATUS_DRAFT, "Draft"),
        (STATUS_PENDING, "Pending approval"),
        (STATUS_APPROVED, "Approved"),
        (STATUS_REJECT, "Rejected"),
        (STATUS_COMPLETED, "Completed"),
        (STATUS_CANCELLED, "Cancelled"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    company = models.ForeignKey(
        "tenants.Company",
        on_delete=models.CASCADE,
        related_name="sales_orders",
    )

    order_number = models.CharField(max_length=32)

    customer = models.ForeignKey(
        "sales.Customer",
        on_delete=models.PROTECT,
        related_name="sales_orders",
    )

    order_type = models.CharField(max_length=16, choices=TYPE_CHOICES, default=TYPE_DRAFT)
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_DRAFT)

    created_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        related_name="sales_orders",
        help_text="Salesperson",
    )
    approver = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="sales_orders_to_approve",
    )

    stock_reserved = models.BooleanField(default=False)

    order_date = models.DateField(null=True, blank=True)
    comment = models.TextField(blank=True)

    total_quantity = models.PositiveIntegerField(default=0)
    total_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))

    approved_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["company", "order_number"],
                name="uniq_salesorder_number_per_company",
            ),
        ]
        indexes = [
            models.Index(fields=["company", "status"], name="salesorder_company_status_idx"),
        ]

    def __str__(self):
        return f"{self.order_number} ({self.status})"


class SalesOrderItem(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    order = models.ForeignKey(SalesOrder, on_delete=models.CASCADE, related_name="items")
    product = models.ForeignKey(
        "products.Product",
        on_delete=models.PROTECT,
        related_name="sales_order_lines",
    )
    warehouse = models.ForeignKey(
        "warehouses.Warehouse",
        on_delete=models.PROTECT,
        related_name="sales_order_lines",
    )
    warehouse_name = models.CharField(max_length=255, blank=True)

    quantity = models.PositiveIntegerField()
    rate = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))

    class Meta:
        ordering = ["id"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gt=0),
                name="sales_order_line_quantity_positive",
            ),
        ]
