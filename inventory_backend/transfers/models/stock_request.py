# transfers/models/stock_request.py

import uuid
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models

User = settings.AUTH_USER_MODEL


class StockRequest(models.Model):
    """
    Warehouse-to-warehouse transfer request.

    GUARANTEES:
    - Status only moves through transfers.services.lifecycle
    - Stock is untouched until confirmation; confirmation moves every line
    - Item lines are a fixed-schema child table (StockRequestItem)
    """

    STATUS_PENDING = "PENDING"
    STATUS_APPROVED = "APPROVED"
    STATUS_REJECT = "REJECT"
    STATUS_CONFIRM = "CONFIRM"
    STATUS_COMPLETED = "COMPLETED"

    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_APPROVED, "Approved"),
        (STATUS_REJECT, "Rejected"),
        (STATUS_CONFIRM, "Confirmed"),
        (STATUS_COMPLETED, "Completed"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    company = models.ForeignKey(
        "tenants.Company",
        on_delete=models.CASCADE,
        related_name="stock_requests",
    )

    request_number = models.CharField(max_length=32)

    sending_warehouse = models.ForeignKey(
        "warehouses.Warehouse",
        on_delete=models.PROTECT,
        related_name="outgoing_requests",
    )
    receiving_warehouse = models.ForeignKey(
        "warehouses.Warehouse",
        on_delete=models.PROTECT,
        related_name="incoming_requests",
    )

    requested_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        related_name="stock_requests",
    )
    approver = models.ForeignKey(
        User,
        on_delete=models.PROTECT,
        related_name="stock_requests_to_approve",
    )

    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_PENDING)
    comment = models.TextField(blank=True)
    request_date = models.DateField(null=True, blank=True)

    approved_at = models.DateTimeField(null=True, blank=True)
    confirmed_at = models.DateTimeField(null=True, blank=True)
    confirmed_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="confirmed_stock_requests",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["company", "request_number"],
                name="uniq_stockreq_number_per_company",
            ),
        ]
        indexes = [
            models.Index(fields=["company", "status"], name="stockreq_company_status_idx"),
        ]

    def clean(self):
        if self.sending_warehouse_id and self.sending_warehouse_id == self.receiving_warehouse_id:
            raise ValidationError("Sending and receiving warehouse must differ")

    @property
    def total_quantity(self) -> int:
        return sum(int(i.quantity) for i in self.items.all())

    def __str__(self):
        return f"{self.request_number} ({self.status})"


class StockRequestItem(models.Model):
    """
    One transfer line: quantity of a product taken from a specific source batch.

    received_batch is filled in on confirmation.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    request = models.ForeignKey(
        StockRequest,
        on_delete=models.CASCADE,
        related_name="items",
    )
    product = models.ForeignKey(
        "products.Product",
        on_delete=models.PROTECT,
        related_name="transfer_lines",
    )
    source_batch = models.ForeignKey(
        "products.StockBatch",
        on_delete=models.PROTECT,
        related_name="outgoing_transfer_lines",
    )
    received_batch = models.ForeignKey(
        "products.StockBatch",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="incoming_transfer_lines",
    )

    quantity = models.PositiveIntegerField()
    unit_cost = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))

    class Meta:
        ordering = ["id"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gt=0),
                name="transfer_line_quantity_positive",
            ),
        ]

    def __str__(self):
        return f"{self.product_id} x {self.quantity}"
