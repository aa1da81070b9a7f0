# sales/models/invoice.py

import uuid
from decimal import Decimal

from django.conf import settings
from django.db import models

User = settings.AUTH_USER_MODEL


class Invoice(models.Model):
    """
    Invoice raised against an APPROVED sales order.

    Creation consumes the order's committed stock; cancellation restores it to
    opening stock on the same batches and increments Product.total_stock.
    """

    STATUS_UNPAID = "UNPAID"
    STATUS_PART = "PART"
    STATUS_PAID = "PAID"
    STATUS_CANCELLED = "CANCELLED"

    PAYMENT_STATUS_CHOICES = [
        (STATUS_UNPAID, "Unpaid"),
        (STATUS_PART, "Part paid"),
        (STATUS_PAID, "Paid"),
        (STATUS_CANCELLED, "Cancelled"),
    ]

    OPEN_STATUSES = (STATUS_UNPAID, STATUS_PART)

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    company = models.ForeignKey(
        "tenants.Company",
        on_delete=models.CASCADE,
        related_name="invoices",
    )

    invoice_number = models.CharField(max_length=32)

    sales_order = models.ForeignKey(
        "sales.SalesOrder",
        on_delete=models.PROTECT,
        related_name="invoices",
    )
    customer = models.ForeignKey(
        "sales.Customer",
        on_delete=models.PROTECT,
        related_name="invoices",
    )
    created_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        related_name="invoices",
        help_text="Salesperson",
    )

    payment_status = models.CharField(
        max_length=16, choices=PAYMENT_STATUS_CHOICES, default=STATUS_UNPAID
    )

    invoice_date = models.DateField()
    due_date = models.DateField(null=True, blank=True)

    total_quantity = models.PositiveIntegerField(default=0)
    total_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    amount_paid = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))

    comment = models.TextField(blank=True)

    cancelled_at = models.DateTimeField(null=True, blank=True)
    cancelled_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="cancelled_invoices",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["company", "invoice_number"],
                name="uniq_invoice_number_per_company",
            ),
        ]
        indexes = [
            models.Index(fields=["company", "payment_status"], name="invoice_company_status_idx"),
            models.Index(fields=["created_at"], name="invoice_created_idx"),
        ]

    @property
    def amount_due(self) -> Decimal:
        return (self.total_amount or Decimal("0.00")) - (self.amount_paid or Decimal("0.00"))

    def __str__(self):
        return f"{self.invoice_number} ({self.payment_status})"


class InvoiceItem(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    invoice = models.ForeignKey(Invoice, on_delete=models.CASCADE, related_name="items")
    product = models.ForeignKey(
        "products.Product",
        on_delete=models.PROTECT,
        related_name="invoice_lines",
    )
    warehouse = models.ForeignKey(
        "warehouses.Warehouse",
        on_delete=models.PROTECT,
        related_name="invoice_lines",
    )
    warehouse_name = models.CharField(max_length=255, blank=True)

    quantity = models.PositiveIntegerField()
    rate = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))

    class Meta:
        ordering = ["id"]
