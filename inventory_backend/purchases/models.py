# purchases/models.py

import uuid
from decimal import Decimal

from django.conf import settings
from django.db import models

User = settings.AUTH_USER_MODEL


class Supplier(models.Model):
    """
    Supplier master (per company).
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    company = models.ForeignKey(
        "tenants.Company",
        on_delete=models.CASCADE,
        related_name="suppliers",
    )

    name = models.CharField(max_length=200)
    phone = models.CharField(max_length=50, blank=True, default="")
    email = models.EmailField(blank=True, default="")
    address = models.TextField(blank=True, default="")

    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["name"]
        indexes = [
            models.Index(fields=["company", "name"], name="supplier_company_name_idx"),
        ]

    def __str__(self):
        return self.name


class PurchaseOrder(models.Model):
    """
    Purchase order header.

    Goods receipt is performed by purchases.services.purchase_orders:
    - one new StockBatch per line (generated batch number, cost = rate)
    - Product.total_stock incremented
    - PurchaseTransaction + PurchaseConfirmation written
    - status -> COMPLETED
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

    STATUSES = [
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
        related_name="purchase_orders",
    )

    order_number = models.CharField(max_length=32)

    supplier = models.ForeignKey(
        Supplier,
        on_delete=models.PROTECT,
        related_name="purchase_orders",
    )

    order_type = models.CharField(max_length=16, choices=TYPE_CHOICES, default=TYPE_DRAFT)
    status = models.CharField(max_length=16, choices=STATUSES, default=STATUS_DRAFT)

    order_date = models.DateField(null=True, blank=True)
    comment = models.TextField(blank=True, default="")

    total_quantity = models.PositiveIntegerField(default=0)
    total_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))

    created_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="purchase_orders_created",
    )
    approver = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="purchase_orders_to_approve",
    )

    approved_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["company", "order_number"],
                name="uniq_po_number_per_company",
            ),
            models.CheckConstraint(
                condition=models.Q(total_amount__gte=Decimal("0.00")),
                name="purchase_order_total_nonnegative",
            ),
        ]
        indexes = [
            models.Index(fields=["company", "status"], name="po_company_status_idx"),
        ]

    def __str__(self):
        return f"{self.order_number} ({self.supplier.name})"


class PurchaseOrderItem(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    order = models.ForeignKey(
        PurchaseOrder,
        on_delete=models.CASCADE,
        related_name="items",
    )
    product = models.ForeignKey(
        "products.Product",
        on_delete=models.PROTECT,
        related_name="purchase_order_lines",
    )
    warehouse = models.ForeignKey(
        "warehouses.Warehouse",
        on_delete=models.PROTECT,
        related_name="purchase_order_lines",
    )
    warehouse_name = models.CharField(max_length=255, blank=True)

    quantity = models.PositiveIntegerField()
    rate = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))

    received_batch = models.ForeignKey(
        "products.StockBatch",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="purchase_lines",
    )

    class Meta:
        ordering = ["id"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gt=0),
                name="purchase_line_quantity_positive",
            ),
        ]


class PurchaseConfirmation(models.Model):
    """
    Goods-received note: one per confirmed purchase order.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    company = models.ForeignKey(
        "tenants.Company",
        on_delete=models.CASCADE,
        related_name="purchase_confirmations",
    )
    order = models.OneToOneField(
        PurchaseOrder,
        on_delete=models.PROTECT,
        related_name="confirmation",
    )
    confirmed_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        related_name="purchase_confirmations",
    )
    total_quantity = models.PositiveIntegerField(default=0)
    total_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    comment = models.TextField(blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]


class PurchaseTransaction(models.Model):
    """
    Reporting row: one per received purchase line.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    company = models.ForeignKey(
        "tenants.Company",
        on_delete=models.CASCADE,
        related_name="purchase_transactions",
    )
    order = models.ForeignKey(
        PurchaseOrder,
        on_delete=models.PROTECT,
        related_name="transactions",
    )
    supplier = models.ForeignKey(
        Supplier,
        on_delete=models.PROTECT,
        related_name="transactions",
    )
    product = models.ForeignKey(
        "products.Product",
        on_delete=models.PROTECT,
        related_name="purchase_transactions",
    )
    warehouse = models.ForeignKey(
        "warehouses.Warehouse",
        on_delete=models.PROTECT,
        related_name="purchase_transactions",
    )
    batch = models.ForeignKey(
        "products.StockBatch",
        on_delete=models.PROTECT,
        related_name="purchase_transactions",
    )

    quantity = models.PositiveIntegerField()
    rate = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["company", "created_at"], name="purchasetxn_company_idx"),
        ]
