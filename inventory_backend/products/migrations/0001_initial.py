import uuid
from decimal import Decimal

import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("tenants", "0001_initial"),
        ("warehouses", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Product",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("name", models.CharField(db_index=True, max_length=255)),
                ("sku", models.CharField(blank=True, default="", max_length=128)),
                ("description", models.TextField(blank=True)),
                ("unit", models.CharField(default="unit", max_length=32)),
                (
                    "unit_price",
                    models.DecimalField(
                        decimal_places=2, default=Decimal("0.00"), help_text="Default selling rate.", max_digits=12
                    ),
                ),
                (
                    "cost_price",
                    models.DecimalField(
                        decimal_places=2, default=Decimal("0.00"), help_text="Default purchase rate.", max_digits=12
                    ),
                ),
                (
                    "total_stock",
                    models.PositiveIntegerField(
                        default=0, help_text="Denormalized stock counter (service-managed only)"
                    ),
                ),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "company",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="products",
                        to="tenants.company",
                    ),
                ),
            ],
            options={
                "ordering": ["name"],
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(("sku", ""), _negated=True),
                        fields=("company", "sku"),
                        name="uniq_product_sku_per_company",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("total_stock__gte", 0)),
                        name="chk_product_total_stock_gte_zero",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="StockBatch",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("warehouse_name", models.CharField(blank=True, max_length=255)),
                ("batch_number", models.CharField(max_length=64, unique=True)),
                ("opening_stock", models.PositiveIntegerField(default=0)),
                ("committed_quantity", models.PositiveIntegerField(default=0)),
                (
                    "unit_cost",
                    models.DecimalField(
                        decimal_places=2,
                        default=Decimal("0.00"),
                        help_text="Unit cost carried by this batch (copied forward on transfer).",
                        max_digits=12,
                    ),
                ),
                ("created_at", models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                (
                    "company",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="stock_batches",
                        to="tenants.company",
                    ),
                ),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="stock_batches",
                        to="products.product",
                    ),
                ),
                (
                    "warehouse",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="stock_batches",
                        to="warehouses.warehouse",
                    ),
                ),
            ],
            options={
                "ordering": ["created_at", "batch_number"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("opening_stock__gte", 0)),
                        name="chk_stockbatch_opening_gte_zero",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("committed_quantity__gte", 0)),
                        name="chk_stockbatch_committed_gte_zero",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="StockMovement",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                (
                    "reason",
                    models.CharField(
                        choices=[
                            ("RECEIPT", "Stock Receipt"),
                            ("RESERVE", "Sales Reservation"),
                            ("RELEASE", "Reservation Release"),
                            ("FULFIL", "Invoice Fulfilment"),
                            ("INVOICE_CANCEL", "Invoice Cancellation"),
                            ("ADJUSTMENT", "Manual Adjustment"),
                            ("TRANSFER_OUT", "Transfer Out"),
                            ("TRANSFER_IN", "Transfer In"),
                        ],
                        db_index=True,
                        max_length=20,
                    ),
                ),
                ("quantity", models.PositiveIntegerField()),
                ("opening_delta", models.IntegerField(default=0)),
                ("committed_delta", models.IntegerField(default=0)),
                (
                    "unit_cost_snapshot",
                    models.DecimalField(
                        decimal_places=2,
                        default=Decimal("0.00"),
                        help_text="Unit cost snapshot from batch at movement time (immutable).",
                        max_digits=12,
                    ),
                ),
                (
                    "source_type",
                    models.CharField(
                        choices=[
                            ("PRODUCT", "Product"),
                            ("SALES_ORDER", "Sales Order"),
                            ("INVOICE", "Invoice"),
                            ("STOCK_REQUEST", "Stock Request"),
                            ("PURCHASE_ORDER", "Purchase Order"),
                            ("ADJUSTMENT", "Inventory Adjustment"),
                        ],
                        max_length=20,
                    ),
                ),
                ("source_id", models.UUIDField(blank=True, db_index=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                (
                    "batch",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="stock_movements",
                        to="products.stockbatch",
                    ),
                ),
                (
                    "company",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="stock_movements",
                        to="tenants.company",
                    ),
                ),
                (
                    "performed_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="stock_movements",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="stock_movements",
                        to="products.product",
                    ),
                ),
            ],
            options={
                "ordering": ["created_at"],
            },
        ),
        migrations.CreateModel(
            name="InventoryAdjustment",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                (
                    "adjustment_type",
                    models.CharField(choices=[("QUANTITY", "Quantity"), ("VALUE", "Value")], max_length=10),
                ),
                ("previous_quantity", models.PositiveIntegerField(default=0)),
                ("new_quantity", models.PositiveIntegerField(default=0)),
                ("quantity_delta", models.IntegerField(default=0)),
                ("previous_total_stock", models.PositiveIntegerField(default=0)),
                ("new_total_stock", models.PositiveIntegerField(default=0)),
                ("previous_unit_cost", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("new_unit_cost", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("reason", models.CharField(blank=True, max_length=255)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                (
                    "batch",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="adjustments",
                        to="products.stockbatch",
                    ),
                ),
                (
                    "company",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="inventory_adjustments",
                        to="tenants.company",
                    ),
                ),
                (
                    "performed_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="inventory_adjustments",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="adjustments",
                        to="products.product",
                    ),
                ),
                (
                    "warehouse",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="adjustments",
                        to="warehouses.warehouse",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
            },
        ),
        migrations.CreateModel(
            name="SerialNumber",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("prefix", models.CharField(max_length=64)),
                ("module", models.CharField(max_length=32)),
                ("current", models.PositiveBigIntegerField(default=0)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "company",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="serial_numbers",
                        to="tenants.company",
                    ),
                ),
            ],
            options={
                "constraints": [
                    models.UniqueConstraint(
                        fields=("company", "prefix", "module"),
                        name="uniq_serial_per_company_prefix_module",
                    ),
                ],
            },
        ),
    ]
