"""
=====================================================
PATH: products/admin.py
=====================================================

Admin rules (audit-safe inventory):

- Products are editable (metadata only; total_stock is read-only).
- StockBatch, StockMovement and InventoryAdjustment are audit artifacts:
  view-only, never edited or deleted from admin.
- Stock enters through the API (intake, purchase confirmation, transfers)
  so every batch carries a generated number and a RECEIPT movement.
"""

from __future__ import annotations

from django.contrib import admin

from products.models import (
    Category,
    InventoryAdjustment,
    Product,
    SerialNumber,
    StockBatch,
    StockMovement,
)


class ReadOnlyAdmin(admin.ModelAdmin):
    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


class StockBatchInline(admin.TabularInline):
    model = StockBatch
    extra = 0
    can_delete = False
    show_change_link = True
    fields = (
        "batch_number",
        "warehouse_name",
        "opening_stock",
        "committed_quantity",
        "unit_cost",
        "created_at",
    )
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        return False


# =====================================================
# PRODUCT
# =====================================================

@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = (
        "name",
        "sku",
        "company",
        "category",
        "unit_price",
        "total_stock",
        "is_active",
        "created_at",
    )
    list_filter = ("is_active", "company", "category", "created_at")
    search_fields = ("sku", "name")
    ordering = ("-created_at",)
    readonly_fields = ("total_stock", "created_at", "updated_at")

    inlines = [StockBatchInline]


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ("name", "company", "created_at")
    list_filter = ("company",)
    search_fields = ("name",)


# =====================================================
# LEDGER (VIEW-ONLY)
# =====================================================

@admin.register(StockBatch)
class StockBatchAdmin(ReadOnlyAdmin):
    list_display = (
        "batch_number",
        "product",
        "warehouse_name",
        "opening_stock",
        "committed_quantity",
        "unit_cost",
        "created_at",
    )
    list_filter = ("company", "warehouse", "created_at")
    search_fields = ("batch_number", "product__name", "product__sku")
    ordering = ("created_at", "batch_number")


@admin.register(StockMovement)
class StockMovementAdmin(ReadOnlyAdmin):
    list_display = (
        "created_at",
        "reason",
        "product",
        "batch",
        "quantity",
        "opening_delta",
        "committed_delta",
        "source_type",
        "source_id",
    )
    list_filter = ("reason", "source_type", "company")
    search_fields = ("batch__batch_number", "product__name", "source_id")
    ordering = ("-created_at",)


@admin.register(InventoryAdjustment)
class InventoryAdjustmentAdmin(ReadOnlyAdmin):
    list_display = (
        "created_at",
        "adjustment_type",
        "product",
        "warehouse",
        "previous_quantity",
        "new_quantity",
        "quantity_delta",
        "performed_by",
    )
    list_filter = ("adjustment_type", "company")
    search_fields = ("product__name", "batch__batch_number", "reason")
    ordering = ("-created_at",)


@admin.register(SerialNumber)
class SerialNumberAdmin(admin.ModelAdmin):
    list_display = ("company", "module", "prefix", "current")
    list_filter = ("module", "company")
    search_fields = ("prefix",)
    readonly_fields = ("current",)
