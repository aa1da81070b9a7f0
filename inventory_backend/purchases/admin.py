from django.contrib import admin

from purchases.models import (
    PurchaseConfirmation,
    PurchaseOrder,
    PurchaseOrderItem,
    PurchaseTransaction,
    Supplier,
)


@admin.register(Supplier)
class SupplierAdmin(admin.ModelAdmin):
    list_display = ("name", "company", "phone", "email", "is_active")
    list_filter = ("is_active", "company")
    search_fields = ("name", "email")


class PurchaseOrderItemInline(admin.TabularInline):
    model = PurchaseOrderItem
    extra = 0
    can_delete = False
    readonly_fields = ("product", "warehouse", "quantity", "rate", "amount", "received_batch")


@admin.register(PurchaseOrder)
class PurchaseOrderAdmin(admin.ModelAdmin):
    list_display = ("order_number", "supplier", "status", "total_amount", "created_at")
    list_filter = ("status", "company")
    search_fields = ("order_number", "supplier__name")
    readonly_fields = ("order_number", "status", "total_quantity", "total_amount", "approved_at")
    inlines = [PurchaseOrderItemInline]


@admin.register(PurchaseConfirmation)
class PurchaseConfirmationAdmin(admin.ModelAdmin):
    list_display = ("order", "confirmed_by", "total_quantity", "total_amount", "created_at")


@admin.register(PurchaseTransaction)
class PurchaseTransactionAdmin(admin.ModelAdmin):
    list_display = ("order", "product", "warehouse", "quantity", "amount", "created_at")
    list_filter = ("company",)
