from django.contrib import admin

from sales.models import (
    Customer,
    Invoice,
    InvoiceItem,
    Payment,
    SalesOrder,
    SalesOrderItem,
    SalesTransaction,
)


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    list_display = ("name", "company", "email", "phone", "balance", "is_active")
    list_filter = ("is_active", "company")
    search_fields = ("name", "email", "phone")
    readonly_fields = ("total_invoice_amount", "total_payment_amount", "balance")


class SalesOrderItemInline(admin.TabularInline):
    model = SalesOrderItem
    extra = 0
    can_delete = False
    readonly_fields = ("product", "warehouse", "warehouse_name", "quantity", "rate", "amount")


@admin.register(SalesOrder)
class SalesOrderAdmin(admin.ModelAdmin):
    list_display = ("order_number", "customer", "status", "total_quantity", "total_amount", "created_at")
    list_filter = ("status", "order_type", "company")
    search_fields = ("order_number", "customer__name")
    readonly_fields = ("order_number", "status", "stock_reserved", "total_quantity", "total_amount")
    inlines = [SalesOrderItemInline]


class InvoiceItemInline(admin.TabularInline):
    model = InvoiceItem
    extra = 0
    can_delete = False
    readonly_fields = ("product", "warehouse", "warehouse_name", "quantity", "rate", "amount")


@admin.register(Invoice)
class InvoiceAdmin(admin.ModelAdmin):
    list_display = ("invoice_number", "customer", "payment_status", "total_amount", "amount_paid", "created_at")
    list_filter = ("payment_status", "company")
    search_fields = ("invoice_number", "customer__name")
    readonly_fields = ("invoice_number", "payment_status", "total_amount", "amount_paid")
    inlines = [InvoiceItemInline]

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ("invoice", "customer", "amount", "mode", "paid_at")
    list_filter = ("mode", "company")

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(SalesTransaction)
class SalesTransactionAdmin(admin.ModelAdmin):
    list_display = ("invoice", "product", "quantity", "amount", "is_voided", "created_at")
    list_filter = ("is_voided", "company")
