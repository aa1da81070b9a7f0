from django.contrib import admin

from transfers.models import StockRequest, StockRequestItem


class StockRequestItemInline(admin.TabularInline):
    model = StockRequestItem
    extra = 0
    can_delete = False
    readonly_fields = ("product", "source_batch", "received_batch", "quantity", "unit_cost")


@admin.register(StockRequest)
class StockRequestAdmin(admin.ModelAdmin):
    list_display = (
        "request_number",
        "status",
        "sending_warehouse",
        "receiving_warehouse",
        "requested_by",
        "approver",
        "created_at",
    )
    list_filter = ("status", "company")
    search_fields = ("request_number",)
    readonly_fields = ("request_number", "status", "approved_at", "confirmed_at", "confirmed_by")
    inlines = [StockRequestItemInline]
