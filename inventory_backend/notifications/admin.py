from django.contrib import admin

from notifications.models import Notification


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ("created_at", "kind", "recipient", "title", "is_read")
    list_filter = ("kind", "is_read", "company")
    search_fields = ("title", "recipient__email")
    readonly_fields = ("created_at", "read_at")
