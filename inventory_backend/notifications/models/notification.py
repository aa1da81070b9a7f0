# notifications/models/notification.py

import uuid

from django.conf import settings
from django.db import models
from django.utils import timezone


class Notification(models.Model):
    """
    In-app copy of every workflow notification.

    Written inside the business transaction; the email copy is sent after
    commit and may fail without affecting this row.
    """

    KIND_TRANSFER_REQUEST = "transfer_request"
    KIND_TRANSFER_APPROVED = "transfer_approved"
    KIND_TRANSFER_REJECTED = "transfer_rejected"
    KIND_TRANSFER_CONFIRMED = "transfer_confirmed"
    KIND_SALES_APPROVAL = "sales_approval"
    KIND_SALES_APPROVED = "sales_approved"
    KIND_SALES_REJECTED = "sales_rejected"
    KIND_PURCHASE_APPROVAL = "purchase_approval"
    KIND_PURCHASE_APPROVED = "purchase_approved"
    KIND_PURCHASE_REJECTED = "purchase_rejected"

    KIND_CHOICES = [
        (KIND_TRANSFER_REQUEST, "Transfer request"),
        (KIND_TRANSFER_APPROVED, "Transfer approved"),
        (KIND_TRANSFER_REJECTED, "Transfer rejected"),
        (KIND_TRANSFER_CONFIRMED, "Transfer confirmed"),
        (KIND_SALES_APPROVAL, "Sales order awaiting approval"),
        (KIND_SALES_APPROVED, "Sales order approved"),
        (KIND_SALES_REJECTED, "Sales order rejected"),
        (KIND_PURCHASE_APPROVAL, "Purchase order awaiting approval"),
        (KIND_PURCHASE_APPROVED, "Purchase order approved"),
        (KIND_PURCHASE_REJECTED, "Purchase order rejected"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    company = models.ForeignKey(
        "tenants.Company",
        on_delete=models.CASCADE,
        related_name="notifications",
    )
    recipient = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="notifications",
    )

    kind = models.CharField(max_length=32, choices=KIND_CHOICES)
    title = models.CharField(max_length=255)
    message = models.TextField(blank=True)
    context = models.JSONField(default=dict, blank=True)

    is_read = models.BooleanField(default=False)
    read_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["recipient", "is_read"], name="notif_recipient_read_idx"),
        ]

    def mark_read(self):
        if self.is_read:
            return
        self.is_read = True
        self.read_at = timezone.now()
        self.save(update_fields=["is_read", "read_at"])

    def __str__(self):
        return f"{self.kind} -> {self.recipient_id}"
