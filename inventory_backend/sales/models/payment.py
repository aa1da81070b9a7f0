# sales/models/payment.py

import uuid
from decimal import Decimal

from django.conf import settings
from django.db import models
from django.utils import timezone

User = settings.AUTH_USER_MODEL


class Payment(models.Model):
    """
    One payment against one invoice.

    Only CASH and TRANSFER payments count as money received (customer balance,
    debtors report). BALANCE settles from the customer's existing credit.
    """

    MODE_CASH = "CASH"
    MODE_TRANSFER = "TRANSFER"
    MODE_BALANCE = "BALANCE"

    MODE_CHOICES = [
        (MODE_CASH, "Cash"),
        (MODE_TRANSFER, "Transfer"),
        (MODE_BALANCE, "Customer balance"),
    ]

    RECEIVED_MODES = (MODE_CASH, MODE_TRANSFER)

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    company = models.ForeignKey(
        "tenants.Company",
        on_delete=models.CASCADE,
        related_name="payments",
    )
    invoice = models.ForeignKey(
        "sales.Invoice",
        on_delete=models.PROTECT,
        related_name="payments",
    )
    customer = models.ForeignKey(
        "sales.Customer",
        on_delete=models.PROTECT,
        related_name="payments",
    )

    amount = models.DecimalField(max_digits=14, decimal_places=2)
    mode = models.CharField(max_length=16, choices=MODE_CHOICES, default=MODE_CASH)
    reference = models.CharField(max_length=128, blank=True)

    received_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        related_name="payments_received",
    )

    paid_at = models.DateTimeField(default=timezone.now)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-paid_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(amount__gt=Decimal("0.00")),
                name="payment_amount_positive",
            ),
        ]

    def __str__(self):
        return f"{self.mode} {self.amount} -> {self.invoice_id}"
