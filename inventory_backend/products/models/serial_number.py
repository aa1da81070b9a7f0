# products/models/serial_number.py

import uuid

from django.db import models


class SerialNumber(models.Model):
    """
    Tenant-scoped monotonically increasing counter keyed by (prefix, module).

    Read and incremented only through products.services.numbering.next_serial,
    which locks the row for the duration of the caller's transaction.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    company = models.ForeignKey(
        "tenants.Company", on_delete=models.CASCADE, related_name="serial_numbers"
    )
    prefix = models.CharField(max_length=64)
    module = models.CharField(max_length=32)
    current = models.PositiveBigIntegerField(default=0)

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["company", "prefix", "module"],
                name="uniq_serial_per_company_prefix_module",
            ),
        ]

    def __str__(self):
        return f"{self.module}:{self.prefix}={self.current}"
