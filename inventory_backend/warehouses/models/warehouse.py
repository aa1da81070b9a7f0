# warehouses/models/warehouse.py

import uuid

from django.core.exceptions import ValidationError
from django.db import models


class Warehouse(models.Model):
    """
    A physical stock location owned by one company.

    Guarantees:
    - name is unique per company, case-insensitively (enforced in clean())
    - batches reference the warehouse by FK; the name is only ever a snapshot
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    company = models.ForeignKey(
        "tenants.Company",
        on_delete=models.CASCADE,
        related_name="warehouses",
    )

    name = models.CharField(max_length=255)
    address = models.TextField(blank=True)
    phone = models.CharField(max_length=50, blank=True)

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        constraints = [
            models.UniqueConstraint(
                fields=["company", "name"],
                name="uniq_warehouse_name_per_company",
            ),
        ]

    def clean(self):
        self.name = (self.name or "").strip()
        if not self.name:
            raise ValidationError({"name": "name is required"})

        clash = Warehouse.objects.filter(
            company_id=self.company_id, name__iexact=self.name
        ).exclude(pk=self.pk)
        if clash.exists():
            raise ValidationError({"name": f"Warehouse '{self.name}' already exists"})

    def save(self, *args, **kwargs):
        self.full_clean()
        super().save(*args, **kwargs)

    def __str__(self):
        return self.name
