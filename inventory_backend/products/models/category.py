# products/models/category.py

import uuid

from django.db import models


class Category(models.Model):
    """
    Tenant-scoped product grouping. Names are unique per company, compared
    case-insensitively by products.services.categories.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    company = models.ForeignKey(
        "tenants.Company",
        on_delete=models.CASCADE,
        related_name="categories",
    )
    name = models.CharField(max_length=255)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["name"]
        verbose_name_plural = "categories"
        constraints = [
            models.UniqueConstraint(
                fields=["company", "name"],
                name="uniq_category_name_per_company",
            ),
        ]

    def __str__(self):
        return self.name
