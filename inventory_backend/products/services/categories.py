# products/services/categories.py

"""
CATEGORY SERVICE

- create_category(): explicit create; a case-insensitive duplicate name in
  the same company is a ConflictError.
- category_for_name(): lookup-or-create used when a product is created with a
  category name.
"""

from __future__ import annotations

import logging

from django.db import transaction

from backend.errors import ConflictError, InvalidStateError
from products.models import Category

logger = logging.getLogger(__name__)


def _clean(name: str) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise InvalidStateError("Category name is required")
    return cleaned


@transaction.atomic
def create_category(*, company, name: str, user=None) -> Category:
    cleaned = _clean(name)
    if Category.objects.filter(company=company, name__iexact=cleaned).exists():
        raise ConflictError(f"Category '{cleaned}' already exists")

    category = Category.objects.create(company=company, name=cleaned)
    logger.info(
        "category created",
        extra={"company_id": str(company.pk), "category_id": str(category.pk)},
    )
    return category


def category_for_name(*, company, name: str) -> Category:
    cleaned = _clean(name)
    category = Category.objects.filter(company=company, name__iexact=cleaned).first()
    if category is None:
        category = Category.objects.create(company=company, name=cleaned)
    return category
