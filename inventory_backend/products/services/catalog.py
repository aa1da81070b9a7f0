# products/services/catalog.py

"""
PRODUCT CATALOG SERVICE

Purpose:
- Create a product and, in the same transaction, one opening-stock batch per
  warehouse entry (warehouse looked up by id or case-insensitive name).
- A category name is matched case-insensitively and created when missing.
- total_stock starts at the sum of the opening quantities.
"""

from __future__ import annotations

import logging

from django.db import transaction

from backend.errors import ConflictError
from products.models import Product, StockMovement
from products.services.categories import category_for_name
from products.services.line_items import money
from products.services.stock_intake import intake_batch
from warehouses.services.warehouses import get_warehouse

logger = logging.getLogger(__name__)


@transaction.atomic
def create_product(
    *,
    company,
    name: str,
    sku: str = "",
    unit: str = "unit",
    description: str = "",
    unit_price=None,
    cost_price=None,
    category_name: str = "",
    opening_stocks=(),
    user=None,
) -> Product:
    sku = (sku or "").strip()
    if sku and Product.objects.filter(company=company, sku__iexact=sku).exists():
        raise ConflictError(f"Product with sku '{sku}' already exists")

    category = None
    if (category_name or "").strip():
        category = category_for_name(company=company, name=category_name)

    product = Product(
        company=company,
        name=name,
        category=category,
        sku=sku,
        unit=(unit or "unit").strip(),
        description=description or "",
        unit_price=money(unit_price),
        cost_price=money(cost_price),
        total_stock=0,
    )
    product.full_clean()
    product.save()

    for entry in opening_stocks or ():
        warehouse = get_warehouse(
            company=company,
            warehouse_id=entry.get("warehouse_id"),
            name=entry.get("warehouse_name"),
        )
        intake_batch(
            company=company,
            product=product,
            warehouse=warehouse,
            quantity=entry.get("quantity"),
            unit_cost=entry.get("unit_cost", product.cost_price),
            user=user,
            source_type=StockMovement.SourceType.PRODUCT,
            source_id=product.pk,
        )

    product.refresh_from_db()

    logger.info(
        "product created",
        extra={
            "company_id": str(company.pk),
            "product_id": str(product.pk),
            "opening_batches": len(opening_stocks or ()),
            "total_stock": product.total_stock,
        },
    )
    return product
