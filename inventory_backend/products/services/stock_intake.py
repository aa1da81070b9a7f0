# products/services/stock_intake.py

"""
STOCK INTAKE (NEW BATCH)

Purpose:
- Create ONE new StockBatch with a freshly generated batch number.
- Produce the matching StockMovement ledger row (RECEIPT or TRANSFER_IN).
- Optionally increment Product.total_stock (opening stock + purchase receipts
  do; transfer arrivals do not).

Used by:
- product creation (opening stock per warehouse)
- purchase order confirmation
- transfer confirmation (receiving side)
"""

from __future__ import annotations

import logging

from django.db import IntegrityError, transaction
from django.db.models import F

from backend.errors import ConflictError, InvalidStateError
from products.models import Product, StockBatch, StockMovement
from products.services.line_items import money, to_int_qty
from products.services.numbering import generate_batch_number

logger = logging.getLogger(__name__)


@transaction.atomic
def intake_batch(
    *,
    company,
    product: Product,
    warehouse,
    quantity,
    unit_cost=None,
    user=None,
    reason=StockMovement.Reason.RECEIPT,
    source_type=StockMovement.SourceType.PRODUCT,
    source_id=None,
    increment_total_stock: bool = True,
) -> StockBatch:
    if product is None:
        raise InvalidStateError("Product is required")
    if warehouse is None:
        raise InvalidStateError("Warehouse is required")
    if product.company_id != company.pk or warehouse.company_id != company.pk:
        raise InvalidStateError("Product and warehouse must belong to the same company")

    qty = to_int_qty(quantity)
    if qty <= 0:
        raise InvalidStateError("quantity must be greater than zero")

    cost = money(unit_cost if unit_cost is not None else product.cost_price)

    batch_number = generate_batch_number(company=company, warehouse=warehouse)

    try:
        with transaction.atomic():
            batch = StockBatch.objects.create(
                company=company,
                product=product,
                warehouse=warehouse,
                warehouse_name=warehouse.name,
                batch_number=batch_number,
                opening_stock=qty,
                committed_quantity=0,
                unit_cost=cost,
            )
    except IntegrityError as exc:
        raise ConflictError(f"Batch number {batch_number} already exists") from exc

    StockMovement.objects.create(
        company=company,
        product=product,
        batch=batch,
        reason=reason,
        quantity=qty,
        opening_delta=qty,
        committed_delta=0,
        unit_cost_snapshot=cost,
        source_type=source_type,
        source_id=source_id,
        performed_by=user,
    )

    if increment_total_stock:
        Product.objects.filter(pk=product.pk).update(total_stock=F("total_stock") + qty)

    logger.info(
        "batch created",
        extra={
            "company_id": str(company.pk),
            "product_id": str(product.pk),
            "warehouse_id": str(warehouse.pk),
            "batch_number": batch_number,
            "quantity": qty,
            "reason": str(reason),
        },
    )
    return batch
