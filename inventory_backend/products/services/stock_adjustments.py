# products/services/stock_adjustments.py

"""
DIRECT INVENTORY ADJUSTMENT

Purpose:
- Set a batch's opening stock to a counted on-hand quantity (QUANTITY), or
  record a unit-cost revaluation (VALUE).
- Always write one immutable InventoryAdjustment audit row.

Rules (QUANTITY):
- delta = new_quantity - previous opening_stock
- batch.opening_stock = new_quantity
- product.total_stock += delta            when delta >= 0
- product.total_stock = max(total - |delta|, 0)   when delta < 0
- an ADJUSTMENT StockMovement is written when delta != 0

Rules (VALUE):
- no quantity moves; unit cost before/after is audited and the batch cost
  is updated when new_unit_cost is given

Target batch: explicit batch, else the oldest batch of the product in the
warehouse.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from django.db import transaction

from backend.errors import InvalidStateError, NotFoundError
from products.models import InventoryAdjustment, Product, StockBatch, StockMovement
from products.services.line_items import money, to_int_qty
from products.services.stock_ledger import record_movement

logger = logging.getLogger(__name__)

AdjustmentType = InventoryAdjustment.AdjustmentType


@dataclass(frozen=True)
class AdjustmentResult:
    adjustment: InventoryAdjustment
    batch: StockBatch
    product: Product
    quantity_delta: int


def _resolve_batch(*, company, product, warehouse, batch_id=None) -> StockBatch:
    qs = StockBatch.objects.select_for_update().filter(
        company=company, product=product, warehouse=warehouse
    )
    if batch_id:
        batch = qs.filter(pk=batch_id).first()
    else:
        batch = qs.order_by("created_at", "batch_number").first()

    if batch is None:
        raise NotFoundError(
            f"No stock batch for product {product.name} in warehouse {warehouse.name}"
        )
    return batch


@transaction.atomic
def adjust_inventory(
    *,
    company,
    product: Product,
    warehouse,
    adjustment_type: str = AdjustmentType.QUANTITY,
    new_quantity=None,
    new_unit_cost=None,
    batch_id=None,
    reason: str = "",
    user=None,
) -> AdjustmentResult:
    if adjustment_type not in AdjustmentType.values:
        raise InvalidStateError(f"Unknown adjustment type {adjustment_type}")

    locked_product = Product.objects.select_for_update().get(pk=product.pk, company=company)
    batch = _resolve_batch(
        company=company, product=locked_product, warehouse=warehouse, batch_id=batch_id
    )

    previous_qty = int(batch.opening_stock or 0)
    previous_total = int(locked_product.total_stock or 0)
    previous_cost = batch.unit_cost

    if adjustment_type == AdjustmentType.QUANTITY:
        if new_quantity is None or new_quantity == "":
            raise InvalidStateError("new_quantity is required for a quantity adjustment")
        new_qty = to_int_qty(new_quantity)
        if new_qty < 0:
            raise InvalidStateError("new_quantity cannot be negative")

        delta = new_qty - previous_qty
        if delta >= 0:
            new_total = previous_total + delta
        else:
            new_total = max(previous_total - abs(delta), 0)

        batch.opening_stock = new_qty
        batch.save(update_fields=["opening_stock"])

        locked_product.total_stock = new_total
        locked_product.save(update_fields=["total_stock", "updated_at"])

        if delta != 0:
            record_movement(
                batch=batch,
                reason=StockMovement.Reason.ADJUSTMENT,
                quantity=abs(delta),
                opening_delta=delta,
                source_type=StockMovement.SourceType.ADJUSTMENT,
                user=user,
            )
        new_cost = previous_cost
    else:
        new_qty = previous_qty
        delta = 0
        new_total = previous_total
        new_cost = money(new_unit_cost) if new_unit_cost not in (None, "") else previous_cost
        if new_cost != previous_cost:
            batch.unit_cost = new_cost
            batch.save(update_fields=["unit_cost"])

    adjustment = InventoryAdjustment.objects.create(
        company=company,
        product=locked_product,
        warehouse=warehouse,
        batch=batch,
        adjustment_type=adjustment_type,
        previous_quantity=previous_qty,
        new_quantity=new_qty,
        quantity_delta=delta,
        previous_total_stock=previous_total,
        new_total_stock=new_total,
        previous_unit_cost=previous_cost,
        new_unit_cost=new_cost,
        reason=(reason or "").strip(),
        performed_by=user,
    )

    logger.info(
        "inventory adjusted",
        extra={
            "company_id": str(company.pk),
            "product_id": str(locked_product.pk),
            "batch_id": str(batch.pk),
            "type": adjustment_type,
            "delta": delta,
        },
    )

    return AdjustmentResult(
        adjustment=adjustment,
        batch=batch,
        product=locked_product,
        quantity_delta=delta,
    )
