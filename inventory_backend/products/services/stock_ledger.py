# products/services/stock_ledger.py

"""
FIFO STOCK LEDGER

Purpose:
- Reserve:  opening_stock -> committed_quantity    (sales order approval)
- Release:  committed_quantity -> opening_stock    (sales order cancel / reject)
- Consume:  committed_quantity -> shipped          (invoice creation)
- Restore:  shipped -> opening_stock + total_stock (invoice cancellation)
- Transfer: opening_stock of a source batch -> new batch in another warehouse

Rules:
- Batches are walked oldest first (created_at, then batch_number), scoped to
  company + product + warehouse.
- Every call is atomic: a shortfall on any line rolls back every line.
- Candidate batches are locked with select_for_update(); each change is also a
  conditional UPDATE (WHERE field >= take) so a batch can never go negative.
- Every batch touched gets an immutable StockMovement row.
- Product.total_stock is only touched by restore_invoice_stock here.
"""

from __future__ import annotations

import logging
from collections import defaultdict

from django.db import transaction
from django.db.models import F, Sum

from backend.errors import InsufficientStockError, NotFoundError, StockReleaseError
from products.models import Product, StockBatch, StockMovement
from products.services.line_items import LineItem

logger = logging.getLogger(__name__)

Reason = StockMovement.Reason
SourceType = StockMovement.SourceType


# ============================================================
# PRIMITIVES
# ============================================================


def _get_product(*, company, product_id) -> Product:
    product = Product.objects.filter(company=company, pk=product_id).first()
    if product is None:
        raise NotFoundError(f"Product {product_id} not found")
    return product


def _locked_batches(*, company, product_id, warehouse_id, **filters) -> list[StockBatch]:
    return list(
        StockBatch.objects.select_for_update()
        .filter(
            company=company,
            product_id=product_id,
            warehouse_id=warehouse_id,
            **filters,
        )
        .order_by("created_at", "batch_number")
    )


def _plan_fifo(batches, *, field: str, quantity: int) -> tuple[list[tuple[StockBatch, int]], int]:
    """
    Returns ([(batch, take), ...], remaining). remaining > 0 means shortfall.
    """
    plan = []
    remaining = int(quantity)
    for batch in batches:
        if remaining <= 0:
            break
        available = int(getattr(batch, field) or 0)
        if available <= 0:
            continue
        take = available if available <= remaining else remaining
        plan.append((batch, take))
        remaining -= take
    return plan, remaining


def apply_batch_delta(*, batch_id, opening_delta: int = 0, committed_delta: int = 0) -> bool:
    """
    Conditional update. Returns False when the guard fails (the batch would go
    negative), in which case nothing was written.
    """
    filters = {"pk": batch_id}
    if opening_delta < 0:
        filters["opening_stock__gte"] = -opening_delta
    if committed_delta < 0:
        filters["committed_quantity__gte"] = -committed_delta

    updated = StockBatch.objects.filter(**filters).update(
        opening_stock=F("opening_stock") + opening_delta,
        committed_quantity=F("committed_quantity") + committed_delta,
    )
    return updated == 1


def record_movement(
    *,
    batch: StockBatch,
    reason,
    quantity: int,
    opening_delta: int = 0,
    committed_delta: int = 0,
    source_type,
    source_id=None,
    user=None,
) -> StockMovement:
    return StockMovement.objects.create(
        company_id=batch.company_id,
        product_id=batch.product_id,
        batch=batch,
        reason=reason,
        quantity=int(quantity),
        opening_delta=int(opening_delta),
        committed_delta=int(committed_delta),
        unit_cost_snapshot=batch.unit_cost,
        source_type=source_type,
        source_id=source_id,
        performed_by=user,
    )


def _apply_plan(
    *,
    plan,
    opening_sign: int,
    committed_sign: int,
    reason,
    source_type,
    source_id,
    user,
    error_cls,
    error_message: str,
) -> list[StockMovement]:
    movements = []
    for batch, take in plan:
        opening_delta = opening_sign * take
        committed_delta = committed_sign * take

        if not apply_batch_delta(
            batch_id=batch.pk,
            opening_delta=opening_delta,
            committed_delta=committed_delta,
        ):
            raise error_cls(error_message)

        movements.append(
            record_movement(
                batch=batch,
                reason=reason,
                quantity=take,
                opening_delta=opening_delta,
                committed_delta=committed_delta,
                source_type=source_type,
                source_id=source_id,
                user=user,
            )
        )
    return movements


# ============================================================
# RESERVE (opening -> committed)
# ============================================================


@transaction.atomic
def reserve_lines(
    *,
    company,
    lines: list[LineItem],
    user=None,
    source_type=SourceType.SALES_ORDER,
    source_id=None,
) -> list[StockMovement]:
    """
    All-or-nothing FIFO reservation for every line.
    """
    movements = []

    for line in lines:
        product = _get_product(company=company, product_id=line.product_id)
        batches = _locked_batches(
            company=company,
            product_id=line.product_id,
            warehouse_id=line.warehouse_id,
            opening_stock__gt=0,
        )

        plan, remaining = _plan_fifo(batches, field="opening_stock", quantity=line.quantity)
        message = f"Insufficient quantity for product {product.name}"
        if remaining > 0:
            logger.info(
                "reservation shortfall",
                extra={
                    "company_id": str(company.pk),
                    "product_id": str(product.pk),
                    "requested": line.quantity,
                    "short_by": remaining,
                },
            )
            raise InsufficientStockError(message)

        movements += _apply_plan(
            plan=plan,
            opening_sign=-1,
            committed_sign=1,
            reason=Reason.RESERVE,
            source_type=source_type,
            source_id=source_id,
            user=user,
            error_cls=InsufficientStockError,
            error_message=message,
        )

    return movements


# ============================================================
# RELEASE (committed -> opening)
# ============================================================


@transaction.atomic
def release_lines(
    *,
    company,
    lines: list[LineItem],
    user=None,
    source_type=SourceType.SALES_ORDER,
    source_id=None,
) -> list[StockMovement]:
    movements = []

    for line in lines:
        product = _get_product(company=company, product_id=line.product_id)
        batches = _locked_batches(
            company=company,
            product_id=line.product_id,
            warehouse_id=line.warehouse_id,
            committed_quantity__gt=0,
        )

        plan, remaining = _plan_fifo(batches, field="committed_quantity", quantity=line.quantity)
        message = f"Unable to return all quantities for product {product.name}"
        if remaining > 0:
            raise StockReleaseError(message)

        movements += _apply_plan(
            plan=plan,
            opening_sign=1,
            committed_sign=-1,
            reason=Reason.RELEASE,
            source_type=source_type,
            source_id=source_id,
            user=user,
            error_cls=StockReleaseError,
            error_message=message,
        )

    return movements


# ============================================================
# CONSUME (committed -> shipped)
# ============================================================


@transaction.atomic
def consume_committed(*, company, lines: list[LineItem], invoice_id, user=None) -> list[StockMovement]:
    movements = []

    for line in lines:
        product = _get_product(company=company, product_id=line.product_id)
        batches = _locked_batches(
            company=company,
            product_id=line.product_id,
            warehouse_id=line.warehouse_id,
            committed_quantity__gt=0,
        )

        plan, remaining = _plan_fifo(batches, field="committed_quantity", quantity=line.quantity)
        message = f"Insufficient quantity for product {product.name}"
        if remaining > 0:
            raise InsufficientStockError(message)

        movements += _apply_plan(
            plan=plan,
            opening_sign=0,
            committed_sign=-1,
            reason=Reason.FULFIL,
            source_type=SourceType.INVOICE,
            source_id=invoice_id,
            user=user,
            error_cls=InsufficientStockError,
            error_message=message,
        )

    return movements


def committed_total(*, company, product_id, warehouse_id) -> int:
    return int(
        StockBatch.objects.filter(
            company=company, product_id=product_id, warehouse_id=warehouse_id
        ).aggregate(total=Sum("committed_quantity"))["total"]
        or 0
    )


# ============================================================
# RESTORE (invoice cancellation)
# ============================================================


@transaction.atomic
def restore_invoice_stock(*, company, invoice_id, lines: list[LineItem], user=None) -> list[StockMovement]:
    """
    Reverse the FULFIL movements of an invoice onto the exact batches they came
    from, then add each line's quantity back to Product.total_stock.
    """
    fulfil_rows = list(
        StockMovement.objects.select_related("batch")
        .filter(
            company=company,
            reason=Reason.FULFIL,
            source_type=SourceType.INVOICE,
            source_id=invoice_id,
        )
        .order_by("created_at")
    )

    already = defaultdict(int)
    for row in StockMovement.objects.filter(
        company=company,
        reason=Reason.INVOICE_CANCEL,
        source_type=SourceType.INVOICE,
        source_id=invoice_id,
    ).values("batch_id").annotate(total=Sum("quantity")):
        already[row["batch_id"]] = int(row["total"] or 0)

    consumed = defaultdict(int)
    for mv in fulfil_rows:
        consumed[mv.batch_id] += int(mv.quantity)

    movements = []
    for batch_id, qty in consumed.items():
        restore_qty = qty - already.get(batch_id, 0)
        if restore_qty <= 0:
            continue

        batch = StockBatch.objects.select_for_update().get(pk=batch_id)
        apply_batch_delta(batch_id=batch.pk, opening_delta=restore_qty)

        movements.append(
            record_movement(
                batch=batch,
                reason=Reason.INVOICE_CANCEL,
                quantity=restore_qty,
                opening_delta=restore_qty,
                source_type=SourceType.INVOICE,
                source_id=invoice_id,
                user=user,
            )
        )

    per_product = defaultdict(int)
    for line in lines:
        per_product[line.product_id] += int(line.quantity)

    for product_id, qty in per_product.items():
        Product.objects.filter(company=company, pk=product_id).update(
            total_stock=F("total_stock") + qty
        )

    logger.info(
        "invoice stock restored",
        extra={"invoice_id": str(invoice_id), "batches": len(movements)},
    )
    return movements


# ============================================================
# TRANSFER (source batch -> new batch in another warehouse)
# ============================================================


@transaction.atomic
def transfer_from_batch(
    *,
    company,
    source_batch_id,
    receiving_warehouse,
    quantity: int,
    request_id=None,
    user=None,
) -> StockBatch:
    from products.services.stock_intake import intake_batch

    source = (
        StockBatch.objects.select_for_update()
        .select_related("product")
        .filter(company=company, pk=source_batch_id)
        .first()
    )
    if source is None:
        raise NotFoundError(f"Stock batch {source_batch_id} not found")

    qty = int(quantity)
    if not apply_batch_delta(batch_id=source.pk, opening_delta=-qty):
        raise InsufficientStockError(
            f"Insufficient quantity for product {source.product.name} in batch {source.batch_number}"
        )

    record_movement(
        batch=source,
        reason=Reason.TRANSFER_OUT,
        quantity=qty,
        opening_delta=-qty,
        source_type=SourceType.STOCK_REQUEST,
        source_id=request_id,
        user=user,
    )

    return intake_batch(
        company=company,
        product=source.product,
        warehouse=receiving_warehouse,
        quantity=qty,
        unit_cost=source.unit_cost,
        user=user,
        reason=Reason.TRANSFER_IN,
        source_type=SourceType.STOCK_REQUEST,
        source_id=request_id,
        increment_total_stock=False,
    )
