# warehouses/services/warehouses.py

"""
WAREHOUSE SERVICE

Purpose:
- Tenant-scoped lookup by id or by (case-insensitive) name.
- Create / rename with a Conflict error on duplicate names.
"""

from __future__ import annotations

import logging

from django.db import transaction

from backend.errors import ConflictError, NotFoundError
from warehouses.models import Warehouse

logger = logging.getLogger(__name__)


def get_warehouse(*, company, warehouse_id=None, name: str | None = None) -> Warehouse:
    qs = Warehouse.objects.filter(company=company)

    if warehouse_id:
        warehouse = qs.filter(pk=warehouse_id).first()
    elif name:
        warehouse = qs.filter(name__iexact=name.strip()).first()
    else:
        warehouse = None

    if warehouse is None:
        label = name or warehouse_id or "?"
        raise NotFoundError(f"Warehouse {label} not found")
    return warehouse


def _ensure_unique_name(*, company, name: str, exclude_pk=None) -> str:
    cleaned = (name or "").strip()
    clash = Warehouse.objects.filter(company=company, name__iexact=cleaned)
    if exclude_pk is not None:
        clash = clash.exclude(pk=exclude_pk)
    if clash.exists():
        raise ConflictError(f"Warehouse '{cleaned}' already exists")
    return cleaned


@transaction.atomic
def create_warehouse(*, company, name: str, address: str = "", phone: str = "", user=None) -> Warehouse:
    cleaned = _ensure_unique_name(company=company, name=name)
    warehouse = Warehouse.objects.create(
        company=company, name=cleaned, address=address or "", phone=phone or ""
    )
    logger.info(
        "warehouse created",
        extra={"company_id": str(company.pk), "warehouse_id": str(warehouse.pk)},
    )
    return warehouse


@transaction.atomic
def update_warehouse(*, warehouse: Warehouse, **changes) -> Warehouse:
    if "name" in changes:
        changes["name"] = _ensure_unique_name(
            company=warehouse.company, name=changes["name"], exclude_pk=warehouse.pk
        )
    for field, value in changes.items():
        setattr(warehouse, field, value)
    warehouse.save()
    return warehouse
