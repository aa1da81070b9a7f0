# products/services/numbering.py

"""
SERIAL + BATCH NUMBER GENERATION

Purpose:
- next_serial(): tenant-scoped counter per (prefix, module), incremented under
  a row lock so concurrent callers always receive distinct values. A first
  caller that loses the race to create the row falls back to the locked get.
- format_serial(): "{prefix}-{n:07d}".
- generate_batch_number(): warehouse prefix (first three letters, upper) +
  YYYYMMDD, serial from the "batch" counter. Numbers are unique per company;
  numbers already taken there are skipped in a bounded retry loop; exhausting
  it raises ConflictError.
- next_document_number(): SO / INV / PO / REQ document numbers.
"""

from __future__ import annotations

import logging
from datetime import date

from django.conf import settings
from django.db import IntegrityError, transaction
from django.db.models import F
from django.utils import timezone

from backend.errors import ConflictError
from products.models import SerialNumber, StockBatch

logger = logging.getLogger(__name__)

BATCH_MODULE = "batch"


def format_serial(prefix: str, n: int) -> str:
    return f"{prefix}-{int(n):07d}"


@transaction.atomic
def next_serial(*, company, prefix: str, module: str) -> int:
    lookup = {"company": company, "prefix": prefix, "module": module}
    counter = SerialNumber.objects.select_for_update().filter(**lookup).first()

    if counter is None:
        try:
            with transaction.atomic():
                counter = SerialNumber.objects.create(current=0, **lookup)
        except IntegrityError:
            # a concurrent first caller created the row; wait on its lock
            counter = SerialNumber.objects.select_for_update().get(**lookup)

    SerialNumber.objects.filter(pk=counter.pk).update(current=F("current") + 1)
    counter.refresh_from_db(fields=["current"])
    return int(counter.current)


def warehouse_prefix(name: str) -> str:
    letters = "".join(ch for ch in (name or "") if ch.isalnum())
    return letters[:3].upper().ljust(3, "X")


@transaction.atomic
def generate_batch_number(*, company, warehouse, on_date: date | None = None) -> str:
    stamp = (on_date or timezone.localdate()).strftime("%Y%m%d")
    prefix = f"{warehouse_prefix(warehouse.name)}{stamp}"

    max_attempts = max(int(getattr(settings, "BATCH_NUMBER_MAX_ATTEMPTS", 5)), 1)

    for attempt in range(1, max_attempts + 1):
        serial = next_serial(company=company, prefix=prefix, module=BATCH_MODULE)
        candidate = format_serial(prefix, serial)

        if not StockBatch.objects.filter(company=company, batch_number=candidate).exists():
            return candidate

        logger.warning(
            "batch number collision",
            extra={"candidate": candidate, "attempt": attempt, "company_id": str(company.pk)},
        )

    raise ConflictError(
        f"Unable to generate a unique batch number for warehouse {warehouse.name}"
    )


def next_document_number(*, company, prefix: str, module: str) -> str:
    return format_serial(prefix, next_serial(company=company, prefix=prefix, module=module))
