# products/services/line_items.py

"""
LINE ITEM VALUE TYPE

Purpose:
- One fixed-schema shape for every order / invoice / transfer / purchase line
  handed to the stock ledger: (product_id, warehouse_id, quantity, rate, amount).
- Quantity and money normalizers used at the service boundary.

HARD RULE: quantities are whole integer units; money is Decimal(0.01).
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from uuid import UUID

from backend.errors import InvalidStateError

TWOPLACES = Decimal("0.01")


def to_int_qty(value) -> int:
    if value is None or value == "":
        return 0

    if isinstance(value, bool):
        raise InvalidStateError("quantity must be a whole integer unit")

    if isinstance(value, int):
        return value

    if isinstance(value, Decimal) and value == value.to_integral_value():
        return int(value)

    if isinstance(value, str):
        s = value.strip()
        if s.isdigit():
            return int(s)

    raise InvalidStateError("quantity must be a whole integer unit")


def money(value) -> Decimal:
    if value is None or value == "":
        return Decimal("0.00")
    if isinstance(value, str):
        value = value.replace(",", "").strip()
    try:
        return Decimal(str(value)).quantize(TWOPLACES, rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError) as exc:
        raise InvalidStateError(f"Invalid amount: {value}") from exc


@dataclass(frozen=True)
class LineItem:
    product_id: UUID
    warehouse_id: UUID
    quantity: int
    rate: Decimal = Decimal("0.00")
    amount: Decimal = Decimal("0.00")

    @classmethod
    def build(cls, *, product_id, warehouse_id, quantity, rate=None, amount=None) -> "LineItem":
        qty = to_int_qty(quantity)
        if qty <= 0:
            raise InvalidStateError("quantity must be greater than zero")

        r = money(rate)
        a = money(amount) if amount not in (None, "") else (r * qty).quantize(TWOPLACES)
        return cls(product_id=product_id, warehouse_id=warehouse_id, quantity=qty, rate=r, amount=a)

    @classmethod
    def from_row(cls, row) -> "LineItem":
        """Build from any *Item model row (same column names on every document)."""
        return cls.build(
            product_id=row.product_id,
            warehouse_id=row.warehouse_id,
            quantity=row.quantity,
            rate=row.rate,
            amount=row.amount,
        )


def lines_from_rows(rows) -> list[LineItem]:
    return [LineItem.from_row(r) for r in rows]


def total_quantity(lines) -> int:
    return sum(int(line.quantity) for line in lines)


def total_amount(lines) -> Decimal:
    return sum((line.amount for line in lines), Decimal("0.00"))
