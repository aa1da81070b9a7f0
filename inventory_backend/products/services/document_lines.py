# products/services/document_lines.py

"""
DOCUMENT LINE RESOLUTION

Turns raw request rows ({product_id, warehouse_id | warehouse_name, quantity,
rate, amount}) into tenant-checked (product, warehouse, LineItem) triples for
sales orders, invoices and purchase orders.
"""

from __future__ import annotations

from dataclasses import dataclass

from backend.errors import InvalidStateError, NotFoundError
from products.models import Product
from products.services.line_items import LineItem
from warehouses.models import Warehouse
from warehouses.services.warehouses import get_warehouse


@dataclass(frozen=True)
class DocumentLine:
    product: Product
    warehouse: Warehouse
    line: LineItem

    def row_kwargs(self) -> dict:
        """Column values shared by every *Item model."""
        return {
            "product": self.product,
            "warehouse": self.warehouse,
            "warehouse_name": self.warehouse.name,
            "quantity": self.line.quantity,
            "rate": self.line.rate,
            "amount": self.line.amount,
        }


def resolve_document_lines(*, company, items) -> list[DocumentLine]:
    if not items:
        raise InvalidStateError("At least one item is required")

    resolved = []
    for raw in items:
        product = Product.objects.filter(company=company, pk=raw.get("product_id")).first()
        if product is None:
            raise NotFoundError(f"Product {raw.get('product_id')} not found")

        warehouse = get_warehouse(
            company=company,
            warehouse_id=raw.get("warehouse_id"),
            name=raw.get("warehouse_name"),
        )

        line = LineItem.build(
            product_id=product.pk,
            warehouse_id=warehouse.pk,
            quantity=raw.get("quantity"),
            rate=raw.get("rate"),
            amount=raw.get("amount"),
        )
        resolved.append(DocumentLine(product=product, warehouse=warehouse, line=line))
    return resolved
