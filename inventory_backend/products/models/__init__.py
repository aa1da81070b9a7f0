"""
PATH: products/models/__init__.py

Products models export surface.
"""

from .category import Category
from .inventory_adjustment import InventoryAdjustment
from .product import Product
from .serial_number import SerialNumber
from .stock_batch import StockBatch
from .stock_movement import StockMovement

__all__ = [
    "Category",
    "Product",
    "StockBatch",
    "StockMovement",
    "InventoryAdjustment",
    "SerialNumber",
]
