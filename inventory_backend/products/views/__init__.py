# products/views/__init__.py

"""
Products views package exports (router imports).
"""

from .adjustment import InventoryAdjustmentViewSet
from .category import CategoryViewSet
from .product import ProductViewSet
from .stock_batch import StockBatchViewSet

__all__ = [
    "CategoryViewSet",
    "ProductViewSet",
    "StockBatchViewSet",
    "InventoryAdjustmentViewSet",
]
