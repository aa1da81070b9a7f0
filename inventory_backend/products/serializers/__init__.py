from .line_item import LINE_READ_FIELDS, LineItemInputSerializer
from .product import (
    CategorySerializer,
    OpeningStockSerializer,
    ProductCreateSerializer,
    ProductSerializer,
)
from .stock_batch import (
    InventoryAdjustmentInputSerializer,
    InventoryAdjustmentSerializer,
    StockBatchSerializer,
    StockIntakeSerializer,
    StockMovementSerializer,
)

__all__ = [
    "CategorySerializer",
    "LineItemInputSerializer",
    "LINE_READ_FIELDS",
    "ProductSerializer",
    "ProductCreateSerializer",
    "OpeningStockSerializer",
    "StockBatchSerializer",
    "StockIntakeSerializer",
    "InventoryAdjustmentInputSerializer",
    "InventoryAdjustmentSerializer",
    "StockMovementSerializer",
]
