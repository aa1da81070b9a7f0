from .stock_request import (
    StockRequestConfirmSerializer,
    StockRequestCreateSerializer,
    StockRequestDecisionSerializer,
    StockRequestItemInputSerializer,
    StockRequestItemSerializer,
    StockRequestSerializer,
    StockRequestUpdateSerializer,
)

__all__ = [
    "StockRequestSerializer",
    "StockRequestItemSerializer",
    "StockRequestItemInputSerializer",
    "StockRequestCreateSerializer",
    "StockRequestUpdateSerializer",
    "StockRequestDecisionSerializer",
    "StockRequestConfirmSerializer",
]
