from .stock_request import StockRequest, StockRequestItem

__all__ = ["StockRequest", "StockRequestItem"]
