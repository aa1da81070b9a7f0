from .stock_request import StockRequestViewSet

__all__ = ["StockRequestViewSet"]
