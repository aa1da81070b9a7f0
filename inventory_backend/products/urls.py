# products/urls.py

"""
PRODUCTS + STOCK URLS

Mounted at /api/ by backend/urls.py:
- /api/products/            -> catalog + opening stock
- /api/categories/          -> product categories
- /api/stock/batches/       -> batch ledger
- /api/stock/adjustments/   -> manual adjustments
"""

from django.urls import include, path
from rest_framework.routers import SimpleRouter

from products.views import (
    CategoryViewSet,
    InventoryAdjustmentViewSet,
    ProductViewSet,
    StockBatchViewSet,
)

app_name = "products"

router = SimpleRouter()
router.register(r"products", ProductViewSet, basename="product")
router.register(r"categories", CategoryViewSet, basename="category")
router.register(r"stock/batches", StockBatchViewSet, basename="stock-batch")
router.register(r"stock/adjustments", InventoryAdjustmentViewSet, basename="stock-adjustment")

urlpatterns = [
    path("", include(router.urls)),
]
