# transfers/urls.py

from rest_framework.routers import SimpleRouter

from transfers.views import StockRequestViewSet

app_name = "transfers"

router = SimpleRouter()
router.register(r"", StockRequestViewSet, basename="stock-request")

urlpatterns = router.urls
