# warehouses/urls.py

from django.urls import include, path
from rest_framework.routers import SimpleRouter

from warehouses.views.warehouse import WarehouseViewSet

app_name = "warehouses"

router = SimpleRouter()
router.register(r"", WarehouseViewSet, basename="warehouse")

urlpatterns = [
    path("", include(router.urls)),
]
