# purchases/api/urls.py

from django.urls import path

from purchases.api.views import (
    PurchaseOrderCancelView,
    PurchaseOrderConfirmView,
    PurchaseOrderDecisionView,
    PurchaseOrderDetailView,
    PurchaseOrderListCreateView,
    PurchaseOrderSubmitView,
    SupplierDetailView,
    SupplierListCreateView,
)

app_name = "purchases"

urlpatterns = [
    path("suppliers/", SupplierListCreateView.as_view(), name="suppliers"),
    path("suppliers/<uuid:supplier_id>/", SupplierDetailView.as_view(), name="supplier-detail"),
    path("orders/", PurchaseOrderListCreateView.as_view(), name="orders"),
    path("orders/<uuid:order_id>/", PurchaseOrderDetailView.as_view(), name="order-detail"),
    path("orders/<uuid:order_id>/submit/", PurchaseOrderSubmitView.as_view(), name="order-submit"),
    path(
        "orders/<uuid:order_id>/decision/",
        PurchaseOrderDecisionView.as_view(),
        name="order-decision",
    ),
    path("orders/<uuid:order_id>/cancel/", PurchaseOrderCancelView.as_view(), name="order-cancel"),
    path(
        "orders/<uuid:order_id>/confirm/",
        PurchaseOrderConfirmView.as_view(),
        name="order-confirm",
    ),
]
