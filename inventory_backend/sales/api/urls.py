# sales/api/urls.py

"""
SALES API URLS

/api/sales/customers/
/api/sales/orders/
/api/sales/invoices/
/api/sales/payments/
"""

from django.urls import include, path
from rest_framework.routers import SimpleRouter

from sales.api.viewsets.customer import CustomerViewSet
from sales.api.viewsets.invoice import InvoiceViewSet
from sales.api.viewsets.payment import PaymentViewSet
from sales.api.viewsets.sales_order import SalesOrderViewSet

app_name = "sales"

router = SimpleRouter()
router.register(r"customers", CustomerViewSet, basename="customer")
router.register(r"orders", SalesOrderViewSet, basename="sales-order")
router.register(r"invoices", InvoiceViewSet, basename="invoice")
router.register(r"payments", PaymentViewSet, basename="payment")

urlpatterns = [
    path("", include(router.urls)),
]
