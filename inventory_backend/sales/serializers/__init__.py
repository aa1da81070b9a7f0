# sales/serializers/__init__.py

from .customer import CustomerSerializer
from .invoice import (
    InvoiceCancelSerializer,
    InvoiceCreateSerializer,
    InvoiceItemSerializer,
    InvoiceSerializer,
)
from .payment import PaymentCreateSerializer, PaymentSerializer
from .sales_order import (
    SalesOrderCreateSerializer,
    SalesOrderDecisionSerializer,
    SalesOrderItemSerializer,
    SalesOrderSerializer,
    SalesOrderSubmitSerializer,
    SalesOrderUpdateSerializer,
)

__all__ = [
    "CustomerSerializer",
    "SalesOrderSerializer",
    "SalesOrderItemSerializer",
    "SalesOrderCreateSerializer",
    "SalesOrderUpdateSerializer",
    "SalesOrderSubmitSerializer",
    "SalesOrderDecisionSerializer",
    "InvoiceSerializer",
    "InvoiceItemSerializer",
    "InvoiceCreateSerializer",
    "InvoiceCancelSerializer",
    "PaymentSerializer",
    "PaymentCreateSerializer",
]
