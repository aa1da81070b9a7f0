# sales/models/__init__.py

from .customer import Customer
from .invoice import Invoice, InvoiceItem
from .payment import Payment
from .sales_order import SalesOrder, SalesOrderItem
from .sales_transaction import SalesTransaction

__all__ = [
    "Customer",
    "SalesOrder",
    "SalesOrderItem",
    "Invoice",
    "InvoiceItem",
    "Payment",
    "SalesTransaction",
]
