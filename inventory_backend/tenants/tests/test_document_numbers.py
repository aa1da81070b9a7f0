# tenants/tests/test_document_numbers.py

from django.test import TestCase

from permissions.roles import ROLE_MANAGER, ROLE_STOREKEEPER
from products.models import StockBatch
from purchases.models import PurchaseOrder, Supplier
from purchases.services.purchase_orders import (
    approve_purchase_order,
    confirm_purchase_order,
    create_purchase_order,
)
from sales.models import SalesOrder
from sales.services.invoices import create_invoice
from sales.services.orders import create_sales_order
from tenants.tests.helpers import (
    make_company,
    make_customer,
    make_product,
    make_user,
    make_warehouse,
)
from transfers.services.transfers import create_transfer_request


class PerCompanyNumberingTests(TestCase):
    """
    GUARANTEES:
    - Every company numbers its documents from 1
    - Two companies can hold the same SO / INV / PO / REQ / batch numbers
    """

    def _run_company(self, name):
        company = make_company(name)
        clerk = make_user(company, role=ROLE_STOREKEEPER)
        manager = make_user(company, role=ROLE_MANAGER)
        main = make_warehouse(company, name="Main Store")
        branch = make_warehouse(company, name="Branch Store")
        product = make_product(company, opening=[(main, 50)])
        batch = StockBatch.objects.get(product=product, warehouse=main)

        order = create_sales_order(
            company=company,
            customer_id=make_customer(company).pk,
            items=[
                {"product_id": product.pk, "warehouse_id": main.pk, "quantity": 5, "rate": "10.00"}
            ],
            order_type=SalesOrder.TYPE_APPROVAL,
            user=clerk,
        )
        invoice = create_invoice(company=company, sales_order_id=order.pk, user=clerk)

        supplier = Supplier.objects.create(company=company, name="Delta Metals")
        po = create_purchase_order(
            company=company,
            supplier_id=supplier.pk,
            items=[
                {"product_id": product.pk, "warehouse_id": main.pk, "quantity": 8, "rate": "4.00"}
            ],
            order_type=PurchaseOrder.TYPE_APPROVAL,
            approver_id=manager.pk,
            user=clerk,
        )
        approve_purchase_order(company=company, order_id=po.pk, user=manager)
        confirm_purchase_order(company=company, order_id=po.pk, user=clerk)

        transfer = create_transfer_request(
            company=company,
            sending_warehouse=main,
            receiving_warehouse=branch,
            approver_id=manager.pk,
            items=[{"product_id": product.pk, "batch_id": batch.pk, "quantity": 3}],
            user=clerk,
        )

        batch_numbers = sorted(
            StockBatch.objects.filter(company=company).values_list("batch_number", flat=True)
        )
        return (
            order.order_number,
            invoice.invoice_number,
            po.order_number,
            transfer.request_number,
            batch_numbers,
        )

    def test_two_companies_get_the_same_numbers(self):
        alpha = self._run_company("Alpha")
        beta = self._run_company("Beta")

        self.assertEqual(alpha[:4], ("SO-0000001", "INV-0000001", "PO-0000001", "REQ-0000001"))
        self.assertEqual(beta, alpha)
        self.assertEqual(len(alpha[4]), 2)
