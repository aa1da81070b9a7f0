# sales/api/viewsets/invoice.py

"""
INVOICE VIEWSET

POST /api/sales/invoices/               invoice an APPROVED order (consumes committed stock)
POST /api/sales/invoices/{id}/cancel/   restore stock, CANCELLED
GET  /api/sales/invoices/{id}/payments/ payments recorded against the invoice
"""

from drf_spectacular.utils import extend_schema
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from permissions.roles import (
    CAP_INVOICES_MANAGE,
    CAP_PAYMENTS_RECORD,
    CAP_REPORTS_VIEW,
    HasAnyCapability,
    HasCapability,
)
from sales.models import Invoice
from sales.serializers import (
    InvoiceCancelSerializer,
    InvoiceCreateSerializer,
    InvoiceSerializer,
    PaymentSerializer,
)
from sales.services.invoices import cancel_invoice, create_invoice
from tenants.mixins import TenantScopedMixin


@extend_schema(tags=["sales"])
class InvoiceViewSet(
    TenantScopedMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    serializer_class = InvoiceSerializer
    permission_classes = [IsAuthenticated]
    filterset_fields = ["payment_status", "customer", "sales_order"]

    required_capability = None
    required_any_capabilities = None

    def get_permissions(self):
        self.required_capability = None
        self.required_any_capabilities = None

        if self.action in {"list", "retrieve", "payments"}:
            self.required_any_capabilities = {
                CAP_INVOICES_MANAGE,
                CAP_PAYMENTS_RECORD,
                CAP_REPORTS_VIEW,
            }
            return [IsAuthenticated(), HasAnyCapability()]

        self.required_capability = CAP_INVOICES_MANAGE
        return [IsAuthenticated(), HasCapability()]

    def get_queryset(self):
        return (
            Invoice.objects.filter(company=self.company)
            .select_related("customer", "sales_order")
            .prefetch_related("items__product")
            .order_by("-created_at")
        )

    def _fresh(self, invoice):
        return InvoiceSerializer(self.get_queryset().get(pk=invoice.pk)).data

    @extend_schema(request=InvoiceCreateSerializer, responses={201: InvoiceSerializer})
    def create(self, request, *args, **kwargs):
        s = InvoiceCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        v = s.validated_data

        invoice = create_invoice(
            company=self.company,
            sales_order_id=v["sales_order_id"],
            invoice_date=v.get("invoice_date"),
            due_date=v.get("due_date"),
            comment=v.get("comment", ""),
            user=request.user,
        )
        return Response(self._fresh(invoice), status=status.HTTP_201_CREATED)

    @extend_schema(request=InvoiceCancelSerializer, responses={200: InvoiceSerializer})
    @action(detail=True, methods=["post"], url_path="cancel")
    def cancel(self, request, pk=None):
        s = InvoiceCancelSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        invoice = cancel_invoice(
            company=self.company,
            invoice_id=pk,
            comment=s.validated_data.get("comment", ""),
            user=request.user,
        )
        return Response(self._fresh(invoice), status=status.HTTP_200_OK)

    @extend_schema(responses=PaymentSerializer(many=True))
    @action(detail=True, methods=["get"], url_path="payments")
    def payments(self, request, pk=None):
        invoice = self.get_object()
        qs = invoice.payments.order_by("-paid_at")
        return Response(PaymentSerializer(qs, many=True).data, status=status.HTTP_200_OK)
