# sales/api/viewsets/customer.py

from django.db.models import Q
from drf_spectacular.utils import extend_schema
from rest_framework import viewsets
from rest_framework.permissions import IsAuthenticated

from backend.errors import InvalidStateError
from permissions.roles import (
    CAP_INVOICES_MANAGE,
    CAP_PAYMENTS_RECORD,
    CAP_SALES_ORDER,
    HasAnyCapability,
)
from sales.models import Customer
from sales.serializers import CustomerSerializer
from tenants.mixins import TenantScopedMixin


@extend_schema(tags=["sales"])
class CustomerViewSet(TenantScopedMixin, viewsets.ModelViewSet):
    serializer_class = CustomerSerializer
    permission_classes = [IsAuthenticated, HasAnyCapability]
    required_any_capabilities = {CAP_SALES_ORDER, CAP_INVOICES_MANAGE, CAP_PAYMENTS_RECORD}
    filterset_fields = ["is_active"]

    def get_queryset(self):
        qs = Customer.objects.filter(company=self.company).order_by("name")
        q = (self.request.query_params.get("q") or "").strip()
        if q:
            qs = qs.filter(Q(name__icontains=q) | Q(email__icontains=q) | Q(phone__icontains=q))
        return qs

    def perform_create(self, serializer):
        serializer.save(company=self.company)

    def perform_destroy(self, instance):
        if instance.sales_orders.exists() or instance.invoices.exists():
            raise InvalidStateError("Cannot delete a customer with orders or invoices")
        instance.delete()
