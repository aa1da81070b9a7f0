# sales/api/viewsets/payment.py

from drf_spectacular.utils import extend_schema
from rest_framework import mixins, status, viewsets
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from permissions.roles import CAP_INVOICES_MANAGE, CAP_PAYMENTS_RECORD, HasAnyCapability, HasCapability
from sales.models import Payment
from sales.serializers import PaymentCreateSerializer, PaymentSerializer
from sales.services.payments import create_payment
from tenants.mixins import TenantScopedMixin


@extend_schema(tags=["sales"])
class PaymentViewSet(
    TenantScopedMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    serializer_class = PaymentSerializer
    permission_classes = [IsAuthenticated]
    filterset_fields = ["mode", "customer", "invoice"]

    required_capability = None
    required_any_capabilities = None

    def get_permissions(self):
        self.required_capability = None
        self.required_any_capabilities = None

        if self.action == "create":
            self.required_capability = CAP_PAYMENTS_RECORD
            return [IsAuthenticated(), HasCapability()]

        self.required_any_capabilities = {CAP_PAYMENTS_RECORD, CAP_INVOICES_MANAGE}
        return [IsAuthenticated(), HasAnyCapability()]

    def get_queryset(self):
        return (
            Payment.objects.filter(company=self.company)
            .select_related("invoice")
            .order_by("-paid_at")
        )

    @extend_schema(request=PaymentCreateSerializer, responses={201: PaymentSerializer})
    def create(self, request, *args, **kwargs):
        s = PaymentCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        v = s.validated_data

        payment = create_payment(
            company=self.company,
            invoice_id=v["invoice_id"],
            amount=v["amount"],
            mode=v["mode"],
            reference=v.get("reference", ""),
            paid_at=v.get("paid_at"),
            user=request.user,
        )
        return Response(PaymentSerializer(payment).data, status=status.HTTP_201_CREATED)
