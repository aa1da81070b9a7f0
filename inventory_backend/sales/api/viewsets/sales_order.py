"""
======================================================
PATH: sales/api/viewsets/sales_order.py
======================================================
SALES ORDER VIEWSET

POST   /api/sales/orders/                  create (DRAFT or APPROVAL)
PATCH  /api/sales/orders/{id}/             edit a DRAFT
POST   /api/sales/orders/{id}/submit/      DRAFT -> reserve -> PENDING / APPROVED
POST   /api/sales/orders/{id}/decision/    approver: APPROVED / REJECT
POST   /api/sales/orders/{id}/cancel/      release reservation, CANCELLED

Security:
- sales.order for writes, sales.approve for decisions
"""

from drf_spectacular.utils import extend_schema
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from permissions.roles import (
    CAP_INVOICES_MANAGE,
    CAP_SALES_APPROVE,
    CAP_SALES_ORDER,
    HasAnyCapability,
    HasCapability,
)
from sales.models import SalesOrder
from sales.serializers import (
    SalesOrderCreateSerializer,
    SalesOrderDecisionSerializer,
    SalesOrderSerializer,
    SalesOrderSubmitSerializer,
    SalesOrderUpdateSerializer,
)
from sales.services.orders import (
    approve_sales_order,
    cancel_sales_order,
    create_sales_order,
    reject_sales_order,
    submit_sales_order,
    update_sales_order,
)
from tenants.mixins import TenantScopedMixin


@extend_schema(tags=["sales"])
class SalesOrderViewSet(
    TenantScopedMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    serializer_class = SalesOrderSerializer
    permission_classes = [IsAuthenticated]
    filterset_fields = ["status", "order_type", "customer"]

    required_capability = None
    required_any_capabilities = None

    def get_permissions(self):
        self.required_capability = None
        self.required_any_capabilities = None

        if self.action in {"list", "retrieve"}:
            self.required_any_capabilities = {
                CAP_SALES_ORDER,
                CAP_SALES_APPROVE,
                CAP_INVOICES_MANAGE,
            }
            return [IsAuthenticated(), HasAnyCapability()]

        if self.action == "decision":
            self.required_capability = CAP_SALES_APPROVE
        else:
            self.required_capability = CAP_SALES_ORDER
        return [IsAuthenticated(), HasCapability()]

    def get_queryset(self):
        qs = (
            SalesOrder.objects.filter(company=self.company)
            .select_related("customer")
            .prefetch_related("items__product")
        )
        if (self.request.query_params.get("to_approve") or "").lower() in ("1", "true", "yes"):
            qs = qs.filter(approver=self.request.user, status=SalesOrder.STATUS_PENDING)
        return qs.order_by("-created_at")

    def _fresh(self, order):
        return SalesOrderSerializer(self.get_queryset().get(pk=order.pk)).data

    @extend_schema(request=SalesOrderCreateSerializer, responses={201: SalesOrderSerializer})
    def create(self, request, *args, **kwargs):
        s = SalesOrderCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        v = s.validated_data

        order = create_sales_order(
            company=self.company,
            customer_id=v["customer_id"],
            items=[dict(i) for i in v["items"]],
            order_type=v["order_type"],
            approver_id=v.get("approver_id"),
            order_date=v.get("order_date"),
            comment=v.get("comment", ""),
            user=request.user,
        )
        return Response(self._fresh(order), status=status.HTTP_201_CREATED)

    @extend_schema(request=SalesOrderUpdateSerializer, responses={200: SalesOrderSerializer})
    def partial_update(self, request, pk=None):
        s = SalesOrderUpdateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        v = s.validated_data

        order = update_sales_order(
            company=self.company,
            order_id=pk,
            items=[dict(i) for i in v["items"]] if "items" in v else None,
            customer_id=v.get("customer_id"),
            comment=v.get("comment"),
            user=request.user,
        )
        return Response(self._fresh(order), status=status.HTTP_200_OK)

    @extend_schema(request=SalesOrderSubmitSerializer, responses={200: SalesOrderSerializer})
    @action(detail=True, methods=["post"], url_path="submit")
    def submit(self, request, pk=None):
        s = SalesOrderSubmitSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        order = submit_sales_order(
            company=self.company,
            order_id=pk,
            approver_id=s.validated_data.get("approver_id"),
            user=request.user,
        )
        return Response(self._fresh(order), status=status.HTTP_200_OK)

    @extend_schema(request=SalesOrderDecisionSerializer, responses={200: SalesOrderSerializer})
    @action(detail=True, methods=["post"], url_path="decision")
    def decision(self, request, pk=None):
        s = SalesOrderDecisionSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        v = s.validated_data

        if v["status"] == SalesOrder.STATUS_APPROVED:
            order = approve_sales_order(company=self.company, order_id=pk, user=request.user)
        else:
            order = reject_sales_order(
                company=self.company,
                order_id=pk,
                comment=v.get("comment", ""),
                user=request.user,
            )
        return Response(self._fresh(order), status=status.HTTP_200_OK)

    @extend_schema(request=None, responses={200: SalesOrderSerializer})
    @action(detail=True, methods=["post"], url_path="cancel")
    def cancel(self, request, pk=None):
        order = cancel_sales_order(company=self.company, order_id=pk, user=request.user)
        return Response(self._fresh(order), status=status.HTTP_200_OK)
