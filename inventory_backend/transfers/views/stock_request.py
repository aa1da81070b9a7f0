"""
======================================================
PATH: transfers/views/stock_request.py
======================================================
STOCK TRANSFER VIEWSET

POST   /api/transfers/                 create request (transfers.request)
GET    /api/transfers/                 list (?status=, ?mine=1, ?to_approve=1)
PATCH  /api/transfers/{id}/            edit while PENDING (initiator)
DELETE /api/transfers/{id}/            delete while PENDING / REJECT
POST   /api/transfers/{id}/decision/   approve / reject (transfers.approve)
POST   /api/transfers/{id}/confirm/    confirm an APPROVED request (transfers.request)
"""

from drf_spectacular.utils import extend_schema
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from permissions.roles import (
    CAP_INVENTORY_VIEW,
    CAP_TRANSFERS_APPROVE,
    CAP_TRANSFERS_REQUEST,
    HasAnyCapability,
    HasCapability,
)
from tenants.mixins import TenantScopedMixin
from transfers.models import StockRequest
from transfers.serializers import (
    StockRequestConfirmSerializer,
    StockRequestCreateSerializer,
    StockRequestDecisionSerializer,
    StockRequestSerializer,
    StockRequestUpdateSerializer,
)
from transfers.services.transfers import (
    confirm_transfer_request,
    create_transfer_request,
    decide_transfer_request,
    delete_transfer_request,
    get_request,
    update_transfer_request,
)
from warehouses.services.warehouses import get_warehouse


@extend_schema(tags=["transfers"])
class StockRequestViewSet(
    TenantScopedMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    serializer_class = StockRequestSerializer
    permission_classes = [IsAuthenticated]
    filterset_fields = ["status", "sending_warehouse", "receiving_warehouse"]

    required_capability = None
    required_any_capabilities = None

    def get_permissions(self):
        self.required_capability = None
        self.required_any_capabilities = None

        if self.action in {"list", "retrieve"}:
            self.required_any_capabilities = {
                CAP_INVENTORY_VIEW,
                CAP_TRANSFERS_REQUEST,
                CAP_TRANSFERS_APPROVE,
            }
            return [IsAuthenticated(), HasAnyCapability()]

        if self.action == "decision":
            self.required_capability = CAP_TRANSFERS_APPROVE
        else:
            self.required_capability = CAP_TRANSFERS_REQUEST
        return [IsAuthenticated(), HasCapability()]

    def get_queryset(self):
        qs = (
            StockRequest.objects.filter(company=self.company)
            .select_related("sending_warehouse", "receiving_warehouse", "requested_by", "approver")
            .prefetch_related("items__product", "items__source_batch", "items__received_batch")
        )

        params = self.request.query_params
        if (params.get("mine") or "").lower() in ("1", "true", "yes"):
            qs = qs.filter(requested_by=self.request.user)
        if (params.get("to_approve") or "").lower() in ("1", "true", "yes"):
            qs = qs.filter(approver=self.request.user)
        return qs.order_by("-created_at")

    def _fresh(self, req):
        return StockRequestSerializer(self.get_queryset().get(pk=req.pk)).data

    @extend_schema(request=StockRequestCreateSerializer, responses={201: StockRequestSerializer})
    def create(self, request, *args, **kwargs):
        s = StockRequestCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        v = s.validated_data

        req = create_transfer_request(
            company=self.company,
            sending_warehouse=get_warehouse(company=self.company, warehouse_id=v["sending_warehouse_id"]),
            receiving_warehouse=get_warehouse(
                company=self.company, warehouse_id=v["receiving_warehouse_id"]
            ),
            approver_id=v["approver_id"],
            items=[dict(i) for i in v["items"]],
            comment=v.get("comment", ""),
            request_date=v.get("request_date"),
            user=request.user,
        )
        return Response(self._fresh(req), status=status.HTTP_201_CREATED)

    @extend_schema(request=StockRequestUpdateSerializer, responses={200: StockRequestSerializer})
    def partial_update(self, request, pk=None):
        s = StockRequestUpdateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        v = s.validated_data

        receiving = None
        if v.get("receiving_warehouse_id"):
            receiving = get_warehouse(company=self.company, warehouse_id=v["receiving_warehouse_id"])

        req = update_transfer_request(
            company=self.company,
            request_id=pk,
            user=request.user,
            receiving_warehouse=receiving,
            approver_id=v.get("approver_id"),
            items=[dict(i) for i in v["items"]] if "items" in v else None,
            comment=v.get("comment"),
        )
        return Response(self._fresh(req), status=status.HTTP_200_OK)

    def destroy(self, request, pk=None):
        delete_transfer_request(company=self.company, request_id=pk, user=request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(request=StockRequestDecisionSerializer, responses={200: StockRequestSerializer})
    @action(detail=True, methods=["post"], url_path="decision")
    def decision(self, request, pk=None):
        s = StockRequestDecisionSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        req = decide_transfer_request(
            company=self.company,
            request_id=pk,
            status=s.validated_data["status"],
            comment=s.validated_data.get("comment", ""),
            user=request.user,
        )
        return Response(self._fresh(req), status=status.HTTP_200_OK)

    @extend_schema(request=StockRequestConfirmSerializer, responses={200: StockRequestSerializer})
    @action(detail=True, methods=["post"], url_path="confirm")
    def confirm(self, request, pk=None):
        s = StockRequestConfirmSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        # 404 before state checks
        get_request(company=self.company, request_id=pk)

        req = confirm_transfer_request(
            company=self.company,
            request_id=pk,
            status=s.validated_data["status"],
            user=request.user,
        )
        return Response(self._fresh(req), status=status.HTTP_200_OK)
