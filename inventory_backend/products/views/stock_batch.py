"""
======================================================
PATH: products/views/stock_batch.py
======================================================
STOCK BATCH VIEWSET

Purpose:
- Read batches (FIFO order) and the movement ledger.
- Intake a new batch (receipt) through the intake service.
- Manual adjustments live in products/views/adjustment.py.

RULES:
- Quantities are ledger-managed: no PUT / PATCH / DELETE here.
- Creating a batch always generates its batch number server-side.
"""

from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from backend.errors import NotFoundError
from permissions.roles import (
    CAP_INVENTORY_ADJUST,
    CAP_INVENTORY_EDIT,
    CAP_INVENTORY_VIEW,
    HasAnyCapability,
    HasCapability,
)
from products.models import Product, StockBatch, StockMovement
from products.serializers import (
    StockBatchSerializer,
    StockIntakeSerializer,
    StockMovementSerializer,
)
from products.services.stock_intake import intake_batch
from tenants.mixins import TenantScopedMixin
from warehouses.services.warehouses import get_warehouse


@extend_schema(tags=["stock"])
class StockBatchViewSet(
    TenantScopedMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    serializer_class = StockBatchSerializer
    permission_classes = [IsAuthenticated]
    filterset_fields = ["product", "warehouse"]

    required_capability = None
    required_any_capabilities = None

    def get_permissions(self):
        # IMPORTANT: reset per request to avoid state leaking between actions
        self.required_capability = None
        self.required_any_capabilities = None

        if self.action in {"list", "retrieve", "movements"}:
            self.required_any_capabilities = {
                CAP_INVENTORY_VIEW,
                CAP_INVENTORY_EDIT,
                CAP_INVENTORY_ADJUST,
            }
            return [IsAuthenticated(), HasAnyCapability()]

        if self.action == "create":
            self.required_capability = CAP_INVENTORY_EDIT
            return [IsAuthenticated(), HasCapability()]

        return [IsAuthenticated()]

    def get_queryset(self):
        qs = (
            StockBatch.objects.filter(company=self.company)
            .select_related("product", "warehouse")
            .order_by("created_at", "batch_number")
        )

        in_stock = (self.request.query_params.get("in_stock") or "").strip().lower()
        if in_stock in ("1", "true", "yes"):
            qs = qs.filter(opening_stock__gt=0)

        return qs

    @extend_schema(request=StockIntakeSerializer, responses={201: StockBatchSerializer})
    def create(self, request, *args, **kwargs):
        """
        POST /api/stock/batches/

        Receipt of a new batch: generated batch number, RECEIPT movement,
        product total_stock incremented.
        """
        s = StockIntakeSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        v = s.validated_data

        product = Product.objects.filter(company=self.company, pk=v["product_id"]).first()
        if product is None:
            raise NotFoundError(f"Product {v['product_id']} not found")
        warehouse = get_warehouse(company=self.company, warehouse_id=v["warehouse_id"])

        batch = intake_batch(
            company=self.company,
            product=product,
            warehouse=warehouse,
            quantity=v["quantity"],
            unit_cost=v.get("unit_cost"),
            user=request.user,
        )
        return Response(StockBatchSerializer(batch).data, status=status.HTTP_201_CREATED)

    @extend_schema(responses=StockMovementSerializer(many=True))
    @action(detail=True, methods=["get"], url_path="movements")
    def movements(self, request, pk=None):
        batch = self.get_object()
        qs = StockMovement.objects.filter(batch=batch).order_by("created_at")
        return Response(StockMovementSerializer(qs, many=True).data, status=status.HTTP_200_OK)
