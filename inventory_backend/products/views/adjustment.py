# products/views/adjustment.py

"""
INVENTORY ADJUSTMENT ENDPOINTS

GET  /api/stock/adjustments/   audit rows (inventory.view)
POST /api/stock/adjustments/   apply a QUANTITY / VALUE adjustment (inventory.adjust)
"""

from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import mixins, status, viewsets
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from backend.errors import NotFoundError
from permissions.roles import CAP_INVENTORY_ADJUST, CAP_INVENTORY_VIEW, HasCapability
from products.models import InventoryAdjustment, Product
from products.serializers import (
    InventoryAdjustmentInputSerializer,
    InventoryAdjustmentSerializer,
)
from products.services.stock_adjustments import adjust_inventory
from tenants.mixins import TenantScopedMixin
from warehouses.services.warehouses import get_warehouse


@extend_schema(tags=["stock"])
class InventoryAdjustmentViewSet(
    TenantScopedMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    serializer_class = InventoryAdjustmentSerializer
    permission_classes = [IsAuthenticated, HasCapability]
    filterset_fields = ["product", "warehouse", "adjustment_type"]
    required_capability = None

    def get_permissions(self):
        if self.action == "create":
            self.required_capability = CAP_INVENTORY_ADJUST
        else:
            self.required_capability = CAP_INVENTORY_VIEW
        return super().get_permissions()

    def get_queryset(self):
        return (
            InventoryAdjustment.objects.filter(company=self.company)
            .select_related("product", "warehouse", "batch")
            .order_by("-created_at")
        )

    @extend_schema(
        request=InventoryAdjustmentInputSerializer,
        responses={201: InventoryAdjustmentSerializer},
    )
    def create(self, request, *args, **kwargs):
        s = InventoryAdjustmentInputSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        v = s.validated_data

        product = Product.objects.filter(company=self.company, pk=v["product_id"]).first()
        if product is None:
            raise NotFoundError(f"Product {v['product_id']} not found")

        warehouse = get_warehouse(
            company=self.company,
            warehouse_id=v.get("warehouse_id"),
            name=v.get("warehouse_name"),
        )

        result = adjust_inventory(
            company=self.company,
            product=product,
            warehouse=warehouse,
            adjustment_type=v["adjustment_type"],
            new_quantity=v.get("new_quantity"),
            new_unit_cost=v.get("new_unit_cost"),
            batch_id=v.get("batch_id"),
            reason=v.get("reason", ""),
            user=request.user,
        )
        return Response(
            InventoryAdjustmentSerializer(result.adjustment).data,
            status=status.HTTP_201_CREATED,
        )
