# warehouses/views/warehouse.py

"""
WAREHOUSE VIEWSET

Purpose:
- Tenant-scoped warehouse management.
- Reads need inventory.view; writes need inventory.edit.
- Deletion is blocked while the warehouse still holds stock batches.
"""

from drf_spectacular.utils import extend_schema
from rest_framework import status, viewsets
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from backend.errors import InvalidStateError
from permissions.roles import CAP_INVENTORY_EDIT, CAP_INVENTORY_VIEW, HasCapability
from tenants.mixins import TenantScopedMixin
from warehouses.models import Warehouse
from warehouses.serializers.warehouse import WarehouseSerializer
from warehouses.services.warehouses import create_warehouse, update_warehouse


@extend_schema(tags=["warehouses"])
class WarehouseViewSet(TenantScopedMixin, viewsets.ModelViewSet):
    serializer_class = WarehouseSerializer
    permission_classes = [IsAuthenticated, HasCapability]
    filterset_fields = ["is_active"]
    required_capability = None

    def get_permissions(self):
        if self.action in {"list", "retrieve"}:
            self.required_capability = CAP_INVENTORY_VIEW
        else:
            self.required_capability = CAP_INVENTORY_EDIT
        return super().get_permissions()

    def get_queryset(self):
        return Warehouse.objects.filter(company=self.company).order_by("name")

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        warehouse = create_warehouse(
            company=self.company,
            name=serializer.validated_data["name"],
            address=serializer.validated_data.get("address", ""),
            phone=serializer.validated_data.get("phone", ""),
            user=request.user,
        )
        return Response(self.get_serializer(warehouse).data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop("partial", False)
        instance = self.get_object()
        serializer = self.get_serializer(instance, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        warehouse = update_warehouse(warehouse=instance, **serializer.validated_data)
        return Response(self.get_serializer(warehouse).data, status=status.HTTP_200_OK)

    def perform_destroy(self, instance):
        if instance.stock_batches.exists():
            raise InvalidStateError("Cannot delete a warehouse that holds stock batches")
        instance.delete()
