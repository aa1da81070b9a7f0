# products/views/product.py

"""
PRODUCT VIEWSET

Purpose:
- Tenant-scoped product management.
- Create goes through products.services.catalog.create_product so opening
  stock lands in batches and total_stock in one transaction.
- PUT/PATCH update metadata only; total_stock is ledger-managed.
"""

from django.db.models import Q
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from backend.errors import InvalidStateError
from permissions.roles import CAP_INVENTORY_EDIT, CAP_INVENTORY_VIEW, HasCapability
from products.models import Product, StockBatch
from products.serializers import ProductCreateSerializer, ProductSerializer, StockBatchSerializer
from products.services.catalog import create_product
from tenants.mixins import TenantScopedMixin


@extend_schema(tags=["products"])
class ProductViewSet(TenantScopedMixin, viewsets.ModelViewSet):
    serializer_class = ProductSerializer
    permission_classes = [IsAuthenticated, HasCapability]
    filterset_fields = ["is_active"]
    required_capability = None

    def get_permissions(self):
        # reset per request
        if self.action in {"list", "retrieve", "batches"}:
            self.required_capability = CAP_INVENTORY_VIEW
        else:
            self.required_capability = CAP_INVENTORY_EDIT
        return super().get_permissions()

    def get_queryset(self):
        qs = Product.objects.filter(company=self.company).order_by("name")

        q = (self.request.query_params.get("q") or "").strip()
        if q:
            qs = qs.filter(Q(name__icontains=q) | Q(sku__icontains=q))
        return qs.select_related("category")

    def get_serializer_context(self):
        context = super().get_serializer_context()
        context["company"] = self.company
        return context

    @extend_schema(
        request=ProductCreateSerializer,
        responses={201: ProductSerializer},
    )
    def create(self, request, *args, **kwargs):
        s = ProductCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        v = s.validated_data

        product = create_product(
            company=self.company,
            name=v["name"],
            sku=v.get("sku", ""),
            unit=v.get("unit", "unit"),
            description=v.get("description", ""),
            unit_price=v.get("unit_price"),
            cost_price=v.get("cost_price"),
            category_name=v.get("category_name", ""),
            opening_stocks=[dict(e) for e in v.get("opening_stocks", [])],
            user=request.user,
        )
        return Response(ProductSerializer(product).data, status=status.HTTP_201_CREATED)

    def perform_update(self, serializer):
        product = serializer.save()
        product.full_clean()

    def perform_destroy(self, instance):
        if instance.stock_batches.exists():
            raise InvalidStateError("Cannot delete a product that has stock batches")
        instance.delete()

    @extend_schema(
        parameters=[
            OpenApiParameter(name="warehouse_id", type=str, required=False),
        ],
        responses=StockBatchSerializer(many=True),
        description="Batches of this product, oldest first (FIFO order).",
    )
    @action(detail=True, methods=["get"], url_path="batches")
    def batches(self, request, pk=None):
        product = self.get_object()
        qs = StockBatch.objects.filter(company=self.company, product=product).order_by(
            "created_at", "batch_number"
        )

        warehouse_id = (request.query_params.get("warehouse_id") or "").strip()
        if warehouse_id:
            qs = qs.filter(warehouse_id=warehouse_id)

        return Response(
            {
                "product_id": str(product.pk),
                "total_stock": product.total_stock,
                **product.batch_totals(),
                "results": StockBatchSerializer(qs, many=True).data,
            },
            status=status.HTTP_200_OK,
        )
