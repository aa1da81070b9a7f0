# products/views/category.py

"""
CATEGORY VIEWSET

List, retrieve and create product categories for the caller's company.
Each row carries the number of products in it.
"""

from django.db.models import Count
from drf_spectacular.utils import extend_schema
from rest_framework import mixins, status, viewsets
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from permissions.roles import CAP_INVENTORY_EDIT, CAP_INVENTORY_VIEW, HasCapability
from products.models import Category
from products.serializers import CategorySerializer
from products.services.categories import create_category
from tenants.mixins import TenantScopedMixin


@extend_schema(tags=["products"])
class CategoryViewSet(
    TenantScopedMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.CreateModelMixin,
    viewsets.GenericViewSet,
):
    serializer_class = CategorySerializer
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = None

    def get_permissions(self):
        if self.action in {"list", "retrieve"}:
            self.required_capability = CAP_INVENTORY_VIEW
        else:
            self.required_capability = CAP_INVENTORY_EDIT
        return super().get_permissions()

    def get_queryset(self):
        return (
            Category.objects.filter(company=self.company)
            .annotate(product_count=Count("products"))
            .order_by("name")
        )

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        category = create_category(
            company=self.company,
            name=serializer.validated_data["name"],
            user=request.user,
        )
        return Response(self.get_serializer(category).data, status=status.HTTP_201_CREATED)
