# products/serializers/product.py

from __future__ import annotations

from rest_framework import serializers

from products.models import Category, Product


class ProductSerializer(serializers.ModelSerializer):
    """
    Read / metadata-update shape.

    total_stock is ledger-managed and never writable here.
    """

    category_name = serializers.CharField(source="category.name", read_only=True, default=None)

    class Meta:
        model = Product
        fields = [
            "id",
            "name",
            "sku",
            "unit",
            "description",
            "category",
            "category_name",
            "unit_price",
            "cost_price",
            "total_stock",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "total_stock", "created_at", "updated_at"]

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        company = self.context.get("company")
        if company is not None:
            self.fields["category"].queryset = Category.objects.filter(company=company)


class OpeningStockSerializer(serializers.Serializer):
    warehouse_id = serializers.UUIDField(required=False)
    warehouse_name = serializers.CharField(required=False, allow_blank=False)
    quantity = serializers.IntegerField(min_value=1)
    unit_cost = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=0, required=False, allow_null=True
    )

    def validate(self, attrs):
        if not attrs.get("warehouse_id") and not attrs.get("warehouse_name"):
            raise serializers.ValidationError("warehouse_id or warehouse_name is required")
        return attrs


class ProductCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    sku = serializers.CharField(max_length=128, required=False, allow_blank=True, default="")
    unit = serializers.CharField(max_length=32, required=False, default="unit")
    description = serializers.CharField(required=False, allow_blank=True, default="")
    unit_price = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, required=False)
    cost_price = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, required=False)
    category_name = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    opening_stocks = OpeningStockSerializer(many=True, required=False, default=list)


class CategorySerializer(serializers.ModelSerializer):
    product_count = serializers.IntegerField(read_only=True, default=0)

    class Meta:
        model = Category
        fields = ["id", "name", "product_count", "created_at"]
        read_only_fields = ["id", "created_at"]
