# products/serializers/line_item.py

from rest_framework import serializers


class LineItemInputSerializer(serializers.Serializer):
    """
    Fixed-schema document line: sales orders, purchase orders.
    Warehouse by id or (case-insensitive) name.
    """

    product_id = serializers.UUIDField()
    warehouse_id = serializers.UUIDField(required=False)
    warehouse_name = serializers.CharField(required=False)
    quantity = serializers.IntegerField(min_value=1)
    rate = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, default=0)
    amount = serializers.DecimalField(
        max_digits=14, decimal_places=2, min_value=0, required=False, allow_null=True
    )

    def validate(self, attrs):
        if not attrs.get("warehouse_id") and not attrs.get("warehouse_name"):
            raise serializers.ValidationError("warehouse_id or warehouse_name is required")
        return attrs


LINE_READ_FIELDS = [
    "id",
    "product",
    "product_name",
    "warehouse",
    "warehouse_name",
    "quantity",
    "rate",
    "amount",
]
