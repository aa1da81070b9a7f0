# sales/serializers/sales_order.py

from rest_framework import serializers

from products.serializers import LINE_READ_FIELDS, LineItemInputSerializer
from sales.models import SalesOrder, SalesOrderItem


class SalesOrderItemSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source="product.name", read_only=True)

    class Meta:
        model = SalesOrderItem
        fields = LINE_READ_FIELDS
        read_only_fields = fields


class SalesOrderSerializer(serializers.ModelSerializer):
    customer_name = serializers.CharField(source="customer.name", read_only=True)
    items = SalesOrderItemSerializer(many=True, read_only=True)

    class Meta:
        model = SalesOrder
        fields = [
            "id",
            "order_number",
            "customer",
            "customer_name",
            "order_type",
            "status",
            "stock_reserved",
            "created_by",
            "approver",
            "order_date",
            "comment",
            "total_quantity",
            "total_amount",
            "approved_at",
            "items",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class SalesOrderCreateSerializer(serializers.Serializer):
    customer_id = serializers.UUIDField()
    order_type = serializers.ChoiceField(
        choices=SalesOrder.TYPE_CHOICES, default=SalesOrder.TYPE_DRAFT
    )
    approver_id = serializers.UUIDField(required=False, allow_null=True)
    order_date = serializers.DateField(required=False, allow_null=True)
    comment = serializers.CharField(required=False, allow_blank=True, default="")
    items = LineItemInputSerializer(many=True, allow_empty=False)


class SalesOrderUpdateSerializer(serializers.Serializer):
    customer_id = serializers.UUIDField(required=False)
    comment = serializers.CharField(required=False, allow_blank=True)
    items = LineItemInputSerializer(many=True, required=False, allow_empty=False)


class SalesOrderSubmitSerializer(serializers.Serializer):
    approver_id = serializers.UUIDField(required=False, allow_null=True)


class SalesOrderDecisionSerializer(serializers.Serializer):
    status = serializers.ChoiceField(
        choices=[SalesOrder.STATUS_APPROVED, SalesOrder.STATUS_REJECT]
    )
    comment = serializers.CharField(required=False, allow_blank=True, default="")
