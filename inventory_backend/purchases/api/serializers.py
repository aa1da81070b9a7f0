# purchases/api/serializers.py

from rest_framework import serializers

from products.serializers import LINE_READ_FIELDS, LineItemInputSerializer
from purchases.models import PurchaseConfirmation, PurchaseOrder, PurchaseOrderItem, Supplier


class SupplierSerializer(serializers.ModelSerializer):
    class Meta:
        model = Supplier
        fields = ["id", "name", "phone", "email", "address", "is_active", "created_at"]
        read_only_fields = ("id", "created_at")


class PurchaseOrderItemSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source="product.name", read_only=True)
    received_batch_number = serializers.CharField(
        source="received_batch.batch_number", read_only=True, default=None
    )

    class Meta:
        model = PurchaseOrderItem
        fields = LINE_READ_FIELDS + ["received_batch", "received_batch_number"]
        read_only_fields = fields


class PurchaseOrderSerializer(serializers.ModelSerializer):
    supplier_name = serializers.CharField(source="supplier.name", read_only=True)
    items = PurchaseOrderItemSerializer(many=True, read_only=True)

    class Meta:
        model = PurchaseOrder
        fields = [
            "id",
            "order_number",
            "supplier",
            "supplier_name",
            "order_type",
            "status",
            "order_date",
            "comment",
            "total_quantity",
            "total_amount",
            "created_by",
            "approver",
            "approved_at",
            "items",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class PurchaseOrderCreateSerializer(serializers.Serializer):
    supplier_id = serializers.UUIDField()
    order_type = serializers.ChoiceField(
        choices=PurchaseOrder.TYPE_CHOICES, default=PurchaseOrder.TYPE_DRAFT
    )
    approver_id = serializers.UUIDField(required=False, allow_null=True)
    order_date = serializers.DateField(required=False, allow_null=True)
    comment = serializers.CharField(required=False, allow_blank=True, default="")
    items = LineItemInputSerializer(many=True, allow_empty=False)


class PurchaseOrderSubmitSerializer(serializers.Serializer):
    approver_id = serializers.UUIDField(required=False, allow_null=True)


class PurchaseOrderDecisionSerializer(serializers.Serializer):
    status = serializers.ChoiceField(
        choices=[PurchaseOrder.STATUS_APPROVED, PurchaseOrder.STATUS_REJECT]
    )
    comment = serializers.CharField(required=False, allow_blank=True, default="")


class PurchaseConfirmSerializer(serializers.Serializer):
    comment = serializers.CharField(required=False, allow_blank=True, default="")


class PurchaseConfirmationSerializer(serializers.ModelSerializer):
    order_number = serializers.CharField(source="order.order_number", read_only=True)

    class Meta:
        model = PurchaseConfirmation
        fields = [
            "id",
            "order",
            "order_number",
            "confirmed_by",
            "total_quantity",
            "total_amount",
            "comment",
            "created_at",
        ]
        read_only_fields = fields
