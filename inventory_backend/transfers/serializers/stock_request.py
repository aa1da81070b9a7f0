# transfers/serializers/stock_request.py

from rest_framework import serializers

from transfers.models import StockRequest, StockRequestItem


class StockRequestItemSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source="product.name", read_only=True)
    source_batch_number = serializers.CharField(source="source_batch.batch_number", read_only=True)
    received_batch_number = serializers.CharField(
        source="received_batch.batch_number", read_only=True, default=None
    )

    class Meta:
        model = StockRequestItem
        fields = [
            "id",
            "product",
            "product_name",
            "source_batch",
            "source_batch_number",
            "received_batch",
            "received_batch_number",
            "quantity",
            "unit_cost",
        ]
        read_only_fields = fields


class StockRequestSerializer(serializers.ModelSerializer):
    items = StockRequestItemSerializer(many=True, read_only=True)
    sending_warehouse_name = serializers.CharField(source="sending_warehouse.name", read_only=True)
    receiving_warehouse_name = serializers.CharField(
        source="receiving_warehouse.name", read_only=True
    )

    class Meta:
        model = StockRequest
        fields = [
            "id",
            "request_number",
            "status",
            "sending_warehouse",
            "sending_warehouse_name",
            "receiving_warehouse",
            "receiving_warehouse_name",
            "requested_by",
            "approver",
            "comment",
            "request_date",
            "approved_at",
            "confirmed_at",
            "confirmed_by",
            "items",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class StockRequestItemInputSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    batch_id = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1)


class StockRequestCreateSerializer(serializers.Serializer):
    sending_warehouse_id = serializers.UUIDField()
    receiving_warehouse_id = serializers.UUIDField()
    approver_id = serializers.UUIDField()
    comment = serializers.CharField(required=False, allow_blank=True, default="")
    request_date = serializers.DateField(required=False, allow_null=True)
    items = StockRequestItemInputSerializer(many=True, allow_empty=False)

    def validate(self, attrs):
        if attrs["sending_warehouse_id"] == attrs["receiving_warehouse_id"]:
            raise serializers.ValidationError("Sending and receiving warehouse must differ")
        return attrs


class StockRequestUpdateSerializer(serializers.Serializer):
    receiving_warehouse_id = serializers.UUIDField(required=False)
    approver_id = serializers.UUIDField(required=False)
    comment = serializers.CharField(required=False, allow_blank=True)
    items = StockRequestItemInputSerializer(many=True, required=False, allow_empty=False)


class StockRequestDecisionSerializer(serializers.Serializer):
    status = serializers.ChoiceField(
        choices=[StockRequest.STATUS_APPROVED, StockRequest.STATUS_REJECT]
    )
    comment = serializers.CharField(required=False, allow_blank=True, default="")


class StockRequestConfirmSerializer(serializers.Serializer):
    status = serializers.ChoiceField(
        choices=[
            StockRequest.STATUS_CONFIRM,
            StockRequest.STATUS_COMPLETED,
            StockRequest.STATUS_REJECT,
        ],
        default=StockRequest.STATUS_CONFIRM,
    )
