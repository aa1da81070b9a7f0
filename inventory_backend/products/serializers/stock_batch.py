# products/serializers/stock_batch.py
"""
======================================================
PATH: products/serializers/stock_batch.py
======================================================
STOCK BATCH SERIALIZERS

Purpose:
- Read shape for batches (quantities are ledger-managed, never writable).
- Input DTOs for intake (new batch) and manual adjustments.
- Read shapes for the movement ledger and adjustment audit rows.
"""

from __future__ import annotations

from rest_framework import serializers

from products.models import InventoryAdjustment, StockBatch, StockMovement


class StockBatchSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source="product.name", read_only=True)

    class Meta:
        model = StockBatch
        fields = [
            "id",
            "product",
            "product_name",
            "warehouse",
            "warehouse_name",
            "batch_number",
            "opening_stock",
            "committed_quantity",
            "unit_cost",
            "created_at",
        ]
        read_only_fields = fields


class StockIntakeSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    warehouse_id = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1)
    unit_cost = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=0, required=False, allow_null=True
    )


class InventoryAdjustmentInputSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    warehouse_id = serializers.UUIDField(required=False)
    warehouse_name = serializers.CharField(required=False)
    batch_id = serializers.UUIDField(required=False, allow_null=True)
    adjustment_type = serializers.ChoiceField(
        choices=InventoryAdjustment.AdjustmentType.choices,
        default=InventoryAdjustment.AdjustmentType.QUANTITY,
    )
    new_quantity = serializers.IntegerField(min_value=0, required=False)
    new_unit_cost = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=0, required=False
    )
    reason = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")

    def validate(self, attrs):
        if not attrs.get("warehouse_id") and not attrs.get("warehouse_name"):
            raise serializers.ValidationError("warehouse_id or warehouse_name is required")
        if (
            attrs["adjustment_type"] == InventoryAdjustment.AdjustmentType.QUANTITY
            and attrs.get("new_quantity") is None
        ):
            raise serializers.ValidationError({"new_quantity": "required for QUANTITY adjustments"})
        return attrs


class InventoryAdjustmentSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source="product.name", read_only=True)
    warehouse_name = serializers.CharField(source="warehouse.name", read_only=True)
    batch_number = serializers.CharField(source="batch.batch_number", read_only=True)

    class Meta:
        model = InventoryAdjustment
        fields = [
            "id",
            "product",
            "product_name",
            "warehouse",
            "warehouse_name",
            "batch",
            "batch_number",
            "adjustment_type",
            "previous_quantity",
            "new_quantity",
            "quantity_delta",
            "previous_total_stock",
            "new_total_stock",
            "previous_unit_cost",
            "new_unit_cost",
            "reason",
            "performed_by",
            "created_at",
        ]
        read_only_fields = fields


class StockMovementSerializer(serializers.ModelSerializer):
    batch_number = serializers.CharField(source="batch.batch_number", read_only=True)

    class Meta:
        model = StockMovement
        fields = [
            "id",
            "product",
            "batch",
            "batch_number",
            "reason",
            "quantity",
            "opening_delta",
            "committed_delta",
            "unit_cost_snapshot",
            "source_type",
            "source_id",
            "performed_by",
            "created_at",
        ]
        read_only_fields = fields
