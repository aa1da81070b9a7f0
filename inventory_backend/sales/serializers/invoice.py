# sales/serializers/invoice.py

from rest_framework import serializers

from products.serializers import LINE_READ_FIELDS
from sales.models import Invoice, InvoiceItem


class InvoiceItemSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source="product.name", read_only=True)

    class Meta:
        model = InvoiceItem
        fields = LINE_READ_FIELDS
        read_only_fields = fields


class InvoiceSerializer(serializers.ModelSerializer):
    customer_name = serializers.CharField(source="customer.name", read_only=True)
    order_number = serializers.CharField(source="sales_order.order_number", read_only=True)
    amount_due = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)
    items = InvoiceItemSerializer(many=True, read_only=True)

    class Meta:
        model = Invoice
        fields = [
            "id",
            "invoice_number",
            "sales_order",
            "order_number",
            "customer",
            "customer_name",
            "created_by",
            "payment_status",
            "invoice_date",
            "due_date",
            "total_quantity",
            "total_amount",
            "amount_paid",
            "amount_due",
            "comment",
            "cancelled_at",
            "cancelled_by",
            "items",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class InvoiceCreateSerializer(serializers.Serializer):
    sales_order_id = serializers.UUIDField()
    invoice_date = serializers.DateField(required=False, allow_null=True)
    due_date = serializers.DateField(required=False, allow_null=True)
    comment = serializers.CharField(required=False, allow_blank=True, default="")

    def validate(self, attrs):
        inv, due = attrs.get("invoice_date"), attrs.get("due_date")
        if inv and due and due < inv:
            raise serializers.ValidationError({"due_date": "due_date cannot be before invoice_date"})
        return attrs


class InvoiceCancelSerializer(serializers.Serializer):
    comment = serializers.CharField(required=False, allow_blank=True, default="")
