# sales/serializers/payment.py

from rest_framework import serializers

from sales.models import Payment


class PaymentSerializer(serializers.ModelSerializer):
    invoice_number = serializers.CharField(source="invoice.invoice_number", read_only=True)

    class Meta:
        model = Payment
        fields = [
            "id",
            "invoice",
            "invoice_number",
            "customer",
            "amount",
            "mode",
            "reference",
            "received_by",
            "paid_at",
            "created_at",
        ]
        read_only_fields = fields


class PaymentCreateSerializer(serializers.Serializer):
    invoice_id = serializers.UUIDField()
    amount = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=0)
    mode = serializers.ChoiceField(choices=Payment.MODE_CHOICES, default=Payment.MODE_CASH)
    reference = serializers.CharField(required=False, allow_blank=True, default="")
    paid_at = serializers.DateTimeField(required=False, allow_null=True)
