# sales/serializers/customer.py

from rest_framework import serializers

from sales.models import Customer


class CustomerSerializer(serializers.ModelSerializer):
    """
    Balance columns are cached aggregates and never writable.
    """

    class Meta:
        model = Customer
        fields = [
            "id",
            "name",
            "email",
            "phone",
            "address",
            "total_invoice_amount",
            "total_payment_amount",
            "balance",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = [
            "id",
            "total_invoice_amount",
            "total_payment_amount",
            "balance",
            "created_at",
            "updated_at",
        ]
