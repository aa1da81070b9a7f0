from rest_framework import serializers

from warehouses.models import Warehouse


class WarehouseSerializer(serializers.ModelSerializer):
    """
    Warehouse master data. company is injected by the view, never by the client.
    """

    class Meta:
        model = Warehouse
        fields = [
            "id",
            "name",
            "address",
            "phone",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = [
            "id",
            "created_at",
            "updated_at",
        ]
