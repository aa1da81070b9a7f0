# notifications/views/notification.py

from django.utils import timezone
from drf_spectacular.utils import extend_schema
from rest_framework import mixins, serializers, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from notifications.models import Notification
from tenants.mixins import TenantScopedMixin


class NotificationSerializer(serializers.ModelSerializer):
    class Meta:
        model = Notification
        fields = [
            "id",
            "kind",
            "title",
            "message",
            "context",
            "is_read",
            "read_at",
            "created_at",
        ]
        read_only_fields = fields


@extend_schema(tags=["notifications"])
class NotificationViewSet(
    TenantScopedMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """
    The caller's own notifications. ?unread=1 limits to unread rows.
    """

    serializer_class = NotificationSerializer
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        qs = Notification.objects.filter(company=self.company, recipient=self.request.user)
        unread = (self.request.query_params.get("unread") or "").strip().lower()
        if unread in ("1", "true", "yes"):
            qs = qs.filter(is_read=False)
        return qs.order_by("-created_at")

    @action(detail=True, methods=["post"], url_path="read")
    def read(self, request, pk=None):
        notification = self.get_object()
        notification.mark_read()
        return Response(NotificationSerializer(notification).data, status=status.HTTP_200_OK)

    @action(detail=False, methods=["post"], url_path="read-all")
    def read_all(self, request):
        updated = self.get_queryset().filter(is_read=False).update(
            is_read=True, read_at=timezone.now()
        )
        return Response({"updated": updated}, status=status.HTTP_200_OK)
