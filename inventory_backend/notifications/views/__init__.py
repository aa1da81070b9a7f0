from .notification import NotificationViewSet

__all__ = ["NotificationViewSet"]
