# notifications/services/notify.py

"""
NOTIFICATION SINK (FIRE-AND-FORGET)

notify(kind, recipient, context, company):
- writes a Notification row inside the caller's transaction
- schedules the email on transaction.on_commit, so a rolled-back workflow
  never emails anybody
- delivery errors are logged with logger.exception and swallowed; they never
  fail or roll back the parent operation
"""

from __future__ import annotations

import logging

from django.conf import settings
from django.core.mail import send_mail
from django.db import transaction

from notifications.models import Notification

logger = logging.getLogger(__name__)


TEMPLATES = {
    Notification.KIND_TRANSFER_REQUEST: (
        "Stock transfer {number} awaits your approval",
        "{requester} requested a transfer from {sending} to {receiving}.",
    ),
    Notification.KIND_TRANSFER_APPROVED: (
        "Stock transfer {number} approved",
        "{approver} approved your transfer request. It can now be confirmed.",
    ),
    Notification.KIND_TRANSFER_REJECTED: (
        "Stock transfer {number} rejected",
        "{approver} rejected your transfer request. Comment: {comment}",
    ),
    Notification.KIND_TRANSFER_CONFIRMED: (
        "Stock transfer {number} confirmed",
        "Stock has been moved from {sending} to {receiving}.",
    ),
    Notification.KIND_SALES_APPROVAL: (
        "Sales order {number} awaits your approval",
        "{requester} submitted sales order {number} for {customer}.",
    ),
    Notification.KIND_SALES_APPROVED: (
        "Sales order {number} approved",
        "{approver} approved sales order {number}.",
    ),
    Notification.KIND_SALES_REJECTED: (
        "Sales order {number} rejected",
        "{approver} rejected sales order {number}. Comment: {comment}",
    ),
    Notification.KIND_PURCHASE_APPROVAL: (
        "Purchase order {number} awaits your approval",
        "{requester} submitted purchase order {number} for {supplier}.",
    ),
    Notification.KIND_PURCHASE_APPROVED: (
        "Purchase order {number} approved",
        "{approver} approved purchase order {number}.",
    ),
    Notification.KIND_PURCHASE_REJECTED: (
        "Purchase order {number} rejected",
        "{approver} rejected purchase order {number}. Comment: {comment}",
    ),
}


class _Defaults(dict):
    def __missing__(self, key):
        return ""


def render(kind: str, context: dict) -> tuple[str, str]:
    title_tpl, body_tpl = TEMPLATES[kind]
    data = _Defaults({k: ("" if v is None else v) for k, v in (context or {}).items()})
    return title_tpl.format_map(data), body_tpl.format_map(data)


def _deliver(notification_id, subject: str, body: str, to_email: str):
    try:
        send_mail(
            subject=subject,
            message=body,
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=[to_email],
            fail_silently=False,
        )
    except Exception:
        logger.exception(
            "notification email failed",
            extra={"notification_id": str(notification_id), "to": to_email},
        )


def notify(*, kind: str, recipient, context: dict | None = None, company) -> Notification | None:
    if recipient is None:
        return None
    if kind not in TEMPLATES:
        raise ValueError(f"Unknown notification kind: {kind}")

    context = {k: str(v) for k, v in (context or {}).items() if v is not None}
    title, message = render(kind, context)

    notification = Notification.objects.create(
        company=company,
        recipient=recipient,
        kind=kind,
        title=title,
        message=message,
        context=context,
    )

    to_email = (getattr(recipient, "email", "") or "").strip()
    if getattr(settings, "NOTIFICATIONS_ENABLED", True) and to_email:
        link = f"{settings.FRONTEND_BASE_URL.rstrip('/')}/notifications"
        body = f"{message}\n\n{link}"
        transaction.on_commit(
            lambda: _deliver(notification.pk, title, body, to_email)
        )

    logger.info(
        "notification queued",
        extra={"kind": kind, "recipient_id": str(recipient.pk), "company_id": str(company.pk)},
    )
    return notification
