# notifications/tests/test_notify.py

from unittest import mock

from django.core import mail
from django.db import transaction
from django.test import TestCase, override_settings
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from notifications.models import Notification
from notifications.services.notify import notify, render
from tenants.tests.helpers import make_company, make_user


class NotifyServiceTests(TestCase):
    """
    Notification sink tests.

    GUARANTEES:
    - A row is written for every notification
    - Email goes out only after the surrounding transaction commits
    - A failing email never raises into the caller
    """

    def setUp(self):
        self.company = make_company()
        self.user = make_user(self.company, email="approver@example.com")

    def _notify(self, **context):
        return notify(
            kind=Notification.KIND_SALES_APPROVAL,
            recipient=self.user,
            context={"number": "SO-0000001", "customer": "Bright Retail", **context},
            company=self.company,
        )

    def test_render_fills_missing_keys_with_blanks(self):
        title, message = render(Notification.KIND_SALES_REJECTED, {"number": "SO-0000009"})
        self.assertEqual(title, "Sales order SO-0000009 rejected")
        self.assertIn("Comment: ", message)

    def test_row_written_and_email_sent_on_commit(self):
        with self.captureOnCommitCallbacks(execute=True) as callbacks:
            note = self._notify()
            self.assertEqual(len(mail.outbox), 0)

        self.assertEqual(len(callbacks), 1)
        self.assertEqual(note.title, "Sales order SO-0000001 awaits your approval")
        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].to, ["approver@example.com"])
        self.assertIn("Bright Retail", mail.outbox[0].body)

    def test_rolled_back_transaction_sends_nothing(self):
        with self.captureOnCommitCallbacks(execute=True) as callbacks:
            with self.assertRaises(RuntimeError):
                with transaction.atomic():
                    self._notify()
                    raise RuntimeError("workflow failed")

        self.assertEqual(callbacks, [])
        self.assertEqual(len(mail.outbox), 0)
        self.assertFalse(Notification.objects.exists())

    def test_email_failure_is_logged_not_raised(self):
        with mock.patch(
            "notifications.services.notify.send_mail", side_effect=ConnectionError("smtp down")
        ):
            with self.assertLogs("notifications.services.notify", level="ERROR") as logs:
                with self.captureOnCommitCallbacks(execute=True):
                    note = self._notify()

        self.assertTrue(Notification.objects.filter(pk=note.pk).exists())
        self.assertIn("notification email failed", logs.output[0])

    @override_settings(NOTIFICATIONS_ENABLED=False)
    def test_disabled_notifications_skip_email(self):
        with self.captureOnCommitCallbacks(execute=True) as callbacks:
            self._notify()

        self.assertEqual(callbacks, [])
        self.assertEqual(Notification.objects.count(), 1)

    def test_missing_recipient_is_ignored(self):
        result = notify(
            kind=Notification.KIND_SALES_APPROVAL, recipient=None, company=self.company
        )
        self.assertIsNone(result)
        self.assertFalse(Notification.objects.exists())

    def test_unknown_kind_raises(self):
        with self.assertRaises(ValueError):
            notify(kind="nope", recipient=self.user, company=self.company)


class NotificationApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.company = make_company()
        self.user = make_user(self.company)
        self.other = make_user(self.company)

        for number in ("PO-0000001", "PO-0000002"):
            notify(
                kind=Notification.KIND_PURCHASE_APPROVAL,
                recipient=self.user,
                context={"number": number},
                company=self.company,
            )
        notify(
            kind=Notification.KIND_PURCHASE_APPROVAL,
            recipient=self.other,
            context={"number": "PO-0000003"},
            company=self.company,
        )
        self.client.force_authenticate(self.user)

    def test_lists_only_own_notifications(self):
        response = self.client.get(reverse("notifications:notification-list"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["count"], 2)

    def test_mark_one_read(self):
        note = Notification.objects.filter(recipient=self.user).first()

        response = self.client.post(reverse("notifications:notification-read", args=[note.pk]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data["is_read"])
        unread = self.client.get(reverse("notifications:notification-list"), {"unread": "1"})
        self.assertEqual(unread.data["count"], 1)

    def test_mark_all_read(self):
        response = self.client.post(reverse("notifications:notification-read-all"))

        self.assertEqual(response.data["updated"], 2)
        self.assertFalse(Notification.objects.filter(recipient=self.user, is_read=False).exists())
        self.assertTrue(Notification.objects.filter(recipient=self.other, is_read=False).exists())

    def test_cannot_read_someone_elses_notification(self):
        foreign = Notification.objects.get(recipient=self.other)
        response = self.client.post(reverse("notifications:notification-read", args=[foreign.pk]))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
