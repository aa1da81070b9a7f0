# transfers/tests/test_lifecycle.py

from django.test import SimpleTestCase

from backend.errors import InvalidTransitionError
from transfers.models import StockRequest
from transfers.services.lifecycle import can_transition, validate_transition


class TransferLifecycleTests(SimpleTestCase):
    """
    GUARANTEES:
    - PENDING may be approved or rejected
    - Only APPROVED may be confirmed
    - Terminal states never move again
    """

    def _req(self, status):
        return StockRequest(request_number="REQ-0000001", status=status)

    def test_pending_can_be_approved_or_rejected(self):
        self.assertTrue(can_transition(from_status="PENDING", to_status="APPROVED"))
        self.assertTrue(can_transition(from_status="PENDING", to_status="REJECT"))

    def test_pending_cannot_be_confirmed(self):
        self.assertFalse(can_transition(from_status="PENDING", to_status="CONFIRM"))
        with self.assertRaises(InvalidTransitionError):
            validate_transition(request=self._req("PENDING"), target_status="CONFIRM")

    def test_approved_can_be_confirmed_or_rejected(self):
        validate_transition(request=self._req("APPROVED"), target_status="CONFIRM")
        validate_transition(request=self._req("APPROVED"), target_status="COMPLETED")
        validate_transition(request=self._req("APPROVED"), target_status="REJECT")

    def test_terminal_states_are_final(self):
        for terminal in ("REJECT", "CONFIRM", "COMPLETED"):
            for target in ("PENDING", "APPROVED", "REJECT", "CONFIRM"):
                with self.subTest(terminal=terminal, target=target):
                    self.assertFalse(can_transition(from_status=terminal, to_status=target))

    def test_approved_cannot_go_back_to_pending(self):
        with self.assertRaises(InvalidTransitionError):
            validate_transition(request=self._req("APPROVED"), target_status="PENDING")
