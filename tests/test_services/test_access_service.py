import unittest
from datetime import datetime, timezone, timedelta
from unittest.mock import MagicMock, patch

from common.models.bookings import BookingStatus, PaymentStatus
from common.models.refund_policy import EligibilityReason
from common.repository.booking_repo import BookingRepository
from common.repository.package_repo import PackageRepository
from common.repository.refund_policy_repo import RefundPolicyRepository
from common.schemas.bookings import BookingRequest, PublicBookingUpdate, PublicRefundRequest
from common.services.access_service import (
    FULL_REFUND_IGNORED,
    AccessGateway,
    generate_access_token,
)
from common.services.booking_service import BookingService
from common.utils.custom_exceptions import DuplicateKey
from common.utils.datetime_normaliser import to_utc

TODAY = datetime.now(timezone.utc).date()
NOW = to_utc(TODAY)


class TestAccessGateway(unittest.TestCase):

    def setUp(self):
        self.booking_repo = BookingRepository()
        self.policy_repo = RefundPolicyRepository()
        self.gateway = AccessGateway(self.booking_repo, self.policy_repo, clock=lambda: NOW)
        self.service = BookingService(
            self.booking_repo,
            self.policy_repo,
            PackageRepository(),
            token_factory=self.gateway.generate_token,
            clock=lambda: NOW,
        )

    def create(self, days_out=10):
        return self.service.create(
            BookingRequest(
                journey_id="1",
                package_id="1",
                journey_date=TODAY + timedelta(days=days_out),
                guest_count=2,
                contact_info={
                    "name": "Guest User",
                    "email": "guest@example.com",
                    "phone": "+94 77 987 6543",
                },
                user_id="user-1",
            )
        )

    def test_get_by_access_token(self):
        booking = self.create()

        result = self.gateway.get_by_access_token(booking.access_token)

        self.assertTrue(result.is_valid)
        self.assertEqual(result.booking, booking)

    def test_unknown_and_empty_tokens_are_invalid(self):
        self.create()

        for token in ("nope", "", None):
            with self.subTest(token=token):
                result = self.gateway.get_by_access_token(token)
                self.assertFalse(result.is_valid)
                self.assertIsNone(result.booking)

    def test_every_operation_reports_invalid_token(self):
        results = [
            self.gateway.get_refund_eligibility_by_access_token("nope"),
            self.gateway.update_by_access_token("nope", PublicBookingUpdate(special_requests="x")),
            self.gateway.cancel_booking_by_access_token("nope", "reason"),
            self.gateway.process_refund_by_access_token("nope", PublicRefundRequest(reason="r")),
        ]

        for result in results:
            self.assertFalse(result.is_valid)
            self.assertFalse(result.applied)

    def test_refund_eligibility_by_token(self):
        booking = self.create(days_out=5)

        result = self.gateway.get_refund_eligibility_by_access_token(booking.access_token)

        self.assertTrue(result.is_valid)
        self.assertTrue(result.eligibility.eligible)
        self.assertFalse(result.eligibility.full_refund)
        self.assertEqual(result.eligibility.amount, 15000)

    def test_update_by_token(self):
        booking = self.create()

        result = self.gateway.update_by_access_token(
            booking.access_token,
            PublicBookingUpdate(
                special_requests="Window seat",
                contact_info={"phone": "+94 71 000 0000"},
            ),
        )

        self.assertTrue(result.applied)
        self.assertEqual(result.booking.special_requests, "Window seat")
        self.assertEqual(result.booking.contact_info.phone, "+94 71 000 0000")
        self.assertEqual(result.booking.contact_info.name, "Guest User")
        self.assertEqual(self.booking_repo.find_by_id(booking.booking_id), result.booking)

    def test_journey_date_cannot_be_moved_by_token(self):
        booking = self.create()

        for journey_date in (TODAY + timedelta(days=60), TODAY - timedelta(days=30)):
            with self.subTest(journey_date=journey_date):
                req = PublicBookingUpdate.model_validate(
                    {"journey_date": journey_date.isoformat(), "special_requests": "x"}
                )
                self.gateway.update_by_access_token(booking.access_token, req)

                self.assertEqual(
                    self.booking_repo.find_by_id(booking.booking_id).journey_date,
                    booking.journey_date,
                )

    def test_moving_date_cannot_open_refund_window(self):
        booking = self.create(days_out=2)

        self.gateway.update_by_access_token(
            booking.access_token,
            PublicBookingUpdate.model_validate(
                {"journey_date": (TODAY + timedelta(days=60)).isoformat()}
            ),
        )
        result = self.gateway.process_refund_by_access_token(
            booking.access_token, PublicRefundRequest(reason="late")
        )

        self.assertFalse(result.applied)
        self.assertEqual(result.eligibility.reason, EligibilityReason.NO_REFUND_WINDOW)
        self.assertIsNone(self.booking_repo.find_by_id(booking.booking_id).refunded_amount)

    def test_cancel_by_token(self):
        booking = self.create()

        result = self.gateway.cancel_booking_by_access_token(booking.access_token, "Sick")

        self.assertTrue(result.applied)
        self.assertEqual(result.booking.status, BookingStatus.CANCELLED)

    def test_cancel_twice_reports_reason(self):
        booking = self.create()
        self.gateway.cancel_booking_by_access_token(booking.access_token, "Sick")

        result = self.gateway.cancel_booking_by_access_token(booking.access_token, "Again")

        self.assertTrue(result.is_valid)
        self.assertFalse(result.applied)
        self.assertEqual(result.reason, "Cannot cancel a booking with status: cancelled")
        self.assertEqual(result.booking.refund_reason, "Sick")

    def test_refund_by_token_follows_policy(self):
        booking = self.create(days_out=10)

        result = self.gateway.process_refund_by_access_token(
            booking.access_token, PublicRefundRequest(reason="Change of plans")
        )

        self.assertTrue(result.applied)
        self.assertEqual(result.booking.status, BookingStatus.REFUNDED)
        self.assertEqual(result.booking.refunded_amount, 30000)
        self.assertEqual(result.booking.payments[0].status, PaymentStatus.REFUNDED)

    def test_refund_by_token_outside_window_is_refused(self):
        booking = self.create(days_out=2)

        result = self.gateway.process_refund_by_access_token(
            booking.access_token, PublicRefundRequest(reason="late")
        )

        self.assertTrue(result.is_valid)
        self.assertFalse(result.applied)
        self.assertEqual(result.eligibility.reason, EligibilityReason.NO_REFUND_WINDOW)
        self.assertEqual(self.booking_repo.find_by_id(booking.booking_id), booking)

    def test_refund_by_token_ignores_forced_refund_type(self):
        booking = self.create(days_out=2)

        req = PublicRefundRequest(reason="late", full_refund=True)
        result = self.gateway.process_refund_by_access_token(booking.access_token, req)

        self.assertFalse(result.applied)
        self.assertIn(FULL_REFUND_IGNORED, result.reason)
        self.assertEqual(
            self.booking_repo.find_by_id(booking.booking_id).status, BookingStatus.PENDING
        )

    def test_refund_by_token_reports_ignored_partial_request(self):
        booking = self.create(days_out=30)

        result = self.gateway.process_refund_by_access_token(
            booking.access_token, PublicRefundRequest(reason="r", full_refund=False)
        )

        self.assertTrue(result.applied)
        self.assertEqual(result.booking.refunded_amount, 30000)
        self.assertEqual(result.reason, FULL_REFUND_IGNORED)

    def test_refund_by_token_without_override_has_no_reason(self):
        booking = self.create(days_out=30)

        result = self.gateway.process_refund_by_access_token(
            booking.access_token, PublicRefundRequest(reason="r")
        )

        self.assertTrue(result.applied)
        self.assertIsNone(result.reason)

    def test_refund_after_cancel_is_refused(self):
        booking = self.create(days_out=30)
        self.gateway.cancel_booking_by_access_token(booking.access_token, "Sick")

        result = self.gateway.process_refund_by_access_token(
            booking.access_token, PublicRefundRequest(reason="money back")
        )

        self.assertFalse(result.applied)
        self.assertEqual(result.eligibility.reason, EligibilityReason.WRONG_STATUS)

    def test_deleted_booking_token_becomes_invalid(self):
        booking = self.create()
        self.service.delete(booking.booking_id)

        self.assertFalse(self.gateway.get_by_access_token(booking.access_token).is_valid)


class TestGenerateAccessToken(unittest.TestCase):

    @patch("common.services.access_service.secrets.token_urlsafe")
    def test_retries_on_collision(self, mock_token):
        mock_token.side_effect = ["taken", "taken", "fresh"]
        repo = MagicMock()
        repo.token_exists.side_effect = lambda t: t == "taken"

        token = generate_access_token(repo)

        self.assertEqual(token, "fresh")
        self.assertEqual(mock_token.call_count, 3)

    @patch("common.services.access_service.secrets.token_urlsafe", return_value="taken")
    def test_gives_up_after_repeated_collisions(self, mock_token):
        repo = MagicMock()
        repo.token_exists.return_value = True

        with self.assertRaises(DuplicateKey):
            generate_access_token(repo)

        self.assertEqual(mock_token.call_count, 10)


if __name__ == "__main__":
    unittest.main()
