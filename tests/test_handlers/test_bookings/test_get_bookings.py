import json
import unittest
from datetime import datetime, timezone
from unittest.mock import patch
from common.models.bookings import Booking, ContactInfo
from common.models.users import UserRole
from common.utils.custom_exceptions import NotFoundException
import handlers.bookings.get_bookings as mod


def sample_booking(booking_id="b1"):
    return Booking(
        booking_id=booking_id,
        access_token=f"tok-{booking_id}",
        journey_id="1",
        package_id="1",
        journey_date=datetime(2030, 1, 1, tzinfo=timezone.utc),
        guest_count=2,
        contact_info=ContactInfo("Guest User", "guest@example.com", "+94 77 987 6543"),
        total_price_lkr=30000.0,
        user_id="u1",
    )

class GetBookingsTests(unittest.TestCase):
    def setUp(self):
        self.p_list = patch.object(mod.booking_service, "list_all")
        self.p_get = patch.object(mod.booking_service, "get_by_id")
        self.mock_list = self.p_list.start()
        self.mock_get = self.p_get.start()

    def tearDown(self):
        self.p_list.stop(); self.p_get.stop()

    def _event(self, role=UserRole.ADMIN.value, booking_id=None):
        return {
            "requestContext": {"authorizer": {"user_id": "u1", "role": role}},
            "pathParameters": {"booking_id": booking_id} if booking_id else {},
        }

    def test_missing_authorizer_returns_401(self):
        resp = mod.get_bookings({"requestContext": {}}, None)
        self.assertEqual(401, resp["statusCode"])

    def test_invalid_role_returns_403(self):
        resp = mod.get_bookings(self._event(role="bad"), None)
        self.assertEqual(403, resp["statusCode"])

    def test_guest_forbidden(self):
        resp = mod.get_bookings(self._event(role=UserRole.GUEST.value), None)
        self.assertEqual(403, resp["statusCode"])
        self.mock_list.assert_not_called()

    def test_admin_role_is_case_insensitive(self):
        self.mock_list.return_value = []
        resp = mod.get_bookings(self._event(role="admin"), None)
        self.assertEqual(200, resp["statusCode"])

    def test_success_returns_bookings(self):
        self.mock_list.return_value = [sample_booking("b1"), sample_booking("b2")]
        resp = mod.get_bookings(self._event(), None)
        self.assertEqual(200, resp["statusCode"])
        body = json.loads(resp["body"])
        self.assertEqual(2, body["data"]["count"])
        self.assertEqual("b1", body["data"]["bookings"][0]["booking_id"])
        self.assertEqual("u1", body["data"]["bookings"][0]["user_id"])

    def test_list_error_returns_500(self):
        self.mock_list.side_effect = RuntimeError("boom")
        resp = mod.get_bookings(self._event(), None)
        self.assertEqual(500, resp["statusCode"])

    def test_get_booking_success(self):
        self.mock_get.return_value = sample_booking()
        resp = mod.get_booking(self._event(booking_id="b1"), None)
        self.assertEqual(200, resp["statusCode"])
        self.mock_get.assert_called_with("b1")

    def test_get_booking_includes_package(self):
        self.mock_get.return_value = sample_booking()
        resp = mod.get_booking(self._event(booking_id="b1"), None)
        package = json.loads(resp["body"])["data"]["package"]
        self.assertEqual("Temple Meditation Experience", package["name"])
        self.assertEqual(15000, package["price_lkr"])

    def test_get_booking_unknown_package_is_null(self):
        booking = sample_booking()
        booking.package_id = "retired"
        self.mock_get.return_value = booking
        resp = mod.get_booking(self._event(booking_id="b1"), None)
        self.assertEqual(200, resp["statusCode"])
        self.assertIsNone(json.loads(resp["body"])["data"]["package"])

    def test_get_booking_missing_path_returns_400(self):
        resp = mod.get_booking(self._event(), None)
        self.assertEqual(400, resp["statusCode"])

    def test_get_booking_not_found(self):
        self.mock_get.side_effect = NotFoundException("booking", "b9")
        resp = mod.get_booking(self._event(booking_id="b9"), None)
        self.assertEqual(404, resp["statusCode"])
        self.assertEqual("booking 'b9' not found", json.loads(resp["body"])["message"])

if __name__ == "__main__":
    unittest.main()
