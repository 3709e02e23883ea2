import logging

from common.schemas.bookings import CancelBookingRequest
from common.utils.custom_response import send_custom_response
from common.utils.custom_exceptions import IllegalTransition, NotFoundException
from handlers.deps import booking_service, parse_body, path_param, render_booking, require_admin

logger = logging.getLogger(__name__)


def cancel_booking(event, context):
    denied = require_admin(event)
    if denied:
        return denied

    booking_id = path_param(event, "booking_id")
    if not booking_id:
        return send_custom_response(400, "booking_id is required in the path")

    request_body, error = parse_body(event, CancelBookingRequest)
    if error:
        return error

    try:
        booking = booking_service.cancel_booking(booking_id, request_body.reason)
        return send_custom_response(
            200,
            "Booking cancelled successfully",
            render_booking(booking),
        )

    except NotFoundException as err:
        return send_custom_response(err.status_code, str(err))

    except IllegalTransition as err:
        return send_custom_response(409, str(err))

    except Exception:
        logger.exception(f"Unhandled error cancelling booking {booking_id}")
        return send_custom_response(500, "Internal server error")
