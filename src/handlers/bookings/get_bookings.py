import logging

from common.utils.custom_response import send_custom_response
from common.utils.custom_exceptions import NotFoundException
from handlers.deps import booking_service, path_param, render_booking, require_admin

logger = logging.getLogger(__name__)


def get_bookings(event, context):
    denied = require_admin(event)
    if denied:
        return denied

    try:
        bookings = booking_service.list_all()

        result = [render_booking(b) for b in bookings]
        return send_custom_response(
            200,
            "Bookings retrieved successfully",
            {
                "count": len(result),
                "bookings": result
            }
        )

    except Exception:
        logger.exception("Unhandled error listing bookings")
        return send_custom_response(500, "Internal server error")


def get_booking(event, context):
    denied = require_admin(event)
    if denied:
        return denied

    booking_id = path_param(event, "booking_id")
    if not booking_id:
        return send_custom_response(400, "booking_id is required in the path")

    try:
        booking = booking_service.get_by_id(booking_id)
        return send_custom_response(
            200,
            "Booking retrieved successfully",
            render_booking(booking),
        )

    except NotFoundException as err:
        return send_custom_response(err.status_code, str(err))

    except Exception:
        logger.exception(f"Unhandled error retrieving booking {booking_id}")
        return send_custom_response(500, "Internal server error")
