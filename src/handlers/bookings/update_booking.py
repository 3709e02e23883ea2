import logging

from common.schemas.bookings import BookingUpdate, ChangeStatusRequest
from common.utils.custom_response import send_custom_response
from common.utils.custom_exceptions import IllegalTransition, NotFoundException
from handlers.deps import booking_service, parse_body, path_param, render_booking, require_admin

logger = logging.getLogger(__name__)


def update_booking(event, context):
    denied = require_admin(event)
    if denied:
        return denied

    booking_id = path_param(event, "booking_id")
    if not booking_id:
        return send_custom_response(400, "booking_id is required in the path")

    request_body, error = parse_body(event, BookingUpdate)
    if error:
        return error

    try:
        booking = booking_service.update(booking_id, request_body)
        return send_custom_response(
            200,
            "Booking updated successfully",
            render_booking(booking),
        )

    except NotFoundException as err:
        return send_custom_response(err.status_code, str(err))

    except IllegalTransition as err:
        return send_custom_response(409, str(err))

    except ValueError as err:
        return send_custom_response(400, str(err))

    except Exception:
        logger.exception(f"Unhandled error updating booking {booking_id}")
        return send_custom_response(500, "Internal server error")


def change_booking_status(event, context):
    """Admin override: sets any status, bypassing the guarded transitions."""
    denied = require_admin(event)
    if denied:
        return denied

    booking_id = path_param(event, "booking_id")
    if not booking_id:
        return send_custom_response(400, "booking_id is required in the path")

    request_body, error = parse_body(event, ChangeStatusRequest)
    if error:
        return error

    try:
        booking = booking_service.change_status(booking_id, request_body.status)
        return send_custom_response(
            200,
            "Booking status updated successfully",
            {
                "booking_id": booking.booking_id,
                "new_status": booking.status.value
            }
        )

    except NotFoundException as err:
        return send_custom_response(err.status_code, str(err))

    except Exception:
        logger.exception(f"Unhandled error changing status of booking {booking_id}")
        return send_custom_response(500, "Internal server error")
