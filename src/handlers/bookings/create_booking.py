import logging

from common.schemas.bookings import BookingRequest
from common.utils.custom_response import send_custom_response
from common.utils.custom_exceptions import DuplicateKey, NotFoundException
from handlers.deps import booking_service, parse_body, render_booking

logger = logging.getLogger(__name__)


def create_booking(event, context):
    request_body, error = parse_body(event, BookingRequest)
    if error:
        return error

    try:
        booking = booking_service.create(request_body)

        return send_custom_response(
            201,
            "Booking created successfully",
            render_booking(booking),
        )

    except NotFoundException as err:
        return send_custom_response(err.status_code, str(err))

    except ValueError as err:
        return send_custom_response(400, str(err))

    except DuplicateKey:
        logger.exception("Booking key collision")
        return send_custom_response(500, "Internal server error")

    except Exception:
        logger.exception("Unhandled error creating booking")
        return send_custom_response(500, "Internal server error")
