import logging

from common.utils.custom_response import send_custom_response
from common.utils.custom_exceptions import NotFoundException
from handlers.deps import booking_service, path_param, require_admin

logger = logging.getLogger(__name__)


def delete_booking(event, context):
    denied = require_admin(event)
    if denied:
        return denied

    booking_id = path_param(event, "booking_id")
    if not booking_id:
        return send_custom_response(400, "booking_id is required in the path")

    try:
        booking_service.delete(booking_id)
        return send_custom_response(200, "Booking deleted successfully")

    except NotFoundException as err:
        return send_custom_response(err.status_code, str(err))

    except Exception:
        logger.exception(f"Unhandled error deleting booking {booking_id}")
        return send_custom_response(500, "Internal server error")
