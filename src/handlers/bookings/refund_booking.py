import logging

from common.schemas.bookings import EligibilityResponse, RefundRequest
from common.utils.custom_response import send_custom_response
from common.utils.custom_exceptions import NotFoundException, RefundNotEligible
from handlers.deps import booking_service, parse_body, path_param, render_booking, require_admin

logger = logging.getLogger(__name__)


def process_refund(event, context):
    denied = require_admin(event)
    if denied:
        return denied

    booking_id = path_param(event, "booking_id")
    if not booking_id:
        return send_custom_response(400, "booking_id is required in the path")

    request_body, error = parse_body(event, RefundRequest)
    if error:
        return error

    try:
        booking = booking_service.process_refund(booking_id, request_body)
        return send_custom_response(
            200,
            "Refund processed successfully",
            render_booking(booking),
        )

    except NotFoundException as err:
        return send_custom_response(err.status_code, str(err))

    except RefundNotEligible as err:
        eligibility = None
        if err.eligibility is not None:
            eligibility = EligibilityResponse.model_validate(err.eligibility).model_dump(
                mode="json"
            )
        return send_custom_response(409, str(err), eligibility)

    except Exception:
        logger.exception(f"Unhandled error refunding booking {booking_id}")
        return send_custom_response(500, "Internal server error")


def get_refund_eligibility(event, context):
    denied = require_admin(event)
    if denied:
        return denied

    booking_id = path_param(event, "booking_id")
    if not booking_id:
        return send_custom_response(400, "booking_id is required in the path")

    try:
        eligibility = booking_service.get_refund_eligibility(booking_id)
        return send_custom_response(
            200,
            eligibility.message,
            EligibilityResponse.model_validate(eligibility).model_dump(mode="json"),
        )

    except NotFoundException as err:
        return send_custom_response(err.status_code, str(err))

    except Exception:
        logger.exception(f"Unhandled error evaluating refund for booking {booking_id}")
        return send_custom_response(500, "Internal server error")
