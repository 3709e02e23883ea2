"""Public booking self-service keyed by the access token in the path.

An unknown token and a malformed token get the same 404 body so callers
cannot probe which tokens exist.
"""

import logging

from common.schemas.bookings import (
    CancelBookingRequest,
    PublicBookingUpdate,
    PublicRefundRequest,
)
from common.utils.custom_response import send_custom_response
from handlers.deps import access_gateway, parse_body, path_param, render_access_result

logger = logging.getLogger(__name__)

INVALID_LINK_MESSAGE = "Invalid booking link"


def _invalid_link():
    return send_custom_response(404, INVALID_LINK_MESSAGE, {"is_valid": False})


def _respond(result, message: str):
    if not result.is_valid:
        return _invalid_link()
    return send_custom_response(
        200,
        message if result.applied or result.reason is None else result.reason,
        render_access_result(result),
    )


def get_booking_by_token(event, context):
    token = path_param(event, "token")
    if not token:
        return _invalid_link()
    try:
        result = access_gateway.get_by_access_token(token)
        return _respond(result, "Booking retrieved successfully")
    except Exception:
        logger.exception("Unhandled error resolving booking link")
        return send_custom_response(500, "Internal server error")


def get_refund_eligibility_by_token(event, context):
    token = path_param(event, "token")
    if not token:
        return _invalid_link()
    try:
        result = access_gateway.get_refund_eligibility_by_access_token(token)
        if not result.is_valid:
            return _invalid_link()
        return send_custom_response(
            200,
            result.eligibility.message,
            render_access_result(result),
        )
    except Exception:
        logger.exception("Unhandled error evaluating refund for booking link")
        return send_custom_response(500, "Internal server error")


def update_booking_by_token(event, context):
    token = path_param(event, "token")
    if not token:
        return _invalid_link()

    request_body, error = parse_body(event, PublicBookingUpdate)
    if error:
        return error

    try:
        result = access_gateway.update_by_access_token(token, request_body)
        return _respond(result, "Booking updated successfully")
    except Exception:
        logger.exception("Unhandled error updating booking via link")
        return send_custom_response(500, "Internal server error")


def cancel_booking_by_token(event, context):
    token = path_param(event, "token")
    if not token:
        return _invalid_link()

    request_body, error = parse_body(event, CancelBookingRequest)
    if error:
        return error

    try:
        result = access_gateway.cancel_booking_by_access_token(token, request_body.reason)
        return _respond(result, "Booking cancelled successfully")
    except Exception:
        logger.exception("Unhandled error cancelling booking via link")
        return send_custom_response(500, "Internal server error")


def refund_booking_by_token(event, context):
    token = path_param(event, "token")
    if not token:
        return _invalid_link()

    request_body, error = parse_body(event, PublicRefundRequest)
    if error:
        return error

    try:
        result = access_gateway.process_refund_by_access_token(token, request_body)
        return _respond(result, "Refund processed successfully")
    except Exception:
        logger.exception("Unhandled error refunding booking via link")
        return send_custom_response(500, "Internal server error")
