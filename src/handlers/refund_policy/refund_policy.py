import logging

from common.schemas.refund_policy import RefundPolicyResponse, RefundPolicyUpdate
from common.utils.custom_response import send_custom_response
from common.utils.custom_exceptions import InvalidPolicy
from handlers.deps import booking_service, parse_body, require_admin

logger = logging.getLogger(__name__)


def get_refund_policy(event, context):
    try:
        policy = booking_service.get_refund_policy()
        return send_custom_response(
            200,
            "Refund policy retrieved successfully",
            RefundPolicyResponse.model_validate(policy).model_dump(),
        )
    except Exception:
        logger.exception("Unhandled error reading refund policy")
        return send_custom_response(500, "Internal server error")


def update_refund_policy(event, context):
    denied = require_admin(event)
    if denied:
        return denied

    request_body, error = parse_body(event, RefundPolicyUpdate)
    if error:
        return error

    try:
        policy = booking_service.update_refund_policy(request_body)
        return send_custom_response(
            200,
            "Refund policy updated successfully",
            RefundPolicyResponse.model_validate(policy).model_dump(),
        )

    except InvalidPolicy as err:
        return send_custom_response(400, str(err), {"errors": err.errors})

    except Exception:
        logger.exception("Unhandled error updating refund policy")
        return send_custom_response(500, "Internal server error")
