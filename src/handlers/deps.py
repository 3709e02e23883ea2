import logging
import os
from typing import Optional

from pydantic import ValidationError

from common.models.users import UserRole
from common.repository.booking_repo import BookingRepository
from common.repository.package_repo import PackageRepository
from common.repository.refund_policy_repo import RefundPolicyRepository
from common.schemas.bookings import (
    AccessResultResponse,
    BookingResponse,
    PackageSummary,
    PublicBookingResponse,
)
from common.services.access_service import AccessGateway
from common.services.booking_service import BookingService
from common.utils.custom_response import send_custom_response

logging.getLogger().setLevel(os.environ.get("LOG_LEVEL", "INFO"))

# One set of stores per process, shared by every handler module.
booking_repo = BookingRepository()
policy_repo = RefundPolicyRepository()
package_repo = PackageRepository()

access_gateway = AccessGateway(booking_repo=booking_repo, policy_repo=policy_repo)
booking_service = BookingService(
    booking_repo=booking_repo,
    policy_repo=policy_repo,
    package_repo=package_repo,
    token_factory=access_gateway.generate_token,
)


def require_admin(event) -> Optional[dict]:
    """Return an error response unless the authorizer context carries the ADMIN role."""
    try:
        role_raw = event["requestContext"]["authorizer"]["role"]
    except (KeyError, TypeError):
        return send_custom_response(401, "Unauthorized")

    try:
        role = UserRole(str(role_raw).upper())
    except ValueError:
        return send_custom_response(403, "Forbidden")

    if role != UserRole.ADMIN:
        return send_custom_response(403, "Only admins can manage bookings")
    return None


def render_booking(booking, model=BookingResponse) -> dict:
    """Serialise a booking with its package looked up from the current catalog."""
    response = model.model_validate(booking)
    package = booking_service.package_for(booking)
    if package is not None:
        response.package = PackageSummary.model_validate(package)
    return response.model_dump(mode="json")


def render_access_result(result) -> dict:
    data = AccessResultResponse.model_validate(result).model_dump(mode="json")
    if result.booking is not None:
        data["booking"] = render_booking(result.booking, PublicBookingResponse)
    return data


def path_param(event, name: str) -> Optional[str]:
    path_params = event.get("pathParameters") or {}
    return path_params.get(name)


def format_validation_error(err: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(map(str, e['loc']))}: {e['msg']}" if e["loc"] else e["msg"]
        for e in err.errors()
    )


def parse_body(event, model):
    """Validate the JSON body against ``model``.

    Returns ``(request, None)`` or ``(None, error_response)``.
    """
    if not event.get("body"):
        return None, send_custom_response(400, "Request body is required")
    try:
        return model.model_validate_json(event["body"]), None
    except ValidationError as e:
        return None, send_custom_response(400, format_validation_error(e))
    except ValueError as e:
        return None, send_custom_response(400, str(e))
