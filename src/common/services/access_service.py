"""Token-based access to a single booking.

The access token is a bearer credential: whoever holds it can read, edit,
cancel and request a refund on that one booking. Tokens never expire and
cannot be revoked.

Nothing here raises a domain error to the caller. An unknown token gives
``AccessResult(is_valid=False)``. A request the booking rules refuse gives
``is_valid=True`` with the booking unchanged, ``applied=False`` and the
reason.
"""

import logging
import secrets
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from common.models.bookings import Booking
from common.models.refund_policy import EligibilityResult
from common.repository.booking_repo import BookingRepository
from common.repository.refund_policy_repo import RefundPolicyRepository
from common.schemas.bookings import PublicBookingUpdate, PublicRefundRequest
from common.services import lifecycle
from common.utils.constants import TOKEN_BYTES, TOKEN_GENERATION_ATTEMPTS
from common.utils.custom_exceptions import (
    DuplicateKey,
    IllegalTransition,
    NotFoundException,
    RefundNotEligible,
)
from common.utils.datetime_normaliser import utc_now

logger = logging.getLogger(__name__)

FULL_REFUND_IGNORED = "full_refund is decided by the refund policy and was ignored"


def generate_access_token(booking_repo: BookingRepository) -> str:
    for _ in range(TOKEN_GENERATION_ATTEMPTS):
        token = secrets.token_urlsafe(TOKEN_BYTES)
        if not booking_repo.token_exists(token):
            return token
    raise DuplicateKey("could not allocate a unique access token")


@dataclass
class AccessResult:
    is_valid: bool
    booking: Optional[Booking] = None
    applied: bool = False
    reason: Optional[str] = None
    eligibility: Optional[EligibilityResult] = None


class AccessGateway:
    def __init__(
        self,
        booking_repo: BookingRepository,
        policy_repo: RefundPolicyRepository,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.booking_repo = booking_repo
        self.policy_repo = policy_repo
        self.clock = clock

    def generate_token(self) -> str:
        return generate_access_token(self.booking_repo)

    def resolve(self, token: str) -> Optional[Booking]:
        if not token:
            return None
        return self.booking_repo.find_by_token(token)

    def get_by_access_token(self, token: str) -> AccessResult:
        booking = self.resolve(token)
        if booking is None:
            return AccessResult(is_valid=False)
        return AccessResult(is_valid=True, booking=booking)

    def get_refund_eligibility_by_access_token(self, token: str) -> AccessResult:
        booking = self.resolve(token)
        if booking is None:
            return AccessResult(is_valid=False)
        eligibility = lifecycle.evaluate_refund_eligibility(
            booking, self.policy_repo.get(), self.clock()
        )
        return AccessResult(is_valid=True, booking=booking, eligibility=eligibility)

    def update_by_access_token(self, token: str, req: PublicBookingUpdate) -> AccessResult:
        booking = self.resolve(token)
        if booking is None:
            return AccessResult(is_valid=False)

        with self.booking_repo.lock(booking.booking_id):
            booking = self.resolve(token)
            if booking is None:
                return AccessResult(is_valid=False)

            try:
                updated = self.booking_repo.update(
                    booking.booking_id, req.model_dump(exclude_none=True)
                )
            except NotFoundException:
                return AccessResult(is_valid=False)
        return AccessResult(is_valid=True, booking=updated, applied=True)

    def cancel_booking_by_access_token(self, token: str, reason: str) -> AccessResult:
        booking = self.resolve(token)
        if booking is None:
            return AccessResult(is_valid=False)

        with self.booking_repo.lock(booking.booking_id):
            booking = self.resolve(token)
            if booking is None:
                return AccessResult(is_valid=False)
            try:
                cancelled = lifecycle.apply_cancellation(booking, reason)
            except IllegalTransition as err:
                logger.warning(f"Token cancel refused for booking {booking.booking_id}: {err}")
                return AccessResult(is_valid=True, booking=booking, reason=str(err))
            updated = self.booking_repo.save(cancelled)

        logger.info(f"Booking {updated.booking_id} cancelled by token holder")
        return AccessResult(is_valid=True, booking=updated, applied=True)

    def process_refund_by_access_token(
        self, token: str, req: PublicRefundRequest
    ) -> AccessResult:
        """Refund strictly by the active policy; token holders cannot force a refund type.

        A ``full_refund`` in the request is ignored and the result's ``reason``
        says so.
        """
        booking = self.resolve(token)
        if booking is None:
            return AccessResult(is_valid=False)

        ignored = FULL_REFUND_IGNORED if req.full_refund is not None else None

        with self.booking_repo.lock(booking.booking_id):
            booking = self.resolve(token)
            if booking is None:
                return AccessResult(is_valid=False)
            try:
                refunded = lifecycle.apply_refund(
                    booking, self.policy_repo.get(), req.reason, self.clock()
                )
            except RefundNotEligible as err:
                logger.warning(
                    f"Token refund refused for booking {booking.booking_id}: {err}"
                )
                return AccessResult(
                    is_valid=True,
                    booking=booking,
                    reason="; ".join(filter(None, [str(err), ignored])),
                    eligibility=err.eligibility,
                )
            updated = self.booking_repo.save(refunded)

        logger.info(
            f"Booking {updated.booking_id} refunded {updated.refunded_amount} LKR by token holder"
        )
        return AccessResult(is_valid=True, booking=updated, applied=True, reason=ignored)
