"""Booking lifecycle rules.

Everything here is pure: functions take a booking, the active refund policy
and the current time, and return a result or a new booking. Nothing touches a
store, so the admin and the token-holder paths share one implementation.

Guarded transitions:

    pending|confirmed -> cancelled   apply_cancellation
    pending|confirmed -> refunded    apply_refund (policy-checked unless overridden)

``apply_status_override`` is the admin correction path and accepts any
status change; it is not part of the guarded table.
"""

import logging
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Optional

from common.models.bookings import Booking, BookingStatus, PaymentStatus
from common.models.refund_policy import EligibilityReason, EligibilityResult, RefundPolicy
from common.utils.custom_exceptions import IllegalTransition, RefundNotEligible

logger = logging.getLogger(__name__)

ACTIVE_STATUSES = frozenset({BookingStatus.PENDING, BookingStatus.CONFIRMED})
TERMINAL_STATUSES = frozenset(
    {BookingStatus.COMPLETED, BookingStatus.CANCELLED, BookingStatus.REFUNDED}
)

GUARDED_TRANSITIONS = {
    BookingStatus.PENDING: frozenset({BookingStatus.CANCELLED, BookingStatus.REFUNDED}),
    BookingStatus.CONFIRMED: frozenset({BookingStatus.CANCELLED, BookingStatus.REFUNDED}),
}

ONE_DAY = timedelta(days=1)


def is_active(booking: Booking) -> bool:
    return booking.status in ACTIVE_STATUSES


def days_until_journey(booking: Booking, now: datetime) -> int:
    # Floor division: 23h59m left is 0 days, 1 minute past is -1.
    return (booking.journey_date - now) // ONE_DAY


def refund_amount(booking: Booking, policy: RefundPolicy, full_refund: bool) -> float:
    if full_refund:
        return booking.total_price_lkr
    return booking.total_price_lkr * policy.partial_refund_percentage / 100


def evaluate_refund_eligibility(
    booking: Booking, policy: RefundPolicy, now: datetime
) -> EligibilityResult:
    if not is_active(booking):
        return EligibilityResult(
            eligible=False,
            cancellable=False,
            reason=EligibilityReason.WRONG_STATUS,
            message="Only confirmed or pending bookings are eligible for refund.",
        )

    days = days_until_journey(booking, now)

    if days >= policy.full_refund_before_days:
        return EligibilityResult(
            eligible=True,
            cancellable=True,
            full_refund=True,
            amount=refund_amount(booking, policy, True),
            days_remaining=days,
            message=f"Eligible for full refund ({days} days before journey)",
        )
    if days >= policy.partial_refund_before_days:
        return EligibilityResult(
            eligible=True,
            cancellable=True,
            full_refund=False,
            amount=refund_amount(booking, policy, False),
            days_remaining=days,
            message=(
                f"Eligible for partial refund ({policy.partial_refund_percentage}%)"
            ),
        )
    if days >= policy.no_refund_before_days:
        return EligibilityResult(
            eligible=False,
            cancellable=True,
            reason=EligibilityReason.NO_REFUND_WINDOW,
            days_remaining=days,
            message=f"No refund available ({days} days before journey)",
        )
    return EligibilityResult(
        eligible=False,
        cancellable=False,
        reason=EligibilityReason.CANCELLATION_LOCKED,
        days_remaining=days,
        message=f"Cancellation is no longer possible ({days} days before journey)",
    )


def apply_refund(
    booking: Booking,
    policy: RefundPolicy,
    reason: str,
    now: datetime,
    full_refund: Optional[bool] = None,
) -> Booking:
    """Return ``booking`` refunded, every payment marked refunded.

    An explicit ``full_refund`` forces the refund type and skips the policy
    check. Otherwise the policy decides and an ineligible booking raises
    ``RefundNotEligible``.
    """
    if full_refund is not None:
        amount = refund_amount(booking, policy, full_refund)
    else:
        eligibility = evaluate_refund_eligibility(booking, policy, now)
        if not eligibility.eligible:
            raise RefundNotEligible(
                "Booking is not eligible for refund based on the current refund policy",
                eligibility,
            )
        amount = eligibility.amount

    return replace(
        booking,
        status=BookingStatus.REFUNDED,
        refunded_amount=amount,
        refund_date=now,
        refund_reason=reason,
        payments=[replace(p, status=PaymentStatus.REFUNDED) for p in booking.payments],
    )


def apply_cancellation(booking: Booking, reason: str) -> Booking:
    if BookingStatus.CANCELLED not in GUARDED_TRANSITIONS.get(booking.status, ()):
        raise IllegalTransition(
            f"Cannot cancel a booking with status: {booking.status.value}"
        )
    return replace(booking, status=BookingStatus.CANCELLED, refund_reason=reason)


def apply_status_override(booking: Booking, new_status: BookingStatus) -> Booking:
    if booking.status in TERMINAL_STATUSES and new_status != booking.status:
        logger.warning(
            f"Booking {booking.booking_id} forced out of terminal status "
            f"{booking.status.value} to {new_status.value}"
        )
    return replace(booking, status=new_status)
