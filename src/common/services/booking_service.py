import logging
import uuid
from dataclasses import replace
from datetime import date, datetime
from typing import Callable, List, Optional

from common.models.bookings import (
    Booking,
    BookingStatus,
    ContactInfo,
    Payment,
    PaymentStatus,
)
from common.models.packages import Package
from common.models.refund_policy import EligibilityResult, RefundPolicy
from common.repository.booking_repo import BookingRepository
from common.repository.package_repo import PackageRepository
from common.repository.refund_policy_repo import RefundPolicyRepository
from common.schemas.bookings import BookingRequest, BookingUpdate, RefundRequest
from common.schemas.refund_policy import RefundPolicyUpdate
from common.services import lifecycle
from common.services.access_service import generate_access_token
from common.utils.constants import EXCHANGE_RATE_LKR_TO_USD
from common.utils.custom_exceptions import IllegalTransition, NotFoundException
from common.utils.datetime_normaliser import to_utc, utc_now

logger = logging.getLogger(__name__)


class BookingService:
    def __init__(
        self,
        booking_repo: BookingRepository,
        policy_repo: RefundPolicyRepository,
        package_repo: PackageRepository,
        token_factory: Optional[Callable[[], str]] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.booking_repo = booking_repo
        self.policy_repo = policy_repo
        self.package_repo = package_repo
        self.token_factory = token_factory or (
            lambda: generate_access_token(booking_repo)
        )
        self.clock = clock

    def list_all(self) -> List[Booking]:
        return self.booking_repo.list_all()

    def get_by_id(self, booking_id: str) -> Booking:
        booking = self.booking_repo.find_by_id(booking_id)
        if booking is None:
            raise NotFoundException("booking", booking_id)
        return booking

    def create(self, req: BookingRequest) -> Booking:
        now = self.clock()
        self._check_journey_date(req.journey_date, now)

        package = self._package(req.package_id)
        if package.hidden:
            raise ValueError(f"Package {package.package_id} is not available for booking")
        total_lkr = self._price(package, req.guest_count)

        booking = Booking(
            booking_id=self.booking_repo.next_id(),
            access_token=self.token_factory(),
            journey_id=req.journey_id,
            package_id=req.package_id,
            journey_date=to_utc(req.journey_date),
            guest_count=req.guest_count,
            contact_info=ContactInfo(**req.contact_info.model_dump()),
            total_price_lkr=total_lkr,
            total_price_usd=round(total_lkr * EXCHANGE_RATE_LKR_TO_USD),
            special_requests=req.special_requests,
            payments=[
                Payment(
                    payment_id=f"payment_{uuid.uuid4().hex[:12]}",
                    amount=total_lkr,
                    timestamp=now,
                )
            ],
            user_id=req.user_id,
            booking_date=now,
        )
        created = self.booking_repo.insert(booking)
        logger.info(f"Created booking {created.booking_id} for package {req.package_id}")
        return created

    def update(self, booking_id: str, req: BookingUpdate) -> Booking:
        with self.booking_repo.lock(booking_id):
            booking = self.get_by_id(booking_id)
            patch = self._patch_for(booking, req)
            if req.guest_count is not None and req.guest_count != booking.guest_count:
                patch.update(self._repriced(booking, req.guest_count))
            return self.booking_repo.update(booking_id, patch)

    def change_status(self, booking_id: str, status: BookingStatus) -> Booking:
        with self.booking_repo.lock(booking_id):
            booking = self.get_by_id(booking_id)
            updated = self.booking_repo.save(lifecycle.apply_status_override(booking, status))
        logger.info(
            f"Booking {booking_id} status overridden {booking.status.value} -> {status.value}"
        )
        return updated

    def cancel_booking(self, booking_id: str, reason: str) -> Booking:
        with self.booking_repo.lock(booking_id):
            booking = self.get_by_id(booking_id)
            try:
                cancelled = lifecycle.apply_cancellation(booking, reason)
            except IllegalTransition as err:
                logger.warning(f"Cancel rejected for booking {booking_id}: {err}")
                raise
            updated = self.booking_repo.save(cancelled)
        logger.info(f"Cancelled booking {booking_id}")
        return updated

    def process_refund(self, booking_id: str, req: RefundRequest) -> Booking:
        with self.booking_repo.lock(booking_id):
            booking = self.get_by_id(booking_id)
            refunded = lifecycle.apply_refund(
                booking,
                self.policy_repo.get(),
                req.reason,
                self.clock(),
                full_refund=req.full_refund,
            )
            updated = self.booking_repo.save(refunded)
        logger.info(f"Refunded {updated.refunded_amount} LKR on booking {booking_id}")
        return updated

    def get_refund_eligibility(self, booking_id: str) -> EligibilityResult:
        booking = self.get_by_id(booking_id)
        return lifecycle.evaluate_refund_eligibility(
            booking, self.policy_repo.get(), self.clock()
        )

    def delete(self, booking_id: str) -> None:
        with self.booking_repo.lock(booking_id):
            self.booking_repo.remove(booking_id)
        logger.info(f"Deleted booking {booking_id}")

    def get_refund_policy(self) -> RefundPolicy:
        return self.policy_repo.get()

    def update_refund_policy(self, req: RefundPolicyUpdate) -> RefundPolicy:
        return self.policy_repo.set(req.model_dump(exclude_none=True))

    def package_for(self, booking: Booking) -> Optional[Package]:
        return self.package_repo.get_by_id(booking.package_id)

    def _package(self, package_id: str) -> Package:
        package = self.package_repo.get_by_id(package_id)
        if package is None:
            raise NotFoundException("package", package_id)
        return package

    def _price(self, package: Package, guest_count: int) -> float:
        if guest_count > package.max_guests:
            raise ValueError(
                f"Package {package.package_id} takes at most {package.max_guests} guests"
            )
        return float(package.price_lkr) * guest_count

    def _repriced(self, booking: Booking, guest_count: int) -> dict:
        """Totals and pending payment amounts for a new guest count."""
        settled = [p for p in booking.payments if p.status != PaymentStatus.PENDING]
        if settled:
            raise IllegalTransition(
                f"Cannot change guest_count on booking {booking.booking_id} "
                f"after a payment has been {settled[0].status.value}"
            )

        total_lkr = self._price(self._package(booking.package_id), guest_count)
        old_total = booking.total_price_lkr
        payments = [
            replace(
                p,
                amount=p.amount * total_lkr / old_total if old_total else total_lkr,
            )
            for p in booking.payments
        ]
        return {
            "total_price_lkr": total_lkr,
            "total_price_usd": round(total_lkr * EXCHANGE_RATE_LKR_TO_USD),
            "payments": payments,
        }

    def _check_journey_date(self, journey_date: date, now: datetime) -> None:
        if journey_date < now.date():
            raise ValueError("journey_date cannot be in the past")

    def _patch_for(self, booking: Booking, req: BookingUpdate) -> dict:
        """Build a store patch, refusing schedule changes on closed bookings."""
        changes = req.model_dump(exclude_none=True)
        schedule_fields = {"journey_date", "guest_count"} & set(changes)
        if schedule_fields and not lifecycle.is_active(booking):
            raise IllegalTransition(
                f"Cannot change {', '.join(sorted(schedule_fields))} on a booking "
                f"with status: {booking.status.value}"
            )
        if "journey_date" in changes:
            self._check_journey_date(changes["journey_date"], self.clock())
            changes["journey_date"] = to_utc(changes["journey_date"])
        return changes
