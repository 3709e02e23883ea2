from dataclasses import dataclass
from enum import Enum
from typing import Optional

from common.utils.constants import (
    DEFAULT_FULL_REFUND_BEFORE_DAYS,
    DEFAULT_NO_REFUND_BEFORE_DAYS,
    DEFAULT_PARTIAL_REFUND_BEFORE_DAYS,
    DEFAULT_PARTIAL_REFUND_PERCENTAGE,
)


@dataclass
class RefundPolicy:
    full_refund_before_days: int = DEFAULT_FULL_REFUND_BEFORE_DAYS
    partial_refund_before_days: int = DEFAULT_PARTIAL_REFUND_BEFORE_DAYS
    no_refund_before_days: int = DEFAULT_NO_REFUND_BEFORE_DAYS
    partial_refund_percentage: int = DEFAULT_PARTIAL_REFUND_PERCENTAGE

    def violations(self) -> list[str]:
        errors = []
        if self.full_refund_before_days < 1:
            errors.append("full_refund_before_days must be at least 1")
        if self.partial_refund_before_days < 1:
            errors.append("partial_refund_before_days must be at least 1")
        if self.full_refund_before_days <= self.partial_refund_before_days:
            errors.append(
                "full_refund_before_days must be greater than partial_refund_before_days"
            )
        if self.partial_refund_before_days <= self.no_refund_before_days:
            errors.append(
                "partial_refund_before_days must be greater than no_refund_before_days"
            )
        if self.no_refund_before_days < 0:
            errors.append("no_refund_before_days must be 0 or greater")
        if not 0 < self.partial_refund_percentage < 100:
            errors.append("partial_refund_percentage must be between 1 and 99")
        return errors


class EligibilityReason(str, Enum):
    WRONG_STATUS = "wrong_status"
    NO_REFUND_WINDOW = "no_refund_window"
    CANCELLATION_LOCKED = "cancellation_locked"


@dataclass
class EligibilityResult:
    eligible: bool
    cancellable: bool
    amount: float = 0.0
    full_refund: Optional[bool] = None
    reason: Optional[EligibilityReason] = None
    days_remaining: Optional[int] = None
    message: str = ""
