from enum import Enum
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional


class BookingStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    REFUNDED = "refunded"
    FAILED = "failed"


class Currency(str, Enum):
    LKR = "LKR"
    USD = "USD"


class PaymentMethod(str, Enum):
    CARD = "card"
    BANK_TRANSFER = "bank_transfer"
    CASH = "cash"
    OTHER = "other"


@dataclass
class Payment:
    payment_id: str
    amount: float
    currency: Currency = Currency.LKR
    method: PaymentMethod = PaymentMethod.CARD
    status: PaymentStatus = PaymentStatus.PENDING
    transaction_id: Optional[str] = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass
class ContactInfo:
    name: str
    email: str
    phone: str


@dataclass
class Booking:
    booking_id: str
    access_token: str
    journey_id: str
    package_id: str
    journey_date: datetime
    guest_count: int
    contact_info: ContactInfo
    status: BookingStatus = BookingStatus.PENDING

    total_price_lkr: float = 0.0
    total_price_usd: Optional[float] = None

    special_requests: Optional[str] = None
    payments: List[Payment] = field(default_factory=list)

    refunded_amount: Optional[float] = None
    refund_date: Optional[datetime] = None
    refund_reason: Optional[str] = None

    user_id: Optional[str] = None

    booking_date: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
