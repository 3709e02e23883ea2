from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from common.models.bookings import BookingStatus, Currency, PaymentMethod, PaymentStatus
from common.models.refund_policy import EligibilityReason


class ContactInfoRequest(BaseModel):
    name: str = Field(min_length=1)
    email: EmailStr
    phone: str = Field(min_length=1)


class ContactInfoPatch(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, min_length=1)


class BookingRequest(BaseModel):
    journey_id: str = Field(min_length=1)
    package_id: str = Field(min_length=1)
    journey_date: date
    guest_count: int = Field(ge=1)
    contact_info: ContactInfoRequest
    special_requests: Optional[str] = None
    user_id: Optional[str] = None


class PublicBookingUpdate(BaseModel):
    """Fields a token holder may change on their own booking."""

    special_requests: Optional[str] = None
    contact_info: Optional[ContactInfoPatch] = None


class BookingUpdate(PublicBookingUpdate):
    journey_date: Optional[date] = None
    guest_count: Optional[int] = Field(None, ge=1)


class CancelBookingRequest(BaseModel):
    reason: str = Field(min_length=1)


class RefundRequest(BaseModel):
    reason: str = Field(min_length=1)
    # None lets the refund policy decide
    full_refund: Optional[bool] = None


class PublicRefundRequest(RefundRequest):
    """Same body as the admin request; the booking link never honours ``full_refund``."""


class ChangeStatusRequest(BaseModel):
    status: BookingStatus


class PaymentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    payment_id: str
    amount: float
    currency: Currency
    method: PaymentMethod
    status: PaymentStatus
    transaction_id: Optional[str] = None
    timestamp: datetime


class ContactInfoResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    name: str
    email: str
    phone: str


class PackageSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    package_id: str
    name: str
    price_lkr: float


class BookingResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    booking_id: str
    access_token: str
    journey_id: str
    package_id: str
    booking_date: datetime
    journey_date: datetime
    status: BookingStatus
    guest_count: int
    total_price_lkr: float
    total_price_usd: Optional[float] = None
    special_requests: Optional[str] = None
    payments: List[PaymentResponse]
    refunded_amount: Optional[float] = None
    refund_date: Optional[datetime] = None
    refund_reason: Optional[str] = None
    contact_info: ContactInfoResponse
    user_id: Optional[str] = None
    # looked up from the catalog when the response is built; None if the package is gone
    package: Optional[PackageSummary] = None


class PublicBookingResponse(BookingResponse):
    """Token holders never see the account link."""

    model_config = ConfigDict(from_attributes=True)

    user_id: Optional[str] = Field(None, exclude=True)


class EligibilityResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    eligible: bool
    full_refund: Optional[bool] = None
    amount: float
    reason: Optional[EligibilityReason] = None
    cancellable: bool
    days_remaining: Optional[int] = None
    message: str


class AccessResultResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    is_valid: bool
    applied: bool = False
    reason: Optional[str] = None
    booking: Optional[PublicBookingResponse] = None
    eligibility: Optional[EligibilityResponse] = None
