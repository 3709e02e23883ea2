from typing import Optional

from pydantic import BaseModel, ConfigDict


class RefundPolicyUpdate(BaseModel):
    """Partial policy update; ordering rules are checked against the merged policy."""

    model_config = ConfigDict(extra="forbid")

    full_refund_before_days: Optional[int] = None
    partial_refund_before_days: Optional[int] = None
    no_refund_before_days: Optional[int] = None
    partial_refund_percentage: Optional[int] = None


class RefundPolicyResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    full_refund_before_days: int
    partial_refund_before_days: int
    no_refund_before_days: int
    partial_refund_percentage: int
