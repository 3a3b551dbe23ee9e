"""
Domain models for subscriptions.
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, field_validator

from packages.subscriptions.models.domain.enums import (
    SubscriptionStatus,
    SubscriptionType,
)


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes (as returned by some drivers) as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class Subscription(BaseModel):
    """
    User subscription domain model.

    Grants product access only while ``active`` with ``payment_confirmed``
    and an unexpired date range.
    """

    id: str
    user_id: str
    plan_id: Optional[str] = None
    subscription_type: SubscriptionType
    amount: Decimal = Decimal("0.00")
    status: SubscriptionStatus
    payment_confirmed: bool = False

    started_date: Optional[datetime] = None
    expired_date: Optional[datetime] = None

    # Links back to the payment that created/activated it
    transaction_id: Optional[str] = None
    payment_intent_id: Optional[str] = None
    promo_code: Optional[str] = None
    discount_amount: Decimal = Decimal("0.00")

    customer_name: Optional[str] = None
    customer_email: Optional[str] = None
    customer_phone: Optional[str] = None

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

    def effective_status(self, now: Optional[datetime] = None) -> SubscriptionStatus:
        """
        Status as presented to callers.

        A passed ``expired_date`` wins over whatever status is stored; the stored
        value is left untouched until an explicit write.
        """
        now = now or datetime.now(timezone.utc)
        if self.expired_date is not None and as_utc(self.expired_date) < as_utc(now):
            return SubscriptionStatus.EXPIRED
        return self.status

    def has_access(self, now: Optional[datetime] = None) -> bool:
        return self.payment_confirmed and self.effective_status(now).has_access()

    def remaining_days(self, now: Optional[datetime] = None) -> int:
        if self.effective_status(now) != SubscriptionStatus.ACTIVE:
            return 0
        if self.expired_date is None:
            return 0
        now = now or datetime.now(timezone.utc)
        delta = as_utc(self.expired_date) - as_utc(now)
        return max(0, delta.days)


class SubscriptionCreateModel(BaseModel):
    """Model for creating a new subscription."""

    user_id: str
    plan_id: Optional[str] = None
    subscription_type: SubscriptionType
    amount: Decimal
    status: SubscriptionStatus = SubscriptionStatus.PENDING
    payment_confirmed: bool = False
    started_date: Optional[datetime] = None
    expired_date: Optional[datetime] = None
    transaction_id: Optional[str] = None
    payment_intent_id: Optional[str] = None
    promo_code: Optional[str] = None
    discount_amount: Decimal = Decimal("0.00")
    customer_name: Optional[str] = None
    customer_email: Optional[str] = None
    customer_phone: Optional[str] = None


class SubscriptionUpdateModel(BaseModel):
    """Model for updating a subscription."""

    status: Optional[str] = None
    payment_confirmed: Optional[bool] = None
    started_date: Optional[datetime] = None
    expired_date: Optional[datetime] = None
    transaction_id: Optional[str] = None
    payment_intent_id: Optional[str] = None

    @field_validator("status", mode="before")
    @classmethod
    def validate_status(cls, v):
        if isinstance(v, SubscriptionStatus):
            return v.value
        return v
