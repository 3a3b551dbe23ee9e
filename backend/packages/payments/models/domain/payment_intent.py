"""
Domain models for payment intents.
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, field_validator

from packages.payments.models.domain.enums import PaymentIntentStatus
from packages.subscriptions.models.domain.enums import SubscriptionType
from packages.subscriptions.models.domain.subscription import as_utc


class PaymentIntent(BaseModel):
    """
    A user's intention to buy a plan, recorded before any money moves.

    Never grants access by itself; a Subscription is only written once the
    gateway confirms the linked transaction as paid.
    """

    id: str
    user_id: str
    plan_id: Optional[str] = None
    subscription_type: SubscriptionType
    amount: Decimal
    discount_amount: Decimal = Decimal("0.00")
    net_amount: Decimal
    currency: str = "SAR"
    promo_code: Optional[str] = None
    payment_method: str = "paylink"
    subscription_id: Optional[str] = None
    transaction_reference: Optional[str] = None
    status: PaymentIntentStatus
    expires_at: datetime
    completed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        now = now or datetime.now(timezone.utc)
        return as_utc(self.expires_at) < as_utc(now)


class PaymentIntentCreateModel(BaseModel):
    user_id: str
    plan_id: Optional[str] = None
    subscription_type: SubscriptionType
    amount: Decimal
    discount_amount: Decimal = Decimal("0.00")
    net_amount: Decimal
    currency: str
    promo_code: Optional[str] = None
    payment_method: str = "paylink"
    subscription_id: Optional[str] = None
    status: PaymentIntentStatus = PaymentIntentStatus.PENDING
    expires_at: datetime


class PaymentIntentUpdateModel(BaseModel):
    status: Optional[str] = None
    transaction_reference: Optional[str] = None
    completed_at: Optional[datetime] = None

    @field_validator("status", mode="before")
    @classmethod
    def validate_status(cls, v):
        if isinstance(v, PaymentIntentStatus):
            return v.value
        return v
