"""
API schemas for subscription operations.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, List, Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from packages.subscriptions.models.domain.enums import SubscriptionType
from packages.subscriptions.models.domain.plan import SubscriptionPlan
from packages.subscriptions.models.domain.subscription import Subscription


# ============================================================================
# Plan Schemas
# ============================================================================


class PlanResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    name: str
    description: Optional[str] = None
    price_weekly: Optional[float] = None
    price_monthly: Optional[float] = None
    price_yearly: Optional[float] = None
    features: Optional[Any] = None

    @classmethod
    def from_domain(cls, plan: SubscriptionPlan) -> "PlanResponse":
        def price(value: Optional[Decimal]) -> Optional[float]:
            return float(value) if value is not None else None

        return cls(
            id=plan.id,
            name=plan.name,
            description=plan.description,
            price_weekly=price(plan.price_weekly),
            price_monthly=price(plan.price_monthly),
            price_yearly=price(plan.price_yearly),
            features=plan.features,
        )


# ============================================================================
# Promo Code Schemas
# ============================================================================


class PromoCodeValidationRequest(BaseModel):
    """Preview a promo code against a plan price or an explicit amount."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    code: str = Field(..., min_length=1)
    plan_id: Optional[str] = None
    subscription_type: SubscriptionType = SubscriptionType.MONTHLY
    amount: Optional[Decimal] = Field(default=None, gt=0)


class PromoCodeValidationResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    valid: bool = True
    code: str
    amount: float
    discount: float
    net_amount: float


# ============================================================================
# Subscription Schemas
# ============================================================================


class SubscriptionResponse(BaseModel):
    """A subscription as the dashboard shows it, with the expiry override applied."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    plan_id: Optional[str] = None
    subscription_type: SubscriptionType
    status: str
    effective_status: str
    payment_confirmed: bool
    has_access: bool
    amount: float
    started_date: Optional[datetime] = None
    expired_date: Optional[datetime] = None
    remaining_days: int
    promo_code: Optional[str] = None

    @classmethod
    def from_domain(
        cls, subscription: Subscription, now: Optional[datetime] = None
    ) -> "SubscriptionResponse":
        return cls(
            id=subscription.id,
            plan_id=subscription.plan_id,
            subscription_type=subscription.subscription_type,
            status=subscription.status.value,
            effective_status=subscription.effective_status(now).value,
            payment_confirmed=subscription.payment_confirmed,
            has_access=subscription.has_access(now),
            amount=float(subscription.amount),
            started_date=subscription.started_date,
            expired_date=subscription.expired_date,
            remaining_days=subscription.remaining_days(now),
            promo_code=subscription.promo_code,
        )


class SubscriptionListResponse(BaseModel):
    subscriptions: List[SubscriptionResponse]
    active_subscription: Optional[SubscriptionResponse] = Field(
        default=None, serialization_alias="activeSubscription"
    )
