from datetime import datetime
from decimal import Decimal
from typing import Any, Optional
from pydantic import BaseModel

from packages.subscriptions.models.domain.enums import SubscriptionType


class SubscriptionPlan(BaseModel):
    """Read-only pricing/feature catalog entry."""

    id: str
    name: str
    description: Optional[str] = None
    price_weekly: Optional[Decimal] = None
    price_monthly: Optional[Decimal] = None
    price_yearly: Optional[Decimal] = None
    features: Optional[Any] = None
    is_active: bool = True
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

    def price_for(self, subscription_type: SubscriptionType) -> Optional[Decimal]:
        """Price of one period of ``subscription_type``, if the plan offers it."""
        prices = {
            SubscriptionType.WEEKLY: self.price_weekly,
            SubscriptionType.MONTHLY: self.price_monthly,
            SubscriptionType.YEARLY: self.price_yearly,
        }
        return prices[subscription_type]
