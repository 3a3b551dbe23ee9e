"""Domain models for subscriptions."""

from packages.subscriptions.models.domain.enums import (
    SubscriptionStatus,
    SubscriptionType,
    DiscountType,
    SubscriptionAction,
)
from packages.subscriptions.models.domain.subscription import (
    Subscription,
    SubscriptionCreateModel,
    SubscriptionUpdateModel,
)
from packages.subscriptions.models.domain.plan import SubscriptionPlan
from packages.subscriptions.models.domain.promo_code import PromoCode, PromoDiscount

__all__ = [
    # Enums
    "SubscriptionStatus",
    "SubscriptionType",
    "DiscountType",
    "SubscriptionAction",
    # Subscription
    "Subscription",
    "SubscriptionCreateModel",
    "SubscriptionUpdateModel",
    # Catalog
    "SubscriptionPlan",
    "PromoCode",
    "PromoDiscount",
]
