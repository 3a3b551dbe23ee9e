"""Database models for subscriptions."""

from packages.subscriptions.models.database.subscription import SubscriptionEntity
from packages.subscriptions.models.database.plan import SubscriptionPlanEntity
from packages.subscriptions.models.database.promo_code import PromoCodeEntity
from packages.subscriptions.models.database.history import SubscriptionHistoryEntity

__all__ = [
    "SubscriptionEntity",
    "SubscriptionPlanEntity",
    "PromoCodeEntity",
    "SubscriptionHistoryEntity",
]
