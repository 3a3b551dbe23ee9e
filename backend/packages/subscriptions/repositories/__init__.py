"""Subscription repositories."""

from packages.subscriptions.repositories.subscription_repository import (
    SubscriptionRepository,
)
from packages.subscriptions.repositories.plan_repository import PlanRepository
from packages.subscriptions.repositories.promo_code_repository import (
    PromoCodeRepository,
)
from packages.subscriptions.repositories.history_repository import (
    SubscriptionHistoryRepository,
)

__all__ = [
    "SubscriptionRepository",
    "PlanRepository",
    "PromoCodeRepository",
    "SubscriptionHistoryRepository",
]
