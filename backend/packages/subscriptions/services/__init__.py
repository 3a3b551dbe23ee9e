"""Subscription services."""

from packages.subscriptions.services.subscription_service import SubscriptionService
from packages.subscriptions.services.promo_code_service import PromoCodeService

__all__ = [
    "SubscriptionService",
    "PromoCodeService",
]
