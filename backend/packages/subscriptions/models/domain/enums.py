"""
Subscription enums - strongly typed enumerations for subscription states.
"""

import calendar
from datetime import datetime, timedelta
from enum import Enum


class SubscriptionStatus(str, Enum):
    """
    Subscription status lifecycle.

    Flow: pending -> active | payment_failed; active -> expired | cancelled
    ``expired`` is normally computed at read time from ``expired_date``.
    """

    PENDING = "pending"  # Legacy rows created before payment was confirmed
    ACTIVE = "active"  # Paid and confirmed
    PAYMENT_FAILED = "payment_failed"  # Gateway confirmed the payment failed
    EXPIRED = "expired"
    CANCELLED = "cancelled"

    def has_access(self) -> bool:
        """Check if this status allows product access."""
        return self == SubscriptionStatus.ACTIVE

    def is_terminal(self) -> bool:
        return self in (
            SubscriptionStatus.PAYMENT_FAILED,
            SubscriptionStatus.EXPIRED,
            SubscriptionStatus.CANCELLED,
        )


def _add_months(start: datetime, months: int) -> datetime:
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    # Jan 31 + 1 month lands on the last day of February
    day = min(start.day, calendar.monthrange(year, month)[1])
    return start.replace(year=year, month=month, day=day)


class SubscriptionType(str, Enum):
    """Billing interval purchased with a plan."""

    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"

    def period_end(self, start: datetime) -> datetime:
        """Compute the expiry date of a period starting at ``start``."""
        if self == SubscriptionType.WEEKLY:
            return start + timedelta(days=7)
        if self == SubscriptionType.MONTHLY:
            return _add_months(start, 1)
        return _add_months(start, 12)


class DiscountType(str, Enum):
    """How a promo code's ``discount_value`` is applied."""

    PERCENTAGE = "percentage"
    FIXED = "fixed"


class SubscriptionAction(str, Enum):
    """Audit actions recorded in subscription_history."""

    CREATED = "created"
    ACTIVATED = "activated"
    PAYMENT_FAILED = "payment_failed"
