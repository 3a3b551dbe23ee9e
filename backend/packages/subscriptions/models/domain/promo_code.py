from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional
from pydantic import BaseModel

from packages.subscriptions.models.domain.enums import DiscountType
from packages.subscriptions.models.domain.subscription import as_utc

CENTS = Decimal("0.01")


class PromoCode(BaseModel):
    id: str
    code: str
    discount_type: DiscountType
    discount_value: Decimal
    max_uses: Optional[int] = None
    used_count: int = 0
    starts_at: Optional[datetime] = None
    expiry_date: Optional[datetime] = None
    active: bool = True

    class Config:
        from_attributes = True

    def unusable_reason(self, now: Optional[datetime] = None) -> Optional[str]:
        """Why the code cannot be applied right now, or None when it can."""
        now = now or datetime.now(timezone.utc)
        if not self.active:
            return "Promo code is not active"
        if self.starts_at is not None and as_utc(self.starts_at) > as_utc(now):
            return "Promo code is not yet valid"
        if self.expiry_date is not None and as_utc(self.expiry_date) < as_utc(now):
            return "Promo code has expired"
        if self.max_uses is not None and self.used_count >= self.max_uses:
            return "Promo code usage limit reached"
        return None

    def discount_for(self, amount: Decimal) -> Decimal:
        """Discount on ``amount``, never more than the amount itself."""
        if self.discount_type == DiscountType.PERCENTAGE:
            discount = amount * self.discount_value / Decimal(100)
        else:
            discount = self.discount_value
        discount = min(max(discount, Decimal(0)), amount)
        return discount.quantize(CENTS, rounding=ROUND_HALF_UP)


class PromoDiscount(BaseModel):
    """Outcome of applying a promo code to a gross amount."""

    code: Optional[str] = None
    gross_amount: Decimal
    discount_amount: Decimal = Decimal("0.00")
    net_amount: Decimal
