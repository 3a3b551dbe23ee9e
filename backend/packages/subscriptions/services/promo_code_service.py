"""
Service for promo code discounts.
"""

from decimal import Decimal
from typing import Optional

from common.core.exceptions import ValidationError
from common.core.otel_axiom_exporter import trace_span, get_logger
from packages.subscriptions.models.domain.promo_code import PromoDiscount, CENTS
from packages.subscriptions.repositories.promo_code_repository import (
    PromoCodeRepository,
)

logger = get_logger(__name__)


class PromoCodeService:
    """Computes discounts at checkout and consumes codes on confirmed payment."""

    def __init__(self):
        self.promo_code_repo = PromoCodeRepository()

    @trace_span
    async def calculate_discount(
        self, gross_amount: Decimal, code: Optional[str]
    ) -> PromoDiscount:
        """
        Apply ``code`` to ``gross_amount`` without consuming it.

        Raises:
            ValidationError: unknown code or code that cannot be used right now
        """
        gross_amount = gross_amount.quantize(CENTS)
        if not code or not code.strip():
            return PromoDiscount(gross_amount=gross_amount, net_amount=gross_amount)

        promo = await self.promo_code_repo.get_by_code(code)
        if not promo:
            raise ValidationError(f"Invalid promo code: {code}")

        reason = promo.unusable_reason()
        if reason:
            raise ValidationError(reason)

        discount = promo.discount_for(gross_amount)
        logger.info(
            f"Promo code {promo.code} applied: {discount} off {gross_amount}",
            extra={"promo_code": promo.code, "discount": str(discount)},
        )
        return PromoDiscount(
            code=promo.code,
            gross_amount=gross_amount,
            discount_amount=discount,
            net_amount=gross_amount - discount,
        )

    @trace_span
    async def redeem(self, code: str) -> bool:
        """Consume one use of ``code``. Callers must invoke this at most once per payment."""
        redeemed = await self.promo_code_repo.increment_usage(code)
        if not redeemed:
            # Payment is already confirmed; an exhausted code must not undo it
            logger.warning(
                f"Promo code {code} could not be redeemed (missing or exhausted)",
                extra={"promo_code": code},
            )
        return redeemed
