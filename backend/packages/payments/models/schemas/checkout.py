"""
API schemas for checkout.

Wire format is camelCase; snake_case is accepted on input as well.
"""

from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_serializer
from pydantic.alias_generators import to_camel

from packages.subscriptions.models.domain.enums import SubscriptionType


class CustomerInfo(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None


class CheckoutRequest(BaseModel):
    """Request to start a hosted-page payment for a plan."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    plan_id: Optional[str] = None
    subscription_type: SubscriptionType = SubscriptionType.MONTHLY
    amount: Optional[Decimal] = Field(
        default=None, description="Explicit amount; overrides the plan price"
    )
    promo_code: Optional[str] = None
    subscription_id: Optional[str] = Field(
        default=None,
        description="Existing pending subscription to activate on payment (legacy clients)",
    )
    customer: Optional[CustomerInfo] = None
    callback_url: Optional[str] = None


class CheckoutResult(BaseModel):
    """Everything the client needs to send the user to the payment page."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    success: bool = True
    payment_url: str
    transaction_id: str
    invoice_id: str
    payment_intent_id: str
    amount: Decimal
    discount: Decimal = Decimal("0.00")
    net_amount: Decimal
    currency: str

    @field_serializer("amount", "discount", "net_amount")
    def serialize_money(self, value: Decimal) -> float:
        return float(value)
