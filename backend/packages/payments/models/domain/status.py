"""
Domain models for the status polling read path.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel

from packages.payments.models.domain.enums import PollStatus
from packages.payments.models.domain.payment_transaction import PaymentTransaction
from packages.subscriptions.models.domain.subscription import Subscription


class StatusQuery(BaseModel):
    """Any subset of identifiers a polling client may hold."""

    transaction_id: Optional[str] = None
    payment_intent_id: Optional[str] = None
    invoice_id: Optional[str] = None
    subscription_id: Optional[str] = None
    order_number: Optional[str] = None
    transaction_no: Optional[str] = None
    user_id: Optional[str] = None

    @property
    def has_gateway_identifier(self) -> bool:
        return bool(self.invoice_id or self.transaction_no)

    @property
    def local_identifiers(self) -> list:
        values = [
            self.transaction_id,
            self.order_number,
            self.transaction_no,
            self.invoice_id,
        ]
        unique = []
        for value in values:
            if value and value not in unique:
                unique.append(value)
        return unique

    @property
    def is_empty(self) -> bool:
        return not (
            self.local_identifiers or self.payment_intent_id or self.subscription_id
        )


class StatusResult(BaseModel):
    status: PollStatus
    message: str
    transaction: Optional[PaymentTransaction] = None
    subscription: Optional[Subscription] = None
    gateway_status: Optional[str] = None
    checked_at: datetime
