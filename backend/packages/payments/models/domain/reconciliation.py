"""
Domain models passed between the callback handlers, reconciliation and activation.
"""

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field

from packages.payments.models.domain.enums import (
    CallbackSource,
    RedirectStatus,
    TransactionStatus,
)
from packages.payments.models.domain.payment_transaction import PaymentTransaction
from packages.subscriptions.models.domain.subscription import Subscription


class CallbackContext(BaseModel):
    """A normalized inbound callback, whatever shape it arrived in."""

    source: CallbackSource
    payload: Dict[str, Any] = Field(default_factory=dict)
    url: str = ""
    authentication_failed: bool = False
    gateway_code: Optional[str] = None


class ActivationResult(BaseModel):
    """Outcome of one call to the complete/fail routine."""

    transaction: PaymentTransaction
    subscription: Optional[Subscription] = None
    changed: bool = False  # False when the call was an idempotent no-op
    conflict: bool = False  # target already held the opposite terminal status


class ReconciliationResult(BaseModel):
    status: TransactionStatus = TransactionStatus.PENDING
    transaction: Optional[PaymentTransaction] = None
    subscription: Optional[Subscription] = None
    identifiers: List[str] = Field(default_factory=list)
    gateway_code: Optional[str] = None
    gateway_status: Optional[str] = None
    ambiguous: bool = False

    @property
    def redirect_status(self) -> RedirectStatus:
        return RedirectStatus.from_transaction_status(self.status)
