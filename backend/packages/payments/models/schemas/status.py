"""
API schemas for the payment status polling envelope.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from packages.payments.models.domain.enums import PollStatus
from packages.payments.models.domain.payment_transaction import PaymentTransaction
from packages.payments.models.domain.status import StatusQuery, StatusResult
from packages.payments.polling import PollingPolicy
from packages.subscriptions.models.domain.subscription import Subscription


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PollingHint(_CamelModel):
    """Advisory polling schedule; clients may ignore it."""

    should_continue: bool
    next_poll_seconds: Optional[float] = None
    attempts_remaining: int


class TransactionSummary(_CamelModel):
    transaction_id: str
    status: str
    amount: float
    currency: str
    order_number: Optional[str] = None
    invoice_id: Optional[str] = None
    transaction_no: Optional[str] = None
    gateway_code: Optional[str] = None
    created_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    @classmethod
    def from_domain(cls, txn: PaymentTransaction) -> "TransactionSummary":
        return cls(
            transaction_id=txn.transaction_id,
            status=txn.status.value,
            amount=float(txn.amount),
            currency=txn.currency,
            order_number=txn.order_number,
            invoice_id=txn.paylink_invoice_id,
            transaction_no=txn.transaction_no,
            gateway_code=txn.gateway_code,
            created_at=txn.created_at,
            completed_at=txn.completed_at,
        )


class SubscriptionSummary(_CamelModel):
    id: str
    status: str
    effective_status: str
    subscription_type: str
    payment_confirmed: bool
    amount: float
    started_date: Optional[datetime] = None
    expired_date: Optional[datetime] = None
    remaining_days: int = 0

    @classmethod
    def from_domain(
        cls, subscription: Subscription, now: Optional[datetime] = None
    ) -> "SubscriptionSummary":
        return cls(
            id=subscription.id,
            status=subscription.status.value,
            effective_status=subscription.effective_status(now).value,
            subscription_type=subscription.subscription_type.value,
            payment_confirmed=subscription.payment_confirmed,
            amount=float(subscription.amount or Decimal("0")),
            started_date=subscription.started_date,
            expired_date=subscription.expired_date,
            remaining_days=subscription.remaining_days(now),
        )


class StatusEnvelope(_CamelModel):
    status: PollStatus
    message: str
    transaction_id: Optional[str] = None
    payment_intent_id: Optional[str] = None
    invoice_id: Optional[str] = None
    subscription_id: Optional[str] = None
    order_number: Optional[str] = None
    transaction_no: Optional[str] = None
    subscription_type: Optional[str] = None
    gateway_status: Optional[str] = None
    last_checked: datetime
    transaction: Optional[TransactionSummary] = None
    subscription: Optional[SubscriptionSummary] = None
    polling: PollingHint

    @classmethod
    def build(
        cls,
        result: StatusResult,
        query: StatusQuery,
        policy: PollingPolicy,
        attempt: int = 0,
    ) -> "StatusEnvelope":
        """Combine a resolved status with the identifiers the caller sent."""
        txn = result.transaction
        subscription = result.subscription
        should_continue = not result.status.is_settled() and policy.should_continue(
            attempt
        )
        return cls(
            status=result.status,
            message=result.message,
            transaction_id=txn.transaction_id if txn else query.transaction_id,
            payment_intent_id=(txn.payment_intent_id if txn else None)
            or query.payment_intent_id,
            invoice_id=(txn.paylink_invoice_id if txn else None) or query.invoice_id,
            subscription_id=(subscription.id if subscription else None)
            or query.subscription_id,
            order_number=(txn.order_number if txn else None) or query.order_number,
            transaction_no=(txn.transaction_no if txn else None)
            or query.transaction_no,
            subscription_type=subscription.subscription_type.value
            if subscription
            else None,
            gateway_status=result.gateway_status,
            last_checked=result.checked_at,
            transaction=TransactionSummary.from_domain(txn) if txn else None,
            subscription=SubscriptionSummary.from_domain(subscription, result.checked_at)
            if subscription
            else None,
            polling=PollingHint(
                should_continue=should_continue,
                next_poll_seconds=policy.delay_for(attempt) if should_continue else None,
                attempts_remaining=policy.attempts_remaining(attempt),
            ),
        )
