"""Database models for payments."""

from packages.payments.models.database.payment_intent import PaymentIntentEntity
from packages.payments.models.database.payment_transaction import (
    PaymentTransactionEntity,
)

__all__ = [
    "PaymentIntentEntity",
    "PaymentTransactionEntity",
]
