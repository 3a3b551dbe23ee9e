"""Payment repositories."""

from packages.payments.repositories.payment_intent_repository import (
    PaymentIntentRepository,
)
from packages.payments.repositories.payment_transaction_repository import (
    PaymentTransactionRepository,
)

__all__ = [
    "PaymentIntentRepository",
    "PaymentTransactionRepository",
]
