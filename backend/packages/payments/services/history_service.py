"""
Service for the payment history read path.
"""

from typing import List

from common.db.context import readonly
from common.core.otel_axiom_exporter import trace_span, get_logger
from packages.payments.models.domain.payment_transaction import PaymentTransaction
from packages.payments.repositories.payment_transaction_repository import (
    PaymentTransactionRepository,
)

logger = get_logger(__name__)

MAX_PAGE_SIZE = 100


class PaymentHistoryService:
    """Lists a user's payment attempts; never calls the gateway."""

    def __init__(self):
        self.transaction_repo = PaymentTransactionRepository()

    @trace_span
    @readonly
    async def list_for_user(
        self, user_id: str, limit: int = 50, offset: int = 0
    ) -> List[PaymentTransaction]:
        limit = min(max(limit, 1), MAX_PAGE_SIZE)
        transactions = await self.transaction_repo.get_by_user(
            user_id, limit=limit, offset=max(offset, 0)
        )
        logger.info(
            f"Loaded {len(transactions)} payment transactions for user {user_id}",
            extra={"user_id": user_id},
        )
        return transactions
