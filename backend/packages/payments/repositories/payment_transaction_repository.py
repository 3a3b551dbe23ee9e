"""
Repository for payment transactions.
"""

from typing import Iterable, List, Optional
from sqlalchemy import select

from common.repositories.base import BaseRepository
from packages.payments.models.database.payment_transaction import (
    PaymentTransactionEntity,
)
from packages.payments.models.domain.payment_transaction import PaymentTransaction
from common.core.otel_axiom_exporter import trace_span, get_logger

logger = get_logger(__name__)

# Columns tried for an opaque identifier; first match wins
IDENTIFIER_LOOKUP_COLUMNS = (
    PaymentTransactionEntity.transaction_id,
    PaymentTransactionEntity.id,
    PaymentTransactionEntity.paylink_invoice_id,
    PaymentTransactionEntity.paylink_reference,
    PaymentTransactionEntity.transaction_no,
    PaymentTransactionEntity.order_number,
)


class PaymentTransactionRepository(
    BaseRepository[PaymentTransactionEntity, PaymentTransaction]
):
    """Repository for payment attempts and their redundant identifiers."""

    def __init__(self):
        super().__init__(PaymentTransactionEntity, PaymentTransaction)

    async def _first_by(self, column, value: str) -> Optional[PaymentTransaction]:
        async with self._get_session() as session:
            result = await session.execute(
                select(PaymentTransactionEntity)
                .where(column == value)
                .order_by(PaymentTransactionEntity.created_at.desc())
                .limit(1)
                .execution_options(populate_existing=True)
            )
            entity = result.scalar_one_or_none()
            return self._entity_to_domain(entity) if entity else None

    @trace_span
    async def get_by_transaction_id(
        self, transaction_id: str
    ) -> Optional[PaymentTransaction]:
        """Get by our own reference (``SUB-...``)."""
        return await self._first_by(
            PaymentTransactionEntity.transaction_id, transaction_id
        )

    @trace_span
    async def find_by_identifier(self, identifier: str) -> Optional[PaymentTransaction]:
        """Resolve any single identifier the gateway or client may hold."""
        identifier = identifier.strip()
        if not identifier:
            return None
        for column in IDENTIFIER_LOOKUP_COLUMNS:
            transaction = await self._first_by(column, identifier)
            if transaction:
                logger.debug(
                    f"Identifier {identifier} matched payment_transactions.{column.key}"
                )
                return transaction
        return None

    @trace_span
    async def find_by_identifiers(
        self, identifiers: Iterable[str]
    ) -> Optional[PaymentTransaction]:
        """Try each candidate in order; the first candidate that resolves wins."""
        for identifier in identifiers:
            if not identifier:
                continue
            transaction = await self.find_by_identifier(identifier)
            if transaction:
                return transaction
        return None

    @trace_span
    async def get_latest_for_intent(
        self, payment_intent_id: str
    ) -> Optional[PaymentTransaction]:
        return await self._first_by(
            PaymentTransactionEntity.payment_intent_id, payment_intent_id
        )

    @trace_span
    async def get_latest_for_subscription(
        self, subscription_id: str
    ) -> Optional[PaymentTransaction]:
        return await self._first_by(
            PaymentTransactionEntity.subscription_id, subscription_id
        )

    @trace_span
    async def get_by_user(
        self, user_id: str, limit: int = 50, offset: int = 0
    ) -> List[PaymentTransaction]:
        """Payment history of a user, newest first."""
        async with self._get_session(readonly=True) as session:
            result = await session.execute(
                select(PaymentTransactionEntity)
                .where(PaymentTransactionEntity.user_id == user_id)
                .order_by(
                    PaymentTransactionEntity.created_at.desc(),
                    PaymentTransactionEntity.id.desc(),
                )
                .offset(offset)
                .limit(limit)
            )
            return self._entities_to_domain(result.scalars().all())
