"""
Repository for subscription management.
"""

from typing import List, Optional
from sqlalchemy import select

from common.repositories.base import BaseRepository
from packages.subscriptions.models.database.subscription import SubscriptionEntity
from packages.subscriptions.models.domain.subscription import Subscription
from common.core.otel_axiom_exporter import trace_span


class SubscriptionRepository(BaseRepository[SubscriptionEntity, Subscription]):
    """Repository for managing user subscriptions."""

    def __init__(self):
        super().__init__(SubscriptionEntity, Subscription)

    async def _get_one_by(self, column, value: str) -> Optional[Subscription]:
        async with self._get_session() as session:
            result = await session.execute(
                select(SubscriptionEntity)
                .where(column == value)
                .execution_options(populate_existing=True)
            )
            db_subscription = result.scalar_one_or_none()
            return self._entity_to_domain(db_subscription) if db_subscription else None

    @trace_span
    async def get_by_transaction_id(self, transaction_id: str) -> Optional[Subscription]:
        """Get the subscription activated by a payment transaction."""
        return await self._get_one_by(SubscriptionEntity.transaction_id, transaction_id)

    @trace_span
    async def get_by_payment_intent_id(
        self, payment_intent_id: str
    ) -> Optional[Subscription]:
        return await self._get_one_by(
            SubscriptionEntity.payment_intent_id, payment_intent_id
        )

    @trace_span
    async def list_for_user(self, user_id: str) -> List[Subscription]:
        """All subscriptions of a user, newest first."""
        async with self._get_session() as session:
            result = await session.execute(
                select(SubscriptionEntity)
                .where(SubscriptionEntity.user_id == user_id)
                .order_by(SubscriptionEntity.created_at.desc())
            )
            return self._entities_to_domain(result.scalars().all())
