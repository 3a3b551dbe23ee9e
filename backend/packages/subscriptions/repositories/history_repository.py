from typing import List
from sqlalchemy import select

from common.repositories.base import BaseRepository
from packages.subscriptions.models.database.history import SubscriptionHistoryEntity
from packages.subscriptions.models.domain.history import SubscriptionHistory
from common.core.otel_axiom_exporter import trace_span


class SubscriptionHistoryRepository(
    BaseRepository[SubscriptionHistoryEntity, SubscriptionHistory]
):
    def __init__(self):
        super().__init__(SubscriptionHistoryEntity, SubscriptionHistory)

    @trace_span
    async def list_for_subscription(
        self, subscription_id: str
    ) -> List[SubscriptionHistory]:
        async with self._get_session() as session:
            result = await session.execute(
                select(SubscriptionHistoryEntity)
                .where(SubscriptionHistoryEntity.subscription_id == subscription_id)
                .order_by(SubscriptionHistoryEntity.created_at)
            )
            return self._entities_to_domain(result.scalars().all())
