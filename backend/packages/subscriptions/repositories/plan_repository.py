from typing import List
from sqlalchemy import select

from common.repositories.base import BaseRepository
from packages.subscriptions.models.database.plan import SubscriptionPlanEntity
from packages.subscriptions.models.domain.plan import SubscriptionPlan
from common.core.otel_axiom_exporter import trace_span


class PlanRepository(BaseRepository[SubscriptionPlanEntity, SubscriptionPlan]):
    def __init__(self):
        super().__init__(SubscriptionPlanEntity, SubscriptionPlan)

    @trace_span
    async def list_active(self) -> List[SubscriptionPlan]:
        async with self._get_session() as session:
            result = await session.execute(
                select(SubscriptionPlanEntity)
                .where(SubscriptionPlanEntity.is_active == True)  # noqa
                .order_by(SubscriptionPlanEntity.price_monthly)
            )
            return self._entities_to_domain(result.scalars().all())
