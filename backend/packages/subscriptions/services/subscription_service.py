"""
Service for subscription read paths and the plan catalog.
"""

from typing import List, Optional

from common.db.context import readonly
from common.core.otel_axiom_exporter import trace_span, get_logger
from packages.subscriptions.models.domain.plan import SubscriptionPlan
from packages.subscriptions.models.domain.subscription import Subscription
from packages.subscriptions.repositories.plan_repository import PlanRepository
from packages.subscriptions.repositories.subscription_repository import (
    SubscriptionRepository,
)

logger = get_logger(__name__)


class SubscriptionService:
    """Service for reading subscriptions and plans."""

    def __init__(self):
        self.subscription_repo = SubscriptionRepository()
        self.plan_repo = PlanRepository()

    @trace_span
    async def get(self, subscription_id: str) -> Optional[Subscription]:
        return await self.subscription_repo.get(subscription_id)

    @trace_span
    @readonly
    async def list_for_user(self, user_id: str) -> List[Subscription]:
        subscriptions = await self.subscription_repo.list_for_user(user_id)
        logger.info(
            f"Loaded {len(subscriptions)} subscriptions for user {user_id}",
            extra={"user_id": user_id},
        )
        return subscriptions

    @trace_span
    @readonly
    async def list_plans(self) -> List[SubscriptionPlan]:
        return await self.plan_repo.list_active()

    @trace_span
    @readonly
    async def get_plan(self, plan_id: str) -> Optional[SubscriptionPlan]:
        return await self.plan_repo.get(plan_id)
