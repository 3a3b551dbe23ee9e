from typing import Optional
from sqlalchemy import select

from common.repositories.base import BaseRepository
from packages.payments.models.database.payment_intent import PaymentIntentEntity
from packages.payments.models.domain.payment_intent import PaymentIntent
from common.core.otel_axiom_exporter import trace_span


class PaymentIntentRepository(BaseRepository[PaymentIntentEntity, PaymentIntent]):
    def __init__(self):
        super().__init__(PaymentIntentEntity, PaymentIntent)

    @trace_span
    async def get_by_reference(self, reference: str) -> Optional[PaymentIntent]:
        """Get the intent whose gateway order reference is ``reference``."""
        async with self._get_session() as session:
            result = await session.execute(
                select(PaymentIntentEntity).where(
                    PaymentIntentEntity.transaction_reference == reference
                )
            )
            entity = result.scalar_one_or_none()
            return self._entity_to_domain(entity) if entity else None
