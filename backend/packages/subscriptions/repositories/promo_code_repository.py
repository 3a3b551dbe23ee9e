from typing import Optional
from sqlalchemy import select, update, func, or_

from common.repositories.base import BaseRepository
from packages.subscriptions.models.database.promo_code import PromoCodeEntity
from packages.subscriptions.models.domain.promo_code import PromoCode
from common.core.otel_axiom_exporter import trace_span


class PromoCodeRepository(BaseRepository[PromoCodeEntity, PromoCode]):
    def __init__(self):
        super().__init__(PromoCodeEntity, PromoCode)

    @trace_span
    async def get_by_code(self, code: str) -> Optional[PromoCode]:
        """Case-insensitive lookup by code."""
        async with self._get_session() as session:
            result = await session.execute(
                select(PromoCodeEntity).where(
                    func.upper(PromoCodeEntity.code) == code.strip().upper()
                )
            )
            entity = result.scalar_one_or_none()
            return self._entity_to_domain(entity) if entity else None

    @trace_span
    async def increment_usage(self, code: str) -> bool:
        """
        Consume one use of a code.

        Single conditional UPDATE so concurrent redemptions cannot push
        ``used_count`` past ``max_uses``. Returns False when nothing was updated.
        """
        async with self._get_session() as session:
            result = await session.execute(
                update(PromoCodeEntity)
                .where(
                    func.upper(PromoCodeEntity.code) == code.strip().upper(),
                    or_(
                        PromoCodeEntity.max_uses.is_(None),
                        PromoCodeEntity.used_count < PromoCodeEntity.max_uses,
                    ),
                )
                .values(used_count=PromoCodeEntity.used_count + 1)
                .execution_options(synchronize_session=False)
            )
            await session.flush()
            return result.rowcount > 0
