from typing import Optional
from sqlalchemy import select

from common.repositories.base import BaseRepository
from packages.users.models.database.user import UserEntity
from packages.users.models.domain.user import User
from common.core.otel_axiom_exporter import trace_span


class UserRepository(BaseRepository[UserEntity, User]):
    """Read-only access to dashboard accounts; this service never writes them."""

    def __init__(self):
        super().__init__(UserEntity, User)

    @trace_span
    async def get_contact_details(self, user_id: str) -> Optional[User]:
        """Load a user for prefilling the gateway customer block."""
        async with self._get_session(readonly=True) as session:
            result = await session.execute(
                select(UserEntity).where(UserEntity.id == user_id)
            )
            db_user = result.scalar_one_or_none()
            return self._entity_to_domain(db_user) if db_user else None
