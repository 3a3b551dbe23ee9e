from sqlalchemy import Column, String, DateTime, JSON
from sqlalchemy.sql import func

from common.db.base import Base, UUIDString, generate_uuid


class SubscriptionHistoryEntity(Base):
    """Append-only audit trail of subscription state changes."""

    __tablename__ = "subscription_history"

    id = Column(UUIDString, primary_key=True, default=generate_uuid)
    subscription_id = Column(UUIDString, nullable=False, index=True)
    user_id = Column(UUIDString, nullable=False, index=True)
    action = Column(String(50), nullable=False)
    details = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
