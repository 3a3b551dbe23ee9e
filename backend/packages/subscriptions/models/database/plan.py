from sqlalchemy import Column, String, Text, DateTime, Boolean, Numeric, JSON
from sqlalchemy.sql import func

from common.db.base import Base, UUIDString, generate_uuid


class SubscriptionPlanEntity(Base):
    """Plan catalog; maintained by the admin dashboard, read-only here."""

    __tablename__ = "subscription_plans"

    id = Column(UUIDString, primary_key=True, default=generate_uuid)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    price_weekly = Column(Numeric(12, 2), nullable=True)
    price_monthly = Column(Numeric(12, 2), nullable=True)
    price_yearly = Column(Numeric(12, 2), nullable=True)
    features = Column(JSON, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )
