"""
Database entity for subscriptions.
"""

from sqlalchemy import Column, String, DateTime, Boolean, Numeric, Index
from sqlalchemy.sql import func

from common.db.base import Base, UUIDString, generate_uuid


class SubscriptionEntity(Base):
    """
    User subscription database entity.

    Rows are created once a payment is confirmed. ``transaction_id`` and
    ``payment_intent_id`` are unique so one payment can never back two rows.
    """

    __tablename__ = "subscriptions"

    id = Column(UUIDString, primary_key=True, default=generate_uuid)
    user_id = Column(UUIDString, nullable=False, index=True)
    plan_id = Column(UUIDString, nullable=True, index=True)

    subscription_type = Column(String(20), nullable=False)  # weekly, monthly, yearly
    amount = Column(Numeric(12, 2), nullable=False, server_default="0")
    status = Column(
        String(50), nullable=False, index=True
    )  # pending, active, payment_failed, expired, cancelled
    payment_confirmed = Column(Boolean, nullable=False, default=False)

    started_date = Column(DateTime(timezone=True), nullable=True)
    expired_date = Column(DateTime(timezone=True), nullable=True)

    # Row id of the confirming payment_transactions row; legacy rows may hold
    # the gateway order reference instead
    transaction_id = Column(String(100), nullable=True, unique=True)
    payment_intent_id = Column(UUIDString, nullable=True, unique=True)
    promo_code = Column(String(50), nullable=True)
    discount_amount = Column(Numeric(12, 2), nullable=False, server_default="0")

    customer_name = Column(String(255), nullable=True)
    customer_email = Column(String(255), nullable=True)
    customer_phone = Column(String(50), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (
        Index("idx_subscription_user_status", "user_id", "status"),
        Index("idx_subscription_expired_date", "expired_date"),
    )
