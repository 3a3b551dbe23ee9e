"""
Database entity for payment intents.
"""

from sqlalchemy import Column, String, DateTime, Numeric, Index
from sqlalchemy.sql import func

from common.db.base import Base, UUIDString, generate_uuid


class PaymentIntentEntity(Base):
    """
    Intention to subscribe, created at checkout.

    Never deleted; rows that never complete stay as an audit trail.
    """

    __tablename__ = "payment_intents"

    id = Column(UUIDString, primary_key=True, default=generate_uuid)
    user_id = Column(UUIDString, nullable=False, index=True)
    plan_id = Column(UUIDString, nullable=True)
    subscription_type = Column(String(20), nullable=False)

    amount = Column(Numeric(12, 2), nullable=False)  # gross
    discount_amount = Column(Numeric(12, 2), nullable=False, server_default="0")
    net_amount = Column(Numeric(12, 2), nullable=False)
    currency = Column(String(3), nullable=False, server_default="SAR")
    promo_code = Column(String(50), nullable=True)
    payment_method = Column(String(50), nullable=False, server_default="paylink")

    # Legacy flow: an existing subscription row being paid for
    subscription_id = Column(UUIDString, nullable=True)
    transaction_reference = Column(String(100), nullable=True, index=True)

    status = Column(
        String(20), nullable=False, index=True
    )  # pending, completed, failed, expired
    expires_at = Column(DateTime(timezone=True), nullable=False)
    completed_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (Index("idx_payment_intent_user_status", "user_id", "status"),)
