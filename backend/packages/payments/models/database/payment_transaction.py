"""
Database entity for payment transactions.
"""

from sqlalchemy import Column, String, DateTime, Numeric, JSON
from sqlalchemy.sql import func

from common.db.base import Base, UUIDString, generate_uuid


class PaymentTransactionEntity(Base):
    """
    Durable record of one payment attempt.

    Every identifier the gateway might later use is stored and indexed so a
    callback carrying any single one of them resolves to this row.
    """

    __tablename__ = "payment_transactions"

    id = Column(UUIDString, primary_key=True, default=generate_uuid)
    user_id = Column(UUIDString, nullable=False, index=True)
    subscription_id = Column(UUIDString, nullable=True, index=True)
    payment_intent_id = Column(UUIDString, nullable=True, index=True)

    amount = Column(Numeric(12, 2), nullable=False)
    currency = Column(String(3), nullable=False, server_default="SAR")
    payment_method = Column(String(50), nullable=False, server_default="paylink")
    status = Column(String(20), nullable=False, index=True)  # pending, completed, failed

    # Identifiers, in lookup order
    transaction_id = Column(String(100), nullable=False, unique=True, index=True)
    paylink_invoice_id = Column(String(100), nullable=True, index=True)
    paylink_reference = Column(String(100), nullable=True, index=True)
    transaction_no = Column(String(100), nullable=True, index=True)
    order_number = Column(String(100), nullable=True, index=True)

    gateway_status = Column(String(50), nullable=True)
    gateway_code = Column(String(50), nullable=True)
    payment_gateway_response = Column(JSON, nullable=True)  # sanitized snapshot

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )
    completed_at = Column(DateTime(timezone=True), nullable=True)
