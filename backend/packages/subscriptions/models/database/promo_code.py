from sqlalchemy import Column, String, DateTime, Boolean, Numeric, Integer
from sqlalchemy.sql import func

from common.db.base import Base, UUIDString, generate_uuid


class PromoCodeEntity(Base):
    __tablename__ = "promo_codes"

    id = Column(UUIDString, primary_key=True, default=generate_uuid)
    code = Column(String(50), nullable=False, unique=True, index=True)
    discount_type = Column(String(20), nullable=False)  # percentage, fixed
    discount_value = Column(Numeric(12, 2), nullable=False)
    max_uses = Column(Integer, nullable=True)  # NULL = unlimited
    used_count = Column(Integer, nullable=False, default=0)
    starts_at = Column(DateTime(timezone=True), nullable=True)
    expiry_date = Column(DateTime(timezone=True), nullable=True)
    active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
