from sqlalchemy import Column, String, DateTime
from sqlalchemy.sql import func

from common.db.base import Base, UUIDString, generate_uuid


class UserEntity(Base):
    """Dashboard account; read here only to fill in checkout customer details."""

    __tablename__ = "users"

    id = Column(UUIDString, primary_key=True, default=generate_uuid)
    name = Column(String(255), nullable=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    phone = Column(String(50), nullable=True)
    role = Column(String(50), nullable=False, server_default="user")
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )
