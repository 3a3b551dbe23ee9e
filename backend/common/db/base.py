from uuid import uuid4

from sqlalchemy import String
from sqlalchemy.orm import declarative_base
from sqlalchemy.types import TypeDecorator

Base = declarative_base()


def generate_uuid() -> str:
    return str(uuid4())


class UUIDString(TypeDecorator):
    """UUID primary/foreign keys stored as 36-char strings on every dialect."""

    impl = String(36)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        return str(value) if value is not None else None
