"""
Payment enums - transaction, intent and reconciliation outcome states.
"""

from enum import Enum


class TransactionStatus(str, Enum):
    """
    Payment transaction status.

    Flow: pending -> completed | failed. The first terminal status wins.
    """

    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"

    def is_terminal(self) -> bool:
        return self != TransactionStatus.PENDING


class PaymentIntentStatus(str, Enum):
    """Flow: pending -> completed | failed | expired"""

    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    EXPIRED = "expired"


class RedirectStatus(str, Enum):
    """``status`` query value on the client-facing payment status page."""

    SUCCESS = "success"
    FAILED = "failed"
    PENDING = "pending"
    ERROR = "error"

    @classmethod
    def from_transaction_status(cls, status: "TransactionStatus") -> "RedirectStatus":
        if status == TransactionStatus.COMPLETED:
            return cls.SUCCESS
        if status == TransactionStatus.FAILED:
            return cls.FAILED
        return cls.PENDING


class PollStatus(str, Enum):
    """``status`` of the polling envelope."""

    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    NOT_FOUND = "not_found"
    ERROR = "error"

    def is_settled(self) -> bool:
        return self in (PollStatus.COMPLETED, PollStatus.FAILED, PollStatus.NOT_FOUND)


class CallbackSource(str, Enum):
    """Which entry point delivered a gateway callback."""

    STANDARD = "standard"
    THREE_DS = "3ds"
    BROWSER = "browser"
