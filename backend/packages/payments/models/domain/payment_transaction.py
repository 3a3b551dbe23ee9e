"""
Domain models for payment transactions.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, field_validator

from packages.payments.models.domain.enums import TransactionStatus


class PaymentTransaction(BaseModel):
    """
    One attempt to pay, stored with every identifier the gateway may echo back.

    ``transaction_id`` is our own reference (``SUB-...``); ``id`` is the row key.
    """

    id: str
    user_id: str
    subscription_id: Optional[str] = None
    payment_intent_id: Optional[str] = None
    amount: Decimal
    currency: str = "SAR"
    payment_method: str = "paylink"
    status: TransactionStatus

    transaction_id: str
    order_number: Optional[str] = None
    paylink_invoice_id: Optional[str] = None
    paylink_reference: Optional[str] = None
    transaction_no: Optional[str] = None

    gateway_status: Optional[str] = None
    gateway_code: Optional[str] = None
    payment_gateway_response: Optional[Dict[str, Any]] = None

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    class Config:
        from_attributes = True

    @property
    def identifiers(self) -> List[str]:
        """Every non-empty identifier this attempt is known by."""
        values = [
            self.transaction_id,
            self.order_number,
            self.paylink_invoice_id,
            self.paylink_reference,
            self.transaction_no,
        ]
        seen: List[str] = []
        for value in values:
            if value and value not in seen:
                seen.append(value)
        return seen


class PaymentTransactionCreateModel(BaseModel):
    user_id: str
    subscription_id: Optional[str] = None
    payment_intent_id: Optional[str] = None
    amount: Decimal
    currency: str
    payment_method: str = "paylink"
    status: TransactionStatus = TransactionStatus.PENDING
    transaction_id: str
    order_number: Optional[str] = None
    paylink_invoice_id: Optional[str] = None
    paylink_reference: Optional[str] = None
    transaction_no: Optional[str] = None
    payment_gateway_response: Optional[Dict[str, Any]] = None


class PaymentTransactionUpdateModel(BaseModel):
    status: Optional[str] = None
    subscription_id: Optional[str] = None
    paylink_invoice_id: Optional[str] = None
    transaction_no: Optional[str] = None
    gateway_status: Optional[str] = None
    gateway_code: Optional[str] = None
    payment_gateway_response: Optional[Dict[str, Any]] = None
    completed_at: Optional[datetime] = None

    @field_validator("status", mode="before")
    @classmethod
    def validate_status(cls, v):
        if isinstance(v, TransactionStatus):
            return v.value
        return v
