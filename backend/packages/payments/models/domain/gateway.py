"""
Normalized gateway shapes.

Everything downstream of the gateway adapter depends on these models only,
never on raw Paylink field names.
"""

from decimal import Decimal
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field

from packages.payments.models.domain.enums import TransactionStatus

PAID_STATUSES = frozenset({"paid", "completed"})
FAILED_STATUSES = frozenset({"failed", "cancelled", "canceled", "expired", "rejected"})


def resolve_gateway_status(
    status: Optional[str], paid_date: Optional[Any]
) -> TransactionStatus:
    """
    Map a raw gateway status to a transaction status.

    A paid status only counts when a paid date accompanies it.
    """
    normalized = (status or "").strip().lower()
    if normalized in PAID_STATUSES and paid_date:
        return TransactionStatus.COMPLETED
    if normalized in FAILED_STATUSES:
        return TransactionStatus.FAILED
    return TransactionStatus.PENDING


class InvoiceProduct(BaseModel):
    title: str
    price: Decimal
    qty: int = 1
    description: Optional[str] = None


class InvoiceRequest(BaseModel):
    """Everything needed to open a hosted payment page."""

    amount: Decimal
    order_number: Optional[str] = None
    callback_url: str
    cancel_url: Optional[str] = None
    three_ds_callback_url: Optional[str] = None
    currency: str = "SAR"
    client_name: Optional[str] = None
    client_email: Optional[str] = None
    client_mobile: Optional[str] = None
    note: Optional[str] = None
    products: List[InvoiceProduct] = Field(default_factory=list)
    metadata: Dict[str, Any] = Field(default_factory=dict)


class GatewayInvoice(BaseModel):
    invoice_id: str
    payment_url: str
    order_number: str
    transaction_no: Optional[str] = None
    reference: Optional[str] = None
    raw: Dict[str, Any] = Field(default_factory=dict)


class GatewayPaymentData(BaseModel):
    status: str = "unknown"
    paid_date: Optional[str] = None  # as reported; presence is what matters
    amount: Optional[Decimal] = None
    currency: Optional[str] = None
    transaction_no: Optional[str] = None
    invoice_id: Optional[str] = None
    order_number: Optional[str] = None
    error_code: Optional[str] = None
    error_message: Optional[str] = None
    raw: Dict[str, Any] = Field(default_factory=dict)

    @property
    def resolved_status(self) -> TransactionStatus:
        return resolve_gateway_status(self.status, self.paid_date)


class GatewayLookupResult(BaseModel):
    """Outcome of a read-only lookup; ``success=False`` means status unknown."""

    success: bool
    data: GatewayPaymentData = Field(default_factory=GatewayPaymentData)

    @classmethod
    def unavailable(cls, message: str) -> "GatewayLookupResult":
        return cls(
            success=False,
            data=GatewayPaymentData(status="error", error_message=message),
        )

    @property
    def resolved_status(self) -> TransactionStatus:
        if not self.success:
            return TransactionStatus.PENDING
        return self.data.resolved_status


class GatewayHealth(BaseModel):
    configured: bool
    environment: str
    base_url: str
    authenticated: bool
    message: Optional[str] = None
