"""Domain models for payments."""

from packages.payments.models.domain.enums import (
    TransactionStatus,
    PaymentIntentStatus,
    RedirectStatus,
    PollStatus,
    CallbackSource,
)
from packages.payments.models.domain.gateway import (
    InvoiceProduct,
    InvoiceRequest,
    GatewayInvoice,
    GatewayPaymentData,
    GatewayLookupResult,
    GatewayHealth,
    resolve_gateway_status,
)
from packages.payments.models.domain.payment_intent import (
    PaymentIntent,
    PaymentIntentCreateModel,
    PaymentIntentUpdateModel,
)
from packages.payments.models.domain.payment_transaction import (
    PaymentTransaction,
    PaymentTransactionCreateModel,
    PaymentTransactionUpdateModel,
)

__all__ = [
    # Enums
    "TransactionStatus",
    "PaymentIntentStatus",
    "RedirectStatus",
    "PollStatus",
    "CallbackSource",
    # Gateway
    "InvoiceProduct",
    "InvoiceRequest",
    "GatewayInvoice",
    "GatewayPaymentData",
    "GatewayLookupResult",
    "GatewayHealth",
    "resolve_gateway_status",
    # Payment records
    "PaymentIntent",
    "PaymentIntentCreateModel",
    "PaymentIntentUpdateModel",
    "PaymentTransaction",
    "PaymentTransactionCreateModel",
    "PaymentTransactionUpdateModel",
]
