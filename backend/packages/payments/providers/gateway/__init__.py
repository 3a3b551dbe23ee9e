"""Payment gateways - hosted invoices and payment status lookups."""

from packages.payments.providers.gateway.interface import PaymentGatewayInterface
from packages.payments.providers.gateway.factory import get_payment_gateway

__all__ = [
    "PaymentGatewayInterface",
    "get_payment_gateway",
]
