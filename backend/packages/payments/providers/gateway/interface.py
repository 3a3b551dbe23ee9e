"""
Interface for payment gateways.

Abstracts the hosted-invoice gateway (Paylink) behind normalized shapes so
checkout, reconciliation and polling never see raw gateway field names.
"""

from abc import ABC, abstractmethod

from packages.payments.models.domain.gateway import (
    GatewayHealth,
    GatewayInvoice,
    GatewayLookupResult,
    InvoiceRequest,
)


class PaymentGatewayInterface(ABC):
    """Abstract interface for payment gateways."""

    @abstractmethod
    async def get_auth_token(self) -> str:
        """
        Return a valid bearer token, exchanging credentials when needed.

        Raises:
            AuthenticationError: credentials missing or rejected everywhere
        """
        pass

    @abstractmethod
    async def create_invoice(self, request: InvoiceRequest) -> GatewayInvoice:
        """
        Create a hosted payment page.

        Args:
            request: Amount, order reference, callback URLs and customer details

        Returns:
            GatewayInvoice with a non-empty invoice id and payment URL

        Raises:
            AuthenticationError: no token could be obtained
            InvoiceCreationError: every endpoint failed or returned no invoice
        """
        pass

    @abstractmethod
    async def get_invoice(self, invoice_id: str) -> GatewayLookupResult:
        """
        Look up an invoice. Never raises; ``success=False`` means status unknown.
        """
        pass

    @abstractmethod
    async def get_transaction_by_number(self, transaction_no: str) -> GatewayLookupResult:
        """
        Look up a payment by gateway transaction number.

        Preferred over ``get_invoice`` when both identifiers are known. Never raises.
        """
        pass

    @abstractmethod
    async def check_configuration(self) -> GatewayHealth:
        """Report whether the gateway is configured and accepts our credentials."""
        pass
