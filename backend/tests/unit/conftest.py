import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from packages.payments.models.domain.gateway import GatewayHealth, GatewayInvoice
from tests.fixtures import pending_lookup


@pytest.fixture
def mock_gateway():
    """Create a mock Paylink gateway; lookups report a pending payment by default."""
    gateway = AsyncMock()
    gateway.get_auth_token = AsyncMock(return_value="test-token")
    gateway.create_invoice = AsyncMock(
        return_value=GatewayInvoice(
            invoice_id="INV-1",
            payment_url="https://restpilot.paylink.sa/pay/INV-1",
            order_number="SUB-1",
            transaction_no="1718000000001",
            reference="1718000000001",
            raw={"id": "INV-1"},
        )
    )
    gateway.get_invoice = AsyncMock(return_value=pending_lookup())
    gateway.get_transaction_by_number = AsyncMock(return_value=pending_lookup())
    gateway.check_configuration = AsyncMock(
        return_value=GatewayHealth(
            configured=True,
            environment="sandbox",
            base_url="https://restpilot.paylink.sa",
            authenticated=True,
        )
    )
    return gateway


@pytest.fixture(autouse=True)
def mock_get_payment_gateway(mock_gateway):
    """Automatically mock get_payment_gateway for all unit tests."""
    with patch(
        "packages.payments.services.checkout_service.get_payment_gateway",
        return_value=mock_gateway,
    ), patch(
        "packages.payments.services.reconciliation_service.get_payment_gateway",
        return_value=mock_gateway,
    ), patch(
        "packages.payments.routes.callbacks.get_payment_gateway",
        return_value=mock_gateway,
    ):
        yield


@pytest.fixture
def mock_span():
    """Create a mock span instance for testing telemetry."""
    span = MagicMock()
    span.__enter__ = MagicMock(return_value=span)
    span.__exit__ = MagicMock(return_value=None)
    span.__aenter__ = AsyncMock(return_value=span)
    span.__aexit__ = AsyncMock(return_value=None)
    return span


@pytest.fixture
def mock_start_span(mock_span):
    """Create a mock start_span function that returns mock_span."""
    with patch(
        "common.core.otel_axiom_exporter.axiom_tracer.start_as_current_span",
        return_value=mock_span,
    ) as mock:
        yield mock
