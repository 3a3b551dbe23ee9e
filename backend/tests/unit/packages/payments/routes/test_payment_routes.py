"""
Unit tests for checkout and status polling routes.

Tests API endpoints with a mocked Paylink gateway.
"""

import pytest
from unittest.mock import AsyncMock, patch

from api.main import app
from packages.auth.dependencies import get_current_active_user, get_optional_user
from packages.auth.models.domain.authenticated_user import AuthenticatedUser
from packages.payments.exceptions import AuthenticationError, InvoiceCreationError
from tests.fixtures import paid_lookup


@pytest.mark.asyncio
class TestCheckoutRoute:
    async def test_checkout(self, client, sample_plan, sample_promo_code):
        """Test POST /api/v1/payments/checkout."""
        response = await client.post(
            "/api/v1/payments/checkout",
            json={"planId": sample_plan.id, "amount": 100, "promoCode": "SAVE20"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["paymentUrl"] == "https://restpilot.paylink.sa/pay/INV-1"
        assert data["amount"] == 100.0
        assert data["discount"] == 20.0
        assert data["netAmount"] == 80.0
        assert data["currency"] == "SAR"
        assert data["transactionId"].startswith("SUB-")
        assert data["paymentIntentId"]

    async def test_checkout_invalid_promo_code(self, client, sample_plan):
        response = await client.post(
            "/api/v1/payments/checkout",
            json={"planId": sample_plan.id, "promoCode": "NOPE"},
        )

        assert response.status_code == 400
        assert "NOPE" in response.json()["detail"]

    async def test_checkout_invoice_failure(self, client, mock_gateway, sample_plan):
        mock_gateway.create_invoice = AsyncMock(
            side_effect=InvoiceCreationError("no invoice")
        )

        response = await client.post(
            "/api/v1/payments/checkout", json={"planId": sample_plan.id}
        )

        assert response.status_code == 502

    async def test_checkout_gateway_auth_failure(self, client, mock_gateway, sample_plan):
        mock_gateway.create_invoice = AsyncMock(
            side_effect=AuthenticationError("rejected")
        )

        response = await client.post(
            "/api/v1/payments/checkout", json={"planId": sample_plan.id}
        )

        assert response.status_code == 503

    async def test_checkout_requires_auth(self, client, sample_plan):
        app.dependency_overrides.pop(get_current_active_user)

        response = await client.post(
            "/api/v1/payments/checkout", json={"planId": sample_plan.id}
        )

        assert response.status_code == 401


@pytest.mark.asyncio
class TestTransactionStatusRoute:
    async def test_pending_envelope(self, client, sample_transaction):
        """Test GET /api/v1/payments/transaction-status."""
        response = await client.get(
            "/api/v1/payments/transaction-status",
            params={"transactionId": "SUB-123", "attempt": "2"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "pending"
        assert data["transactionId"] == "SUB-123"
        assert data["invoiceId"] == "INV-9"
        assert data["transaction"]["status"] == "pending"
        assert data["lastChecked"]
        assert data["polling"]["shouldContinue"] is True
        assert data["polling"]["nextPollSeconds"] == 11.25
        assert data["polling"]["attemptsRemaining"] == 8

    async def test_completed_envelope(self, client, mock_gateway, sample_transaction):
        mock_gateway.get_transaction_by_number = AsyncMock(return_value=paid_lookup())

        response = await client.get(
            "/api/v1/payments/transaction-status", params={"txn_id": "SUB-123"}
        )

        data = response.json()
        assert response.status_code == 200
        assert data["status"] == "completed"
        assert data["subscription"]["status"] == "active"
        assert data["subscription"]["paymentConfirmed"] is True
        assert data["subscriptionType"] == "monthly"
        assert data["polling"]["shouldContinue"] is False
        assert data["polling"]["nextPollSeconds"] is None

    async def test_unknown_transaction_is_not_found(self, client):
        response = await client.get(
            "/api/v1/payments/transaction-status",
            params={"transactionId": "garbage", "status": "completed"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "not_found"
        assert data["transactionId"] == "garbage"

    async def test_no_identifiers(self, client):
        response = await client.get("/api/v1/payments/transaction-status")

        assert response.status_code == 200
        assert response.json()["status"] == "not_found"

    async def test_garbage_attempt_count(self, client, sample_transaction):
        response = await client.get(
            "/api/v1/payments/transaction-status",
            params={"transactionId": "SUB-123", "attempt": "abc"},
        )

        assert response.status_code == 200
        assert response.json()["polling"]["nextPollSeconds"] == 5.0

    async def test_other_users_transaction(self, client, sample_transaction):
        app.dependency_overrides[get_optional_user] = lambda: AuthenticatedUser(
            user_id="another-user"
        )

        response = await client.get(
            "/api/v1/payments/transaction-status", params={"transactionId": "SUB-123"}
        )

        assert response.status_code == 200
        assert response.json()["status"] == "not_found"

    async def test_internal_failure_is_error_envelope(self, client):
        with patch(
            "packages.payments.routes.status.StatusService",
            side_effect=RuntimeError("boom"),
        ):
            response = await client.get(
                "/api/v1/payments/transaction-status",
                params={"transactionId": "SUB-123"},
            )

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "error"
        assert data["polling"]["shouldContinue"] is True
