"""
Unit tests for the Paylink callback routes.

Tests redirects and the 3DS bounce with a mocked Paylink gateway.
"""

import base64
import json
import pytest
from unittest.mock import AsyncMock, patch
from urllib.parse import parse_qs, urlsplit

from packages.payments.models.domain.enums import TransactionStatus
from packages.payments.repositories.payment_transaction_repository import (
    PaymentTransactionRepository,
)
from packages.subscriptions.repositories.subscription_repository import (
    SubscriptionRepository,
)
from tests.fixtures import failed_lookup, paid_lookup

STATUS_PAGE = "/dashboard/client/subscriptions/payment-status"


def redirect_query(response) -> dict:
    location = urlsplit(response.headers["location"])
    assert location.path == STATUS_PAGE
    return {key: values[0] for key, values in parse_qs(location.query).items()}


@pytest.mark.asyncio
class TestPaylinkCallback:
    async def test_post_callback_success(self, client, mock_gateway, sample_transaction):
        """Test POST /api/v1/paylink/callback with a confirmed payment."""
        mock_gateway.get_transaction_by_number = AsyncMock(return_value=paid_lookup())

        response = await client.post(
            "/api/v1/paylink/callback",
            data={"orderNumber": "SUB-123", "status": "paid"},
        )

        assert response.status_code == 303
        assert redirect_query(response) == {
            "status": "success",
            "txn_id": "SUB-123",
            "invoice_id": "INV-9",
        }
        txn = await PaymentTransactionRepository().get(sample_transaction.id)
        assert txn.status == TransactionStatus.COMPLETED

    async def test_json_callback(self, client, mock_gateway, sample_transaction):
        mock_gateway.get_transaction_by_number = AsyncMock(return_value=paid_lookup())

        response = await client.post(
            "/api/v1/paylink/callback",
            content=json.dumps({"transactionNo": "1718000000001"}),
            headers={"content-type": "text/plain"},
        )

        assert response.status_code == 303
        assert redirect_query(response)["status"] == "success"

    async def test_duplicate_callback(self, client, mock_gateway, sample_transaction):
        mock_gateway.get_transaction_by_number = AsyncMock(return_value=paid_lookup())

        for _ in range(2):
            response = await client.post(
                "/api/v1/paylink/callback", data={"orderNumber": "SUB-123"}
            )
            assert redirect_query(response)["status"] == "success"

        subscriptions = await SubscriptionRepository().list_for_user(
            sample_transaction.user_id
        )
        assert len(subscriptions) == 1

    async def test_browser_return_uses_302(self, client, sample_transaction):
        response = await client.get(
            "/api/v1/paylink/callback",
            params={"txn_id": "SUB-123", "source": "return"},
        )

        assert response.status_code == 302
        assert redirect_query(response)["status"] == "pending"

    async def test_unmatched_callback_redirects_pending(self, client):
        response = await client.post(
            "/api/v1/paylink/callback", data={"orderNumber": "SUB-NOPE"}
        )

        assert response.status_code == 303
        assert redirect_query(response) == {"status": "pending", "txn_id": "SUB-NOPE"}

    async def test_unexpected_error_redirects_error(self, client):
        with patch(
            "packages.payments.callbacks.paylink_callback.ReconciliationService",
            side_effect=RuntimeError("boom"),
        ):
            response = await client.post(
                "/api/v1/paylink/callback", data={"orderNumber": "SUB-123"}
            )

        assert response.status_code == 303
        assert redirect_query(response) == {"status": "error"}


@pytest.mark.asyncio
class TestThreeDsCallback:
    async def test_failed_authentication_confirmed(
        self, client, mock_gateway, sample_transaction
    ):
        mock_gateway.get_transaction_by_number = AsyncMock(return_value=failed_lookup())
        pares = base64.b64encode(json.dumps({"transStatus": "N"}).encode()).decode()

        response = await client.post(
            "/api/v1/paylink/3ds-callback", data={"PaRes": pares, "MD": "SUB-123"}
        )

        assert response.status_code == 303
        assert redirect_query(response) == {
            "status": "failed",
            "txn_id": "SUB-123",
            "invoice_id": "INV-9",
            "code": "05",
        }

    async def test_error_as_json_when_requested(self, client):
        with patch(
            "packages.payments.callbacks.paylink_callback.ReconciliationService",
            side_effect=RuntimeError("boom"),
        ):
            response = await client.post(
                "/api/v1/paylink/3ds-callback",
                data={"MD": "SUB-123"},
                headers={"accept": "application/json"},
            )

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is False
        assert body["status"] == "error"

    async def test_bounce_reposts_form(self, client):
        response = await client.get(
            "/api/v1/paylink/3ds-callback",
            params={"PaRes": "abc", "MD": "m", "orderNumber": "SUB-123"},
        )

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/html")
        assert 'action="http://test/api/v1/paylink/3ds-callback"' in response.text
        assert 'name="PaRes" value="abc"' in response.text

    async def test_bounce_without_pares_redirects(self, client):
        response = await client.get(
            "/api/v1/paylink/3ds-callback", params={"txn_id": "SUB-123"}
        )

        assert response.status_code == 302
        assert redirect_query(response) == {"status": "pending", "txn_id": "SUB-123"}

    async def test_bounce_ignores_claimed_status(self, client, mock_gateway):
        response = await client.get(
            "/api/v1/paylink/3ds-callback",
            params={"status": "success", "txn_id": "SUB-123"},
        )

        assert response.status_code == 302
        assert redirect_query(response) == {"status": "pending", "txn_id": "SUB-123"}
        mock_gateway.get_invoice.assert_not_awaited()
        mock_gateway.get_transaction_by_number.assert_not_awaited()


@pytest.mark.asyncio
class TestGatewayStatus:
    async def test_paylink_status(self, client):
        """Test GET /api/v1/paylink/status."""
        response = await client.get("/api/v1/paylink/status")

        assert response.status_code == 200
        data = response.json()
        assert data["configured"] is True
        assert data["environment"] == "sandbox"
        assert data["authenticated"] is True
