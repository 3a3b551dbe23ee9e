"""
Unit tests for StatusService, the read path behind status polling.
"""

import pytest
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, patch

from packages.payments.models.domain.enums import PaymentIntentStatus, PollStatus
from packages.payments.models.domain.status import StatusQuery
from packages.payments.repositories.payment_intent_repository import (
    PaymentIntentRepository,
)
from packages.payments.services.activation_service import PaymentActivationService
from packages.payments.services.status_service import StatusService
from packages.subscriptions.models.domain.enums import SubscriptionStatus
from tests.fixtures import (
    failed_lookup,
    paid_lookup,
    pending_lookup,
    unavailable_lookup,
)


@pytest.fixture
def status_service(mock_gateway):
    with patch(
        "packages.payments.services.reconciliation_service.get_payment_gateway",
        return_value=mock_gateway,
    ):
        return StatusService()


@patch("common.core.otel_axiom_exporter.axiom_tracer.start_as_current_span")
@pytest.mark.asyncio
class TestResolve:
    async def test_no_identifiers(self, mock_start_span, status_service):
        result = await status_service.resolve(StatusQuery())

        assert result.status == PollStatus.NOT_FOUND
        assert result.message == "No payment identifier supplied"

    async def test_unknown_transaction_is_not_found(
        self, mock_start_span, status_service, mock_gateway
    ):
        """Garbage identifiers resolve to not_found, never an error."""
        result = await status_service.resolve(
            StatusQuery(transaction_id="garbage-123", user_id="someone")
        )

        assert result.status == PollStatus.NOT_FOUND
        mock_gateway.get_transaction_by_number.assert_not_awaited()

    async def test_pending_transaction_settled_by_gateway(
        self, mock_start_span, status_service, mock_gateway, sample_transaction
    ):
        mock_gateway.get_transaction_by_number = AsyncMock(return_value=paid_lookup())

        result = await status_service.resolve(
            StatusQuery(
                transaction_id="SUB-123", user_id=sample_transaction.user_id
            )
        )

        assert result.status == PollStatus.COMPLETED
        assert result.transaction.id == sample_transaction.id
        assert result.subscription.status == SubscriptionStatus.ACTIVE
        assert result.gateway_status == "Paid"

    async def test_unreachable_gateway_stays_pending(
        self, mock_start_span, status_service, mock_gateway, sample_transaction
    ):
        mock_gateway.get_transaction_by_number = AsyncMock(
            return_value=unavailable_lookup()
        )
        mock_gateway.get_invoice = AsyncMock(return_value=unavailable_lookup())

        result = await status_service.resolve(StatusQuery(transaction_id="SUB-123"))

        assert result.status == PollStatus.PENDING
        assert result.message == "Payment is still being processed"

    async def test_failed_message_carries_gateway_code(
        self, mock_start_span, status_service, mock_gateway, sample_transaction
    ):
        mock_gateway.get_transaction_by_number = AsyncMock(return_value=failed_lookup())

        result = await status_service.resolve(StatusQuery(order_number="SUB-123"))

        assert result.status == PollStatus.FAILED
        assert result.message == "Payment failed (code 05)"

    async def test_settled_transaction_skips_gateway(
        self, mock_start_span, status_service, mock_gateway, sample_transaction
    ):
        await PaymentActivationService().complete(sample_transaction.id)

        result = await status_service.resolve(StatusQuery(transaction_id="SUB-123"))

        assert result.status == PollStatus.COMPLETED
        assert result.subscription is not None
        mock_gateway.get_transaction_by_number.assert_not_awaited()

    async def test_gateway_identifier_forces_verification(
        self, mock_start_span, status_service, mock_gateway, sample_transaction
    ):
        await PaymentActivationService().complete(sample_transaction.id)
        mock_gateway.get_transaction_by_number = AsyncMock(return_value=paid_lookup())

        result = await status_service.resolve(StatusQuery(invoice_id="INV-9"))

        assert result.status == PollStatus.COMPLETED
        mock_gateway.get_transaction_by_number.assert_awaited()

    async def test_other_users_transaction_is_not_found(
        self, mock_start_span, status_service, sample_transaction
    ):
        result = await status_service.resolve(
            StatusQuery(transaction_id="SUB-123", user_id="another-user")
        )

        assert result.status == PollStatus.NOT_FOUND

    async def test_lookup_by_payment_intent(
        self, mock_start_span, status_service, mock_gateway, sample_transaction, sample_intent
    ):
        mock_gateway.get_transaction_by_number = AsyncMock(return_value=pending_lookup())

        result = await status_service.resolve(
            StatusQuery(payment_intent_id=sample_intent.id)
        )

        assert result.status == PollStatus.PENDING
        assert result.transaction.id == sample_transaction.id

    async def test_stale_intent_expires(
        self, mock_start_span, status_service, test_db, sample_transaction, sample_intent
    ):
        sample_intent.expires_at = datetime.now(timezone.utc) - timedelta(minutes=5)
        await test_db.commit()

        result = await status_service.resolve(StatusQuery(transaction_id="SUB-123"))

        assert result.status == PollStatus.PENDING
        intent = await PaymentIntentRepository().get(sample_intent.id)
        assert intent.status == PaymentIntentStatus.EXPIRED

    async def test_unexpected_error_reports_error(
        self, mock_start_span, status_service
    ):
        status_service.transaction_repo.find_by_identifiers = AsyncMock(
            side_effect=RuntimeError("db down")
        )

        result = await status_service.resolve(StatusQuery(transaction_id="SUB-123"))

        assert result.status == PollStatus.ERROR
        assert result.message == "Unable to check payment status right now"


@patch("common.core.otel_axiom_exporter.axiom_tracer.start_as_current_span")
@pytest.mark.asyncio
class TestSubscriptionFallback:
    async def test_pending_legacy_subscription_activated_by_direct_lookup(
        self, mock_start_span, status_service, mock_gateway, legacy_subscription
    ):
        mock_gateway.get_transaction_by_number = AsyncMock(return_value=paid_lookup())

        result = await status_service.resolve(
            StatusQuery(
                subscription_id=legacy_subscription.id,
                user_id=legacy_subscription.user_id,
            )
        )

        assert result.status == PollStatus.COMPLETED
        assert result.subscription.status == SubscriptionStatus.ACTIVE
        mock_gateway.get_transaction_by_number.assert_awaited_once_with("SUB-LEGACY-1")

    async def test_direct_lookup_falls_back_to_invoice(
        self, mock_start_span, status_service, mock_gateway, legacy_subscription
    ):
        mock_gateway.get_transaction_by_number = AsyncMock(
            return_value=unavailable_lookup()
        )
        mock_gateway.get_invoice = AsyncMock(return_value=failed_lookup())

        result = await status_service.resolve(
            StatusQuery(subscription_id=legacy_subscription.id)
        )

        assert result.status == PollStatus.FAILED
        assert result.subscription.status == SubscriptionStatus.PAYMENT_FAILED

    async def test_unconfirmed_lookup_stays_pending(
        self, mock_start_span, status_service, legacy_subscription
    ):
        result = await status_service.resolve(
            StatusQuery(subscription_id=legacy_subscription.id)
        )

        assert result.status == PollStatus.PENDING
        assert result.subscription.status == SubscriptionStatus.PENDING

    async def test_foreign_subscription_is_not_found(
        self, mock_start_span, status_service, legacy_subscription
    ):
        result = await status_service.resolve(
            StatusQuery(subscription_id=legacy_subscription.id, user_id="another-user")
        )

        assert result.status == PollStatus.NOT_FOUND
