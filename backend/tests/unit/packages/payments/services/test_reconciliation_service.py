"""
Unit tests for ReconciliationService.

The gateway is mocked; rows live in the SQLite test database.
"""

import pytest
from unittest.mock import AsyncMock, patch

from packages.payments.exceptions import ReconciliationAmbiguous
from packages.payments.models.domain.enums import (
    CallbackSource,
    RedirectStatus,
    TransactionStatus,
)
from packages.payments.models.domain.reconciliation import CallbackContext
from packages.payments.repositories.payment_transaction_repository import (
    PaymentTransactionRepository,
)
from packages.payments.services.reconciliation_service import ReconciliationService
from packages.subscriptions.models.domain.enums import SubscriptionStatus
from packages.subscriptions.repositories.promo_code_repository import (
    PromoCodeRepository,
)
from packages.subscriptions.repositories.subscription_repository import (
    SubscriptionRepository,
)
from tests.fixtures import (
    failed_lookup,
    paid_lookup,
    pending_lookup,
    unavailable_lookup,
)


@pytest.fixture
def reconciliation_service(mock_gateway):
    with patch(
        "packages.payments.services.reconciliation_service.get_payment_gateway",
        return_value=mock_gateway,
    ):
        return ReconciliationService()


def standard_callback(**payload) -> CallbackContext:
    return CallbackContext(source=CallbackSource.STANDARD, payload=payload)


@patch("common.core.otel_axiom_exporter.axiom_tracer.start_as_current_span")
@pytest.mark.asyncio
class TestReconcile:
    async def test_confirmed_payment_activates_subscription(
        self, mock_start_span, reconciliation_service, mock_gateway, sample_transaction
    ):
        """Callback plus an independent gateway confirmation completes the payment."""
        mock_gateway.get_transaction_by_number = AsyncMock(return_value=paid_lookup())

        result = await reconciliation_service.reconcile(
            standard_callback(orderNumber="SUB-123", status="paid")
        )

        assert result.status == TransactionStatus.COMPLETED
        assert result.redirect_status == RedirectStatus.SUCCESS
        assert result.transaction.id == sample_transaction.id
        assert result.subscription.status == SubscriptionStatus.ACTIVE
        assert result.subscription.payment_confirmed is True
        assert result.identifiers == ["SUB-123"]
        # Gateway's own transaction number is asked first
        mock_gateway.get_transaction_by_number.assert_awaited_once_with("1718000000001")

    async def test_callback_status_is_not_trusted(
        self, mock_start_span, reconciliation_service, mock_gateway, sample_transaction
    ):
        mock_gateway.get_transaction_by_number = AsyncMock(return_value=pending_lookup())

        result = await reconciliation_service.reconcile(
            standard_callback(orderNumber="SUB-123", status="paid")
        )

        assert result.status == TransactionStatus.PENDING
        assert result.redirect_status == RedirectStatus.PENDING
        txn = await PaymentTransactionRepository().get(sample_transaction.id)
        assert txn.status == TransactionStatus.PENDING
        assert await SubscriptionRepository().list_for_user(sample_transaction.user_id) == []

    async def test_duplicate_callback_is_idempotent(
        self,
        mock_start_span,
        reconciliation_service,
        mock_gateway,
        test_db,
        sample_transaction,
        sample_intent,
        sample_promo_code,
    ):
        sample_intent.promo_code = "SAVE20"
        await test_db.commit()
        mock_gateway.get_transaction_by_number = AsyncMock(return_value=paid_lookup())
        context = standard_callback(orderNumber="SUB-123", status="paid")

        first = await reconciliation_service.reconcile(context)
        second = await reconciliation_service.reconcile(context)

        assert first.status == second.status == TransactionStatus.COMPLETED
        assert second.redirect_status == RedirectStatus.SUCCESS
        # The retry settles locally without asking the gateway again
        assert mock_gateway.get_transaction_by_number.await_count == 1
        subscriptions = await SubscriptionRepository().list_for_user(
            sample_transaction.user_id
        )
        assert len(subscriptions) == 1
        promo = await PromoCodeRepository().get_by_code("SAVE20")
        assert promo.used_count == 1

    async def test_three_ds_failure_confirmed_by_gateway(
        self,
        mock_start_span,
        reconciliation_service,
        mock_gateway,
        sample_transaction,
    ):
        mock_gateway.get_transaction_by_number = AsyncMock(return_value=failed_lookup())

        result = await reconciliation_service.reconcile(
            CallbackContext(
                source=CallbackSource.THREE_DS,
                payload={"PaRes": "x", "MD": "SUB-123"},
                authentication_failed=True,
                gateway_code="N",
            )
        )

        assert result.status == TransactionStatus.FAILED
        assert result.redirect_status == RedirectStatus.FAILED
        assert result.gateway_code == "05"

    async def test_authentication_code_used_when_gateway_has_none(
        self, mock_start_span, reconciliation_service, mock_gateway, sample_transaction
    ):
        mock_gateway.get_transaction_by_number = AsyncMock(
            return_value=failed_lookup(error_code=None)
        )

        result = await reconciliation_service.reconcile(
            CallbackContext(
                source=CallbackSource.THREE_DS,
                payload={"MD": "SUB-123"},
                authentication_failed=True,
                gateway_code="N",
            )
        )

        assert result.status == TransactionStatus.FAILED
        assert result.gateway_code == "N"

    async def test_three_ds_failure_hint_alone_does_not_fail(
        self, mock_start_span, reconciliation_service, mock_gateway, sample_transaction
    ):
        """Only the gateway lookup decides; a failed PaRes with a paid lookup completes."""
        mock_gateway.get_transaction_by_number = AsyncMock(return_value=paid_lookup())

        result = await reconciliation_service.reconcile(
            CallbackContext(
                source=CallbackSource.THREE_DS,
                payload={"MD": "SUB-123"},
                authentication_failed=True,
                gateway_code="N",
            )
        )

        assert result.status == TransactionStatus.COMPLETED

    async def test_unreachable_gateway_leaves_pending(
        self, mock_start_span, reconciliation_service, mock_gateway, sample_transaction
    ):
        mock_gateway.get_transaction_by_number = AsyncMock(
            return_value=unavailable_lookup()
        )
        mock_gateway.get_invoice = AsyncMock(return_value=unavailable_lookup())

        result = await reconciliation_service.reconcile(
            standard_callback(transactionNo="1718000000001")
        )

        assert result.status == TransactionStatus.PENDING
        assert [c.args[0] for c in mock_gateway.get_transaction_by_number.await_args_list] == [
            "1718000000001",
            "SUB-123",
        ]
        mock_gateway.get_invoice.assert_awaited_once_with("INV-9")

    async def test_invoice_lookup_used_when_transaction_lookup_fails(
        self, mock_start_span, reconciliation_service, mock_gateway, sample_transaction
    ):
        mock_gateway.get_transaction_by_number = AsyncMock(
            return_value=unavailable_lookup()
        )
        mock_gateway.get_invoice = AsyncMock(return_value=paid_lookup())

        result = await reconciliation_service.reconcile(standard_callback(invoiceId="INV-9"))

        assert result.status == TransactionStatus.COMPLETED

    async def test_identifier_from_callback_url(
        self, mock_start_span, reconciliation_service, mock_gateway, sample_transaction
    ):
        mock_gateway.get_transaction_by_number = AsyncMock(return_value=paid_lookup())

        result = await reconciliation_service.reconcile(
            CallbackContext(
                source=CallbackSource.BROWSER,
                url="https://app.test/api/v1/paylink/callback?txn_id=SUB-123&source=return",
            )
        )

        assert result.transaction.id == sample_transaction.id
        assert result.status == TransactionStatus.COMPLETED

    async def test_no_identifier(self, mock_start_span, reconciliation_service):
        with pytest.raises(ReconciliationAmbiguous) as exc_info:
            await reconciliation_service.reconcile(standard_callback(status="paid"))
        assert exc_info.value.identifiers == []

    async def test_unmatched_identifier(
        self, mock_start_span, reconciliation_service, mock_gateway
    ):
        with pytest.raises(ReconciliationAmbiguous) as exc_info:
            await reconciliation_service.reconcile(standard_callback(orderNumber="SUB-NOPE"))

        assert exc_info.value.identifiers == ["SUB-NOPE"]
        mock_gateway.get_transaction_by_number.assert_not_awaited()
