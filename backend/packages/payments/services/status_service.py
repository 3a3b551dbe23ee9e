"""
Service behind the status polling endpoint.
"""

from datetime import datetime, timezone
from typing import Optional

from common.core.otel_axiom_exporter import trace_span, get_logger
from packages.payments.models.domain.enums import (
    PaymentIntentStatus,
    PollStatus,
    TransactionStatus,
)
from packages.payments.models.domain.gateway import GatewayLookupResult
from packages.payments.models.domain.payment_intent import PaymentIntentUpdateModel
from packages.payments.models.domain.payment_transaction import PaymentTransaction
from packages.payments.models.domain.status import StatusQuery, StatusResult
from packages.payments.repositories.payment_intent_repository import (
    PaymentIntentRepository,
)
from packages.payments.repositories.payment_transaction_repository import (
    PaymentTransactionRepository,
)
from packages.payments.services.activation_service import PaymentActivationService
from packages.payments.services.reconciliation_service import ReconciliationService
from packages.subscriptions.models.domain.enums import SubscriptionStatus
from packages.subscriptions.models.domain.subscription import Subscription
from packages.subscriptions.repositories.subscription_repository import (
    SubscriptionRepository,
)

logger = get_logger(__name__)

MESSAGES = {
    PollStatus.PENDING: "Payment is still being processed",
    PollStatus.COMPLETED: "Payment completed successfully",
    PollStatus.FAILED: "Payment failed",
    PollStatus.NOT_FOUND: "Transaction not found",
    PollStatus.ERROR: "Unable to check payment status right now",
}

_POLL_STATUS = {
    TransactionStatus.PENDING: PollStatus.PENDING,
    TransactionStatus.COMPLETED: PollStatus.COMPLETED,
    TransactionStatus.FAILED: PollStatus.FAILED,
}


class StatusService:
    """Answers "what happened to my payment?" from any identifier the client holds."""

    def __init__(self):
        self.transaction_repo = PaymentTransactionRepository()
        self.intent_repo = PaymentIntentRepository()
        self.subscription_repo = SubscriptionRepository()
        self.activation_service = PaymentActivationService()
        self.reconciliation_service = ReconciliationService()

    @trace_span
    async def resolve(
        self, query: StatusQuery, now: Optional[datetime] = None
    ) -> StatusResult:
        """Resolve ``query`` to a status. Never raises; failures report ``error``."""
        now = now or datetime.now(timezone.utc)
        try:
            return await self._resolve(query, now)
        except Exception as e:
            logger.error(
                f"Error resolving payment status: {str(e)}",
                exc_info=True,
                extra={"query": query.model_dump(exclude_none=True)},
            )
            return StatusResult(
                status=PollStatus.ERROR,
                message=MESSAGES[PollStatus.ERROR],
                checked_at=now,
            )

    async def _resolve(self, query: StatusQuery, now: datetime) -> StatusResult:
        if query.is_empty:
            return StatusResult(
                status=PollStatus.NOT_FOUND,
                message="No payment identifier supplied",
                checked_at=now,
            )

        txn = await self._find_transaction(query)
        if txn is not None:
            return await self._resolve_transaction(txn, query, now)

        if query.subscription_id:
            return await self._resolve_subscription(query, now)

        return StatusResult(
            status=PollStatus.NOT_FOUND,
            message=MESSAGES[PollStatus.NOT_FOUND],
            checked_at=now,
        )

    async def _find_transaction(self, query: StatusQuery) -> Optional[PaymentTransaction]:
        txn = await self.transaction_repo.find_by_identifiers(query.local_identifiers)
        if txn is None and query.payment_intent_id:
            txn = await self.transaction_repo.get_latest_for_intent(
                query.payment_intent_id
            )
        if txn is None and query.subscription_id:
            txn = await self.transaction_repo.get_latest_for_subscription(
                query.subscription_id
            )
        if txn is not None and query.user_id and txn.user_id != query.user_id:
            logger.warning(
                f"User {query.user_id} polled transaction {txn.transaction_id} of another user",
                extra={"user_id": query.user_id, "transaction_id": txn.transaction_id},
            )
            return None
        return txn

    async def _resolve_transaction(
        self, txn: PaymentTransaction, query: StatusQuery, now: datetime
    ) -> StatusResult:
        subscription = None
        gateway_status = txn.gateway_status

        if txn.status == TransactionStatus.PENDING or query.has_gateway_identifier:
            lookup = await self.reconciliation_service.verify_with_gateway(txn)
            result = await self.reconciliation_service.apply_lookup(txn, lookup)
            txn = result.transaction or txn
            subscription = result.subscription
            gateway_status = result.gateway_status or gateway_status
            if txn.status == TransactionStatus.PENDING:
                await self._expire_stale_intent(txn, now)

        if subscription is None:
            subscription = await self._subscription_for(txn)

        status = _POLL_STATUS[txn.status]
        message = MESSAGES[status]
        if status == PollStatus.FAILED and txn.gateway_code:
            message = f"{message} (code {txn.gateway_code})"
        return StatusResult(
            status=status,
            message=message,
            transaction=txn,
            subscription=subscription,
            gateway_status=gateway_status,
            checked_at=now,
        )

    async def _subscription_for(self, txn: PaymentTransaction) -> Optional[Subscription]:
        if txn.subscription_id:
            return await self.subscription_repo.get(txn.subscription_id)
        return await self.subscription_repo.get_by_transaction_id(txn.id)

    async def _expire_stale_intent(self, txn: PaymentTransaction, now: datetime) -> None:
        if not txn.payment_intent_id:
            return
        intent = await self.intent_repo.get(txn.payment_intent_id)
        if intent and intent.status == PaymentIntentStatus.PENDING and intent.is_expired(now):
            await self.intent_repo.update(
                intent.id, PaymentIntentUpdateModel(status=PaymentIntentStatus.EXPIRED)
            )
            logger.info(
                f"Payment intent {intent.id} expired while awaiting payment",
                extra={"payment_intent_id": intent.id},
            )

    async def _resolve_subscription(
        self, query: StatusQuery, now: datetime
    ) -> StatusResult:
        subscription = await self.subscription_repo.get(query.subscription_id)
        if subscription is None or (
            query.user_id and subscription.user_id != query.user_id
        ):
            return StatusResult(
                status=PollStatus.NOT_FOUND,
                message="Subscription not found",
                checked_at=now,
            )

        if subscription.status == SubscriptionStatus.ACTIVE and subscription.payment_confirmed:
            return self._subscription_result(PollStatus.COMPLETED, subscription, now)
        if subscription.status == SubscriptionStatus.PAYMENT_FAILED:
            return self._subscription_result(PollStatus.FAILED, subscription, now)

        reference = subscription.transaction_id
        if subscription.status != SubscriptionStatus.PENDING or not reference:
            return self._subscription_result(PollStatus.PENDING, subscription, now)

        lookup = await self._direct_lookup(reference)
        resolved = lookup.resolved_status
        gateway_status = lookup.data.status if lookup.success else None
        if resolved == TransactionStatus.COMPLETED:
            subscription = await self.activation_service.activate_subscription(
                subscription.id, now
            )
            status = PollStatus.COMPLETED
        elif resolved == TransactionStatus.FAILED:
            subscription = await self.activation_service.fail_subscription(
                subscription.id, lookup.data.error_code
            )
            status = PollStatus.FAILED
        else:
            status = PollStatus.PENDING
        return self._subscription_result(status, subscription, now, gateway_status)

    async def _direct_lookup(self, reference: str) -> GatewayLookupResult:
        gateway = self.reconciliation_service.gateway
        lookup = await gateway.get_transaction_by_number(reference)
        if not lookup.success:
            lookup = await gateway.get_invoice(reference)
        return lookup

    def _subscription_result(
        self,
        status: PollStatus,
        subscription: Optional[Subscription],
        now: datetime,
        gateway_status: Optional[str] = None,
    ) -> StatusResult:
        return StatusResult(
            status=status,
            message=MESSAGES[status],
            subscription=subscription,
            gateway_status=gateway_status,
            checked_at=now,
        )
