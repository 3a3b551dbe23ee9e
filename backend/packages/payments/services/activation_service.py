"""
Service that applies confirmed gateway outcomes.

Both the callback handlers and the polling endpoint converge here. Every
operation runs in one database transaction, re-reads the rows it mutates under
a row lock, and treats "already in the target state" as a successful no-op, so
it is safe to call any number of times, concurrently or not.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from common.core.exceptions import NotFoundError
from common.core.otel_axiom_exporter import trace_span, get_logger
from common.core.redaction import redact_sensitive
from common.db.scoped import transaction
from packages.payments.exceptions import StateConflict
from packages.payments.models.domain.enums import (
    PaymentIntentStatus,
    TransactionStatus,
)
from packages.payments.models.domain.gateway import GatewayPaymentData
from packages.payments.models.domain.payment_intent import (
    PaymentIntent,
    PaymentIntentUpdateModel,
)
from packages.payments.models.domain.payment_transaction import (
    PaymentTransaction,
    PaymentTransactionUpdateModel,
)
from packages.payments.models.domain.reconciliation import ActivationResult
from packages.payments.repositories.payment_intent_repository import (
    PaymentIntentRepository,
)
from packages.payments.repositories.payment_transaction_repository import (
    PaymentTransactionRepository,
)
from packages.subscriptions.models.domain.enums import (
    SubscriptionAction,
    SubscriptionStatus,
    SubscriptionType,
)
from packages.subscriptions.models.domain.history import (
    SubscriptionHistoryCreateModel,
)
from packages.subscriptions.models.domain.subscription import (
    Subscription,
    SubscriptionCreateModel,
    SubscriptionUpdateModel,
)
from packages.subscriptions.repositories.history_repository import (
    SubscriptionHistoryRepository,
)
from packages.subscriptions.repositories.subscription_repository import (
    SubscriptionRepository,
)
from packages.subscriptions.services.promo_code_service import PromoCodeService

logger = get_logger(__name__)


def _verification_snapshot(
    existing: Optional[Dict[str, Any]],
    gateway_data: Optional[GatewayPaymentData],
    now: datetime,
) -> Dict[str, Any]:
    snapshot = dict(existing or {})
    if gateway_data is not None:
        snapshot["verification"] = {
            "status": gateway_data.status,
            "paid_date": gateway_data.paid_date,
            "error_code": gateway_data.error_code,
            "checked_at": now.isoformat(),
            "response": redact_sensitive(gateway_data.raw),
        }
    return snapshot


class PaymentActivationService:
    """Idempotent complete/fail transitions for transactions and subscriptions."""

    def __init__(self):
        self.transaction_repo = PaymentTransactionRepository()
        self.intent_repo = PaymentIntentRepository()
        self.subscription_repo = SubscriptionRepository()
        self.history_repo = SubscriptionHistoryRepository()
        self.promo_code_service = PromoCodeService()

    async def _linked_subscription(
        self, txn: PaymentTransaction
    ) -> Optional[Subscription]:
        if txn.subscription_id:
            return await self.subscription_repo.get(txn.subscription_id)
        return await self.subscription_repo.get_by_transaction_id(txn.id)

    # ------------------------------------------------------------------
    # Completion
    # ------------------------------------------------------------------

    @trace_span
    async def complete(
        self,
        transaction_id: str,
        gateway_data: Optional[GatewayPaymentData] = None,
        now: Optional[datetime] = None,
    ) -> ActivationResult:
        """
        Mark a transaction completed and activate its subscription exactly once.

        Args:
            transaction_id: Row id of the payment transaction
            gateway_data: The gateway lookup that confirmed the payment
            now: Activation time (start of the subscription period)

        Raises:
            NotFoundError: no such transaction
        """
        now = now or datetime.now(timezone.utc)
        try:
            async with transaction():
                txn = await self.transaction_repo.get_for_update(transaction_id)
                if txn is None:
                    raise NotFoundError(f"Transaction {transaction_id} not found")

                if txn.status == TransactionStatus.COMPLETED:
                    logger.info(
                        f"Transaction {txn.transaction_id} already completed, nothing to do",
                        extra={"transaction_id": txn.transaction_id},
                    )
                    return ActivationResult(
                        transaction=txn,
                        subscription=await self._linked_subscription(txn),
                    )
                if txn.status == TransactionStatus.FAILED:
                    raise StateConflict(
                        f"Transaction {txn.transaction_id} already failed",
                        current_status=txn.status.value,
                    )

                intent = (
                    await self.intent_repo.get_for_update(txn.payment_intent_id)
                    if txn.payment_intent_id
                    else None
                )
                subscription = await self._activate_for_transaction(txn, intent, now)

                txn = await self.transaction_repo.update(
                    txn.id,
                    PaymentTransactionUpdateModel(
                        status=TransactionStatus.COMPLETED,
                        subscription_id=subscription.id
                        if subscription
                        else txn.subscription_id,
                        transaction_no=txn.transaction_no
                        or (gateway_data.transaction_no if gateway_data else None),
                        gateway_status=gateway_data.status if gateway_data else None,
                        gateway_code=gateway_data.error_code if gateway_data else None,
                        payment_gateway_response=_verification_snapshot(
                            txn.payment_gateway_response, gateway_data, now
                        ),
                        completed_at=now,
                    ),
                )

                if intent is not None and intent.status in (
                    PaymentIntentStatus.PENDING,
                    PaymentIntentStatus.EXPIRED,
                ):
                    await self.intent_repo.update(
                        intent.id,
                        PaymentIntentUpdateModel(
                            status=PaymentIntentStatus.COMPLETED, completed_at=now
                        ),
                    )
                    # Counter moves with the intent flip, so at most once per payment
                    if intent.promo_code:
                        await self.promo_code_service.redeem(intent.promo_code)

                logger.info(
                    f"Transaction {txn.transaction_id} completed",
                    extra={
                        "transaction_id": txn.transaction_id,
                        "subscription_id": subscription.id if subscription else None,
                    },
                )
                return ActivationResult(
                    transaction=txn, subscription=subscription, changed=True
                )
        except StateConflict as e:
            logger.warning(
                f"Ignoring completion: {str(e)}",
                extra={"transaction_id": transaction_id, "current": e.current_status},
            )
            txn = await self.transaction_repo.get(transaction_id)
            return ActivationResult(
                transaction=txn,
                subscription=await self._linked_subscription(txn),
                conflict=True,
            )

    async def _activate_for_transaction(
        self,
        txn: PaymentTransaction,
        intent: Optional[PaymentIntent],
        now: datetime,
    ) -> Optional[Subscription]:
        # Legacy path: a pending subscription row already exists
        legacy_id = txn.subscription_id or (intent.subscription_id if intent else None)
        if legacy_id:
            subscription = await self.subscription_repo.get_for_update(legacy_id)
            if subscription is not None:
                return await self._activate_existing(subscription, txn, intent, now)
            logger.warning(
                f"Subscription {legacy_id} linked to {txn.transaction_id} does not exist"
            )

        existing = await self.subscription_repo.get_by_transaction_id(txn.id)
        if existing is None and intent is not None:
            existing = await self.subscription_repo.get_by_payment_intent_id(intent.id)
        if existing is not None:
            return existing

        if intent is None:
            logger.warning(
                f"Transaction {txn.transaction_id} has no payment intent; no subscription created",
                extra={"transaction_id": txn.transaction_id},
            )
            return None

        customer = (txn.payment_gateway_response or {}).get("customer") or {}
        subscription = await self.subscription_repo.create(
            SubscriptionCreateModel(
                user_id=txn.user_id,
                plan_id=intent.plan_id,
                subscription_type=intent.subscription_type,
                amount=intent.net_amount,
                status=SubscriptionStatus.ACTIVE,
                payment_confirmed=True,
                started_date=now,
                expired_date=intent.subscription_type.period_end(now),
                transaction_id=txn.id,
                payment_intent_id=intent.id,
                promo_code=intent.promo_code,
                discount_amount=intent.discount_amount,
                customer_name=customer.get("name"),
                customer_email=customer.get("email"),
                customer_phone=customer.get("phone"),
            )
        )
        await self._record(subscription, SubscriptionAction.CREATED, txn)
        return subscription

    async def _activate_existing(
        self,
        subscription: Subscription,
        txn: Optional[PaymentTransaction],
        intent: Optional[PaymentIntent],
        now: datetime,
    ) -> Subscription:
        if subscription.status == SubscriptionStatus.ACTIVE and subscription.payment_confirmed:
            return subscription

        subscription_type = (
            intent.subscription_type if intent else subscription.subscription_type
        ) or SubscriptionType.MONTHLY
        links = {}
        if txn is not None:
            links["transaction_id"] = txn.id
        if intent is not None and subscription.payment_intent_id is None:
            links["payment_intent_id"] = intent.id

        activated = await self.subscription_repo.update(
            subscription.id,
            SubscriptionUpdateModel(
                status=SubscriptionStatus.ACTIVE,
                payment_confirmed=True,
                started_date=now,
                expired_date=subscription_type.period_end(now),
                **links,
            ),
        )
        await self._record(activated, SubscriptionAction.ACTIVATED, txn)
        return activated

    async def _record(
        self,
        subscription: Subscription,
        action: SubscriptionAction,
        txn: Optional[PaymentTransaction],
        gateway_code: Optional[str] = None,
    ) -> None:
        details: Dict[str, Any] = {
            "status": subscription.status.value,
            "expired_date": subscription.expired_date.isoformat()
            if subscription.expired_date
            else None,
        }
        if txn is not None:
            details["transaction_id"] = txn.transaction_id
            details["amount"] = str(txn.amount)
        if gateway_code:
            details["gateway_code"] = gateway_code
        await self.history_repo.create(
            SubscriptionHistoryCreateModel(
                subscription_id=subscription.id,
                user_id=subscription.user_id,
                action=action,
                details=details,
            )
        )

    # ------------------------------------------------------------------
    # Failure
    # ------------------------------------------------------------------

    @trace_span
    async def fail(
        self,
        transaction_id: str,
        gateway_data: Optional[GatewayPaymentData] = None,
        now: Optional[datetime] = None,
    ) -> ActivationResult:
        """
        Mark a transaction failed after the gateway confirmed the failure.

        A completed transaction is never downgraded. Any tentative subscription
        that is not already active moves to ``payment_failed`` with its dates cleared.
        """
        now = now or datetime.now(timezone.utc)
        try:
            async with transaction():
                txn = await self.transaction_repo.get_for_update(transaction_id)
                if txn is None:
                    raise NotFoundError(f"Transaction {transaction_id} not found")

                if txn.status == TransactionStatus.FAILED:
                    return ActivationResult(
                        transaction=txn,
                        subscription=await self._linked_subscription(txn),
                    )
                if txn.status == TransactionStatus.COMPLETED:
                    raise StateConflict(
                        f"Transaction {txn.transaction_id} already completed",
                        current_status=txn.status.value,
                    )

                gateway_code = gateway_data.error_code if gateway_data else None
                txn = await self.transaction_repo.update(
                    txn.id,
                    PaymentTransactionUpdateModel(
                        status=TransactionStatus.FAILED,
                        gateway_status=gateway_data.status if gateway_data else None,
                        gateway_code=gateway_code,
                        payment_gateway_response=_verification_snapshot(
                            txn.payment_gateway_response, gateway_data, now
                        ),
                    ),
                )

                intent = (
                    await self.intent_repo.get_for_update(txn.payment_intent_id)
                    if txn.payment_intent_id
                    else None
                )
                if intent is not None and intent.status == PaymentIntentStatus.PENDING:
                    await self.intent_repo.update(
                        intent.id,
                        PaymentIntentUpdateModel(status=PaymentIntentStatus.FAILED),
                    )

                subscription = None
                legacy_id = txn.subscription_id or (
                    intent.subscription_id if intent else None
                )
                if legacy_id:
                    subscription = await self.subscription_repo.get_for_update(legacy_id)
                    if subscription is not None:
                        subscription = await self._mark_payment_failed(
                            subscription, txn, gateway_code
                        )

                logger.info(
                    f"Transaction {txn.transaction_id} failed",
                    extra={
                        "transaction_id": txn.transaction_id,
                        "gateway_code": gateway_code,
                    },
                )
                return ActivationResult(
                    transaction=txn, subscription=subscription, changed=True
                )
        except StateConflict as e:
            logger.warning(
                f"Ignoring failure: {str(e)}",
                extra={"transaction_id": transaction_id, "current": e.current_status},
            )
            txn = await self.transaction_repo.get(transaction_id)
            return ActivationResult(
                transaction=txn,
                subscription=await self._linked_subscription(txn),
                conflict=True,
            )

    async def _mark_payment_failed(
        self,
        subscription: Subscription,
        txn: Optional[PaymentTransaction],
        gateway_code: Optional[str],
    ) -> Subscription:
        if subscription.status in (
            SubscriptionStatus.ACTIVE,
            SubscriptionStatus.PAYMENT_FAILED,
        ):
            return subscription
        failed = await self.subscription_repo.update(
            subscription.id,
            SubscriptionUpdateModel(
                status=SubscriptionStatus.PAYMENT_FAILED,
                payment_confirmed=False,
                started_date=None,
                expired_date=None,
            ),
        )
        await self._record(failed, SubscriptionAction.PAYMENT_FAILED, txn, gateway_code)
        return failed

    # ------------------------------------------------------------------
    # Subscription-only fallbacks (no local transaction row)
    # ------------------------------------------------------------------

    @trace_span
    async def activate_subscription(
        self, subscription_id: str, now: Optional[datetime] = None
    ) -> Optional[Subscription]:
        """Activate a legacy subscription whose payment was confirmed directly."""
        now = now or datetime.now(timezone.utc)
        async with transaction():
            subscription = await self.subscription_repo.get_for_update(subscription_id)
            if subscription is None:
                return None
            if subscription.status == SubscriptionStatus.PAYMENT_FAILED:
                logger.warning(
                    f"Subscription {subscription_id} already marked payment_failed; not activating"
                )
                return subscription
            return await self._activate_existing(subscription, None, None, now)

    @trace_span
    async def fail_subscription(
        self, subscription_id: str, gateway_code: Optional[str] = None
    ) -> Optional[Subscription]:
        async with transaction():
            subscription = await self.subscription_repo.get_for_update(subscription_id)
            if subscription is None:
                return None
            return await self._mark_payment_failed(subscription, None, gateway_code)
