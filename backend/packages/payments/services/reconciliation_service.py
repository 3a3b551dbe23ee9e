"""
Service that turns an inbound gateway callback into a verified outcome.
"""

from typing import List, Optional, Tuple

from common.core.otel_axiom_exporter import trace_span, get_logger
from common.core.redaction import redact_sensitive
from packages.payments.callbacks.identifier_extraction import collect_identifiers
from packages.payments.exceptions import ReconciliationAmbiguous
from packages.payments.models.domain.enums import TransactionStatus
from packages.payments.models.domain.gateway import GatewayLookupResult
from packages.payments.models.domain.payment_transaction import PaymentTransaction
from packages.payments.models.domain.reconciliation import (
    CallbackContext,
    ReconciliationResult,
)
from packages.payments.providers.gateway.factory import get_payment_gateway
from packages.payments.repositories.payment_transaction_repository import (
    PaymentTransactionRepository,
)
from packages.payments.services.activation_service import PaymentActivationService

logger = get_logger(__name__)


class ReconciliationService:
    """
    Maps a callback to a local transaction and settles it from the gateway's view.

    The callback's own status field is never trusted; only a gateway lookup can
    move a transaction to a terminal state.
    """

    def __init__(self):
        self.transaction_repo = PaymentTransactionRepository()
        self.activation_service = PaymentActivationService()
        self.gateway = get_payment_gateway()

    @trace_span
    async def reconcile(self, context: CallbackContext) -> ReconciliationResult:
        """
        Reconcile one callback.

        Raises:
            ReconciliationAmbiguous: no identifier, or none that maps to a transaction
        """
        identifiers = collect_identifiers(context.payload, context.url)
        logger.info(
            f"Reconciling {context.source.value} callback",
            extra={
                "source": context.source.value,
                "identifiers": identifiers,
                "payload": redact_sensitive(context.payload),
            },
        )
        if not identifiers:
            raise ReconciliationAmbiguous("Callback carried no payment identifier")

        txn = await self.transaction_repo.find_by_identifiers(identifiers)
        if txn is None:
            raise ReconciliationAmbiguous(
                f"No transaction matches callback identifiers {identifiers}",
                identifiers=identifiers,
            )

        if txn.status.is_terminal():
            logger.info(
                f"Transaction {txn.transaction_id} already {txn.status.value}, callback is a duplicate",
                extra={"transaction_id": txn.transaction_id},
            )
            return ReconciliationResult(
                status=txn.status,
                transaction=txn,
                identifiers=identifiers,
                gateway_code=txn.gateway_code or context.gateway_code,
                gateway_status=txn.gateway_status,
            )

        lookup = await self.verify_with_gateway(txn)
        result = await self.apply_lookup(txn, lookup)
        result.identifiers = identifiers
        if result.gateway_code is None and context.authentication_failed:
            result.gateway_code = context.gateway_code
        return result

    def _lookup_plan(self, txn: PaymentTransaction) -> List[Tuple[str, str]]:
        plan: List[Tuple[str, str]] = []
        candidates = (
            ("transaction", txn.transaction_no),
            ("invoice", txn.paylink_invoice_id),
            ("transaction", txn.paylink_reference),
            ("transaction", txn.order_number or txn.transaction_id),
        )
        seen = set()
        for kind, identifier in candidates:
            if identifier and identifier not in seen:
                seen.add(identifier)
                plan.append((kind, identifier))
        return plan

    @trace_span
    async def verify_with_gateway(self, txn: PaymentTransaction) -> GatewayLookupResult:
        """
        Ask the gateway for the current status of ``txn``.

        Transaction-number lookup first, then invoice, then our own reference.
        Never raises; an unreachable gateway yields ``success=False``.
        """
        lookup = GatewayLookupResult.unavailable("No gateway identifier on transaction")
        for kind, identifier in self._lookup_plan(txn):
            if kind == "invoice":
                lookup = await self.gateway.get_invoice(identifier)
            else:
                lookup = await self.gateway.get_transaction_by_number(identifier)
            if lookup.success:
                return lookup
        logger.warning(
            f"Gateway could not confirm status of {txn.transaction_id}: {lookup.data.error_message}",
            extra={"transaction_id": txn.transaction_id},
        )
        return lookup

    @trace_span
    async def apply_lookup(
        self, txn: PaymentTransaction, lookup: GatewayLookupResult
    ) -> ReconciliationResult:
        """Apply a gateway lookup to ``txn`` through the idempotent activation routine."""
        resolved = lookup.resolved_status
        gateway_status: Optional[str] = lookup.data.status if lookup.success else None

        if resolved == TransactionStatus.COMPLETED:
            outcome = await self.activation_service.complete(txn.id, lookup.data)
        elif resolved == TransactionStatus.FAILED:
            outcome = await self.activation_service.fail(txn.id, lookup.data)
        else:
            return ReconciliationResult(
                status=txn.status,
                transaction=txn,
                gateway_status=gateway_status,
                gateway_code=lookup.data.error_code if lookup.success else None,
            )

        return ReconciliationResult(
            status=outcome.transaction.status,
            transaction=outcome.transaction,
            subscription=outcome.subscription,
            gateway_status=gateway_status,
            gateway_code=lookup.data.error_code or outcome.transaction.gateway_code,
        )
