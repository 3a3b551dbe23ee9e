"""
Payment status polling route.

Always answers 200 with a status envelope, whatever happens underneath, so
that the status page can keep polling.
"""

from datetime import datetime, timezone
from functools import wraps
from typing import Optional

from fastapi import APIRouter, Depends, Request

from common.core.otel_axiom_exporter import get_logger
from packages.auth.dependencies import get_optional_user
from packages.auth.models.domain.authenticated_user import AuthenticatedUser
from packages.payments.models.domain.enums import PollStatus
from packages.payments.models.domain.status import StatusQuery, StatusResult
from packages.payments.models.schemas.status import StatusEnvelope
from packages.payments.polling import PollingPolicy
from packages.payments.services.status_service import MESSAGES, StatusService

logger = get_logger(__name__)

router = APIRouter()

polling_policy = PollingPolicy()

# Accepted spellings per identifier, camelCase first
QUERY_ALIASES = {
    "transaction_id": ("transactionId", "transaction_id", "txn_id", "txnId"),
    "payment_intent_id": ("paymentIntentId", "payment_intent_id"),
    "invoice_id": ("invoiceId", "invoice_id"),
    "subscription_id": ("subscriptionId", "subscription_id"),
    "order_number": ("orderNumber", "order_number"),
    "transaction_no": ("transactionNo", "transaction_no"),
}


def status_query_from_request(
    request: Request, user: Optional[AuthenticatedUser] = None
) -> StatusQuery:
    params = request.query_params
    values = {}
    for field, aliases in QUERY_ALIASES.items():
        for alias in aliases:
            value = (params.get(alias) or "").strip()
            if value:
                values[field] = value
                break
    return StatusQuery(user_id=user.user_id if user else None, **values)


def poll_attempt(request: Request) -> int:
    """Client-reported poll count; garbage counts as the first attempt."""
    try:
        return max(int(request.query_params.get("attempt", 0)), 0)
    except ValueError:
        return 0


def envelope_on_error(handler):
    """Error boundary: any uncaught error becomes a 200 ``error`` envelope."""

    @wraps(handler)
    async def wrapper(*args, **kwargs) -> StatusEnvelope:
        try:
            return await handler(*args, **kwargs)
        except Exception as e:
            logger.error(f"Error building payment status: {str(e)}", exc_info=True)
            now = datetime.now(timezone.utc)
            return StatusEnvelope.build(
                StatusResult(
                    status=PollStatus.ERROR,
                    message=MESSAGES[PollStatus.ERROR],
                    checked_at=now,
                ),
                StatusQuery(),
                polling_policy,
            )

    return wrapper


@router.get("/transaction-status", response_model=StatusEnvelope)
@envelope_on_error
async def get_transaction_status(
    request: Request,
    current_user: Optional[AuthenticatedUser] = Depends(get_optional_user),
):
    """
    Current status of a payment, by any identifier the client holds.

    A pending payment is re-verified with the gateway on every call, so
    polling also settles payments whose callback never arrived. A ``status``
    query parameter sent by the client is ignored.
    """
    query = status_query_from_request(request, current_user)
    status_service = StatusService()
    result = await status_service.resolve(query)
    return StatusEnvelope.build(result, query, polling_policy, poll_attempt(request))
