"""
Payment history route.

Authenticated listing of the caller's own payment attempts, as recorded
locally; the gateway is not consulted.
"""

from fastapi import APIRouter, Depends, Query

from packages.auth.dependencies import get_current_active_user
from packages.auth.models.domain.authenticated_user import AuthenticatedUser
from packages.payments.models.schemas.history import PaymentHistoryResponse
from packages.payments.services.history_service import (
    MAX_PAGE_SIZE,
    PaymentHistoryService,
)

router = APIRouter()


@router.get("", response_model=PaymentHistoryResponse)
async def list_my_payments(
    limit: int = Query(50, ge=1, le=MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0),
    current_user: AuthenticatedUser = Depends(get_current_active_user),
):
    """Payment transactions of the current user, newest first."""
    history_service = PaymentHistoryService()
    transactions = await history_service.list_for_user(
        current_user.user_id, limit=limit, offset=offset
    )
    return PaymentHistoryResponse.from_domain(transactions, limit, offset)
