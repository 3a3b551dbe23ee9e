"""
Subscription API routes.

Public plan catalog plus authenticated promo preview and "my subscriptions".
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, status

from common.core.exceptions import ValidationError
from packages.auth.dependencies import get_current_active_user
from packages.auth.models.domain.authenticated_user import AuthenticatedUser
from packages.subscriptions.models.schemas.subscription import (
    PlanResponse,
    PromoCodeValidationRequest,
    PromoCodeValidationResponse,
    SubscriptionListResponse,
    SubscriptionResponse,
)
from packages.subscriptions.services.promo_code_service import PromoCodeService
from packages.subscriptions.services.subscription_service import SubscriptionService

router = APIRouter()


@router.get("/plans", response_model=list[PlanResponse])
async def list_plans():
    """Active plans with their per-period prices. Public, for pricing pages."""
    subscription_service = SubscriptionService()
    plans = await subscription_service.list_plans()
    return [PlanResponse.from_domain(plan) for plan in plans]


@router.post("/promo-codes/validate", response_model=PromoCodeValidationResponse)
async def validate_promo_code(
    body: PromoCodeValidationRequest,
    current_user: AuthenticatedUser = Depends(get_current_active_user),
):
    """
    Preview the discount a promo code gives.

    Does not consume the code; usage is only counted once a payment is confirmed.
    """
    subscription_service = SubscriptionService()
    promo_code_service = PromoCodeService()

    amount = body.amount
    if amount is None and body.plan_id:
        plan = await subscription_service.get_plan(body.plan_id)
        if plan is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND, detail="Plan not found"
            )
        amount = plan.price_for(body.subscription_type)
    if amount is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Either amount or a plan with a price for this period is required",
        )

    try:
        discount = await promo_code_service.calculate_discount(amount, body.code)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return PromoCodeValidationResponse(
        code=discount.code or body.code,
        amount=float(discount.gross_amount),
        discount=float(discount.discount_amount),
        net_amount=float(discount.net_amount),
    )


@router.get("", response_model=SubscriptionListResponse, response_model_by_alias=True)
async def list_my_subscriptions(
    current_user: AuthenticatedUser = Depends(get_current_active_user),
):
    """Subscriptions of the current user, newest first, with effective status."""
    subscription_service = SubscriptionService()
    now = datetime.now(timezone.utc)
    subscriptions = await subscription_service.list_for_user(current_user.user_id)
    responses = [SubscriptionResponse.from_domain(s, now) for s in subscriptions]
    active = next((r for r in responses if r.has_access), None)
    return SubscriptionListResponse(subscriptions=responses, active_subscription=active)
