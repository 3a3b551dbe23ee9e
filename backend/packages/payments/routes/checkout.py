"""
Checkout API routes.

Authenticated, rate-limited entry point that opens a Paylink payment page.
"""

from fastapi import APIRouter, Depends, HTTPException, Request, status

from common.core.config import settings
from common.core.exceptions import ValidationError
from common.core.otel_axiom_exporter import get_logger
from common.providers.rate_limiter.limiter import limiter
from packages.auth.dependencies import get_current_active_user
from packages.auth.models.domain.authenticated_user import AuthenticatedUser
from packages.payments.exceptions import AuthenticationError, InvoiceCreationError
from packages.payments.models.schemas.checkout import CheckoutRequest, CheckoutResult
from packages.payments.services.checkout_service import CheckoutService

logger = get_logger(__name__)

router = APIRouter()


@router.post("/checkout", response_model=CheckoutResult)
@limiter.limit(settings.checkout_rate_limit)
async def create_checkout(
    request: Request,
    checkout_request: CheckoutRequest,
    current_user: AuthenticatedUser = Depends(get_current_active_user),
):
    """
    Start a payment for a subscription plan.

    Returns the hosted payment page URL plus every identifier the client can
    later poll with. No subscription exists until the payment is confirmed.
    """
    checkout_service = CheckoutService()
    try:
        return await checkout_service.initiate_checkout(
            current_user.user_id, checkout_request, str(request.base_url)
        )
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except AuthenticationError as e:
        logger.error(f"Checkout unavailable, gateway auth failed: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Payment gateway is temporarily unavailable",
        )
    except InvoiceCreationError as e:
        logger.error(f"Checkout failed, no invoice: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Payment gateway could not create the invoice",
        )
