"""
Paylink callback and gateway health routes.

Public endpoints (no auth required): Paylink and the customer's browser call
them. Outcomes are never trusted from the request; each one is verified with
the gateway before anything changes.
"""

from fastapi import APIRouter, Request
from fastapi.responses import Response

from packages.payments.callbacks.paylink_callback import (
    handle_paylink_callback,
    handle_three_ds_bounce,
    handle_three_ds_callback,
)
from packages.payments.models.domain.gateway import GatewayHealth
from packages.payments.providers.gateway.factory import get_payment_gateway

router = APIRouter()


@router.post("/callback")
async def paylink_callback(request: Request) -> Response:
    """Server-to-server payment notification; answers with a 303 redirect."""
    return await handle_paylink_callback(request)


@router.get("/callback")
async def paylink_return(request: Request) -> Response:
    """Browser return from the payment page; answers with a 302 redirect."""
    return await handle_paylink_callback(request)


@router.post("/3ds-callback")
async def paylink_three_ds_callback(request: Request) -> Response:
    return await handle_three_ds_callback(request)


@router.get("/3ds-callback")
async def paylink_three_ds_bounce(request: Request) -> Response:
    return await handle_three_ds_bounce(request)


@router.get("/status", response_model=GatewayHealth)
async def paylink_status():
    """Whether Paylink credentials are configured and currently accepted."""
    gateway = get_payment_gateway()
    return await gateway.check_configuration()
