"""
Paylink callback handlers.

Handles the requests Paylink (or the customer's browser, sent by Paylink)
makes after a payment attempt:
- Server-to-server callback (POST) and browser return (GET)
- 3-D Secure result (POST from the ACS, or GET bounce in the browser)

Every handler answers with a redirect to the client-facing payment status page.
The page polls the status endpoint, so a "pending" redirect is always safe.
"""

from functools import wraps
from typing import Any, Awaitable, Callable, Dict, Optional
from urllib.parse import urlencode

from fastapi import Request
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse, Response

from common.core.config import settings
from common.core.otel_axiom_exporter import get_logger
from common.core.redaction import redact_sensitive
from packages.payments.callbacks.payload_parser import (
    merge_payload,
    parse_callback_body,
)
from packages.payments.callbacks.three_ds import (
    build_auto_submit_form,
    detect_authentication_failure,
    has_bounce_fields,
)
from packages.payments.exceptions import ReconciliationAmbiguous
from packages.payments.models.domain.enums import CallbackSource, RedirectStatus
from packages.payments.models.domain.reconciliation import (
    CallbackContext,
    ReconciliationResult,
)
from packages.payments.services.reconciliation_service import ReconciliationService

logger = get_logger(__name__)

Handler = Callable[..., Awaitable[Response]]


def status_page_url(
    request: Request, status: RedirectStatus, **params: Optional[str]
) -> str:
    """Client-facing status page URL with ``status`` and any non-empty params."""
    base = settings.app_base_url or str(request.base_url)
    query: Dict[str, Any] = {"status": status.value}
    query.update({key: value for key, value in params.items() if value})
    return f"{base.rstrip('/')}{settings.payment_status_path}?{urlencode(query)}"


def redirect_status_code(request: Request) -> int:
    """303 after a POST so the browser follows with GET; 302 for GET callbacks."""
    return 303 if request.method == "POST" else 302


def redirect_on_error(json_errors: bool = False) -> Callable[[Handler], Handler]:
    """
    Error boundary for callback entry points.

    Any uncaught error becomes a redirect with ``status=error``; with
    ``json_errors`` a client that asked for JSON gets a 200 error body instead.
    """

    def decorator(handler: Handler) -> Handler:
        @wraps(handler)
        async def wrapper(request: Request, *args, **kwargs) -> Response:
            try:
                return await handler(request, *args, **kwargs)
            except Exception as e:
                logger.error(
                    f"Error handling Paylink callback {request.method} {request.url.path}: {str(e)}",
                    exc_info=True,
                    extra={"path": request.url.path},
                )
                accept = request.headers.get("accept", "")
                if json_errors and "application/json" in accept:
                    return JSONResponse(
                        status_code=200,
                        content={
                            "success": False,
                            "status": "error",
                            "message": "Payment could not be verified, please check the payment status page",
                        },
                    )
                return RedirectResponse(
                    status_page_url(request, RedirectStatus.ERROR),
                    status_code=redirect_status_code(request),
                )

        return wrapper

    return decorator


async def read_callback_payload(request: Request) -> Dict[str, Any]:
    """Body fields (for POST) merged over query parameters."""
    body: Dict[str, Any] = {}
    if request.method == "POST":
        raw = await request.body()
        body = parse_callback_body(request.headers.get("content-type"), raw)
    return merge_payload(body, dict(request.query_params))


async def _reconcile_and_redirect(request: Request, context: CallbackContext) -> Response:
    try:
        result = await ReconciliationService().reconcile(context)
    except ReconciliationAmbiguous as e:
        logger.warning(
            f"Unmatched Paylink callback: {str(e)}",
            extra={
                "identifiers": e.identifiers,
                "payload": redact_sensitive(context.payload),
            },
        )
        result = ReconciliationResult(
            identifiers=e.identifiers,
            gateway_code=context.gateway_code,
            ambiguous=True,
        )

    txn = result.transaction
    redirect_status = result.redirect_status
    logger.info(
        f"Callback ({context.source.value}) resolved to {redirect_status.value}",
        extra={
            "transaction_id": txn.transaction_id if txn else None,
            "status": result.status.value,
            "ambiguous": result.ambiguous,
        },
    )
    url = status_page_url(
        request,
        redirect_status,
        txn_id=txn.transaction_id
        if txn
        else (result.identifiers[0] if result.identifiers else None),
        invoice_id=txn.paylink_invoice_id if txn else None,
        code=result.gateway_code if redirect_status != RedirectStatus.SUCCESS else None,
    )
    return RedirectResponse(url, status_code=redirect_status_code(request))


@redirect_on_error()
async def handle_paylink_callback(request: Request) -> Response:
    """Standard callback: server POST or the browser returning from the payment page."""
    payload = await read_callback_payload(request)
    context = CallbackContext(
        source=CallbackSource.STANDARD
        if request.method == "POST"
        else CallbackSource.BROWSER,
        payload=payload,
        url=str(request.url),
    )
    return await _reconcile_and_redirect(request, context)


@redirect_on_error(json_errors=True)
async def handle_three_ds_callback(request: Request) -> Response:
    """3-D Secure result posted by the ACS (PaRes/MD)."""
    payload = await read_callback_payload(request)
    authentication_failed, gateway_code = detect_authentication_failure(payload)
    if authentication_failed:
        logger.info(
            f"3DS authentication reported failure (code={gateway_code}), verifying with gateway"
        )
    context = CallbackContext(
        source=CallbackSource.THREE_DS,
        payload=payload,
        url=str(request.url),
        authentication_failed=authentication_failed,
        gateway_code=gateway_code,
    )
    return await _reconcile_and_redirect(request, context)


@redirect_on_error()
async def handle_three_ds_bounce(request: Request) -> Response:
    """
    Browser GET on the 3DS URL.

    With PaRes present the result is re-POSTed to the 3DS endpoint through an
    auto-submitting form; otherwise the browser goes straight to the status page
    as pending, whatever status the query claims, and the page polls for the
    verified outcome.
    """
    params = dict(request.query_params)
    if has_bounce_fields(params):
        action = str(request.url.replace(query=""))
        return HTMLResponse(build_auto_submit_form(action, params))

    reference = params.get("txn_id") or params.get("orderNumber")
    return RedirectResponse(
        status_page_url(request, RedirectStatus.PENDING, txn_id=reference),
        status_code=302,
    )
