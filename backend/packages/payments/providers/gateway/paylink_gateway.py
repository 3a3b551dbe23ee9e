"""
Paylink.sa implementation of the payment gateway.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Tuple

import httpx

from common.core.config import settings
from common.core.otel_axiom_exporter import trace_span, get_logger
from common.core.redaction import redact_sensitive
from packages.payments.exceptions import (
    AuthenticationError,
    GatewayUnavailable,
    InvoiceCreationError,
)
from packages.payments.models.domain.gateway import (
    GatewayHealth,
    GatewayInvoice,
    GatewayLookupResult,
    GatewayPaymentData,
    InvoiceRequest,
)
from packages.payments.providers.gateway.interface import PaymentGatewayInterface
from packages.payments.providers.gateway.token_cache import TokenCache
from packages.payments.utils.formatting import (
    collapse_slashes,
    format_amount,
    generate_reference_number,
)

logger = get_logger(__name__)

# Paylink names the same thing differently across endpoints and API versions
INVOICE_ID_KEYS = ("invoiceId", "invoice_id", "id", "transactionNo")
PAYMENT_URL_KEYS = ("url", "paymentUrl", "payment_url", "checkUrl", "mobileUrl")
TRANSACTION_NO_KEYS = ("transactionNo", "transaction_no", "transactionNumber")
STATUS_KEYS = ("orderStatus", "status", "paymentStatus", "invoiceStatus")
PAID_DATE_KEYS = ("paidDate", "paid_date", "paymentDate", "paidAt", "paid_at")
AMOUNT_KEYS = ("amount", "amountPaid", "total")
ERROR_CODE_KEYS = ("errorCode", "code", "responseCode", "error_code")
NESTED_KEYS = ("data", "invoice", "result", "gatewayOrderRequest")


@dataclass(frozen=True)
class EndpointProfile:
    """One flavor of the Paylink REST surface."""

    name: str
    base_url: str
    auth_path: str
    add_invoice_path: str
    invoice_path: str
    transaction_path: str


def default_endpoint_profiles() -> List[EndpointProfile]:
    """Current API first, legacy v2 REST surface as the alternate."""
    return [
        EndpointProfile(
            name="primary",
            base_url=settings.paylink_primary_base_url,
            auth_path="/api/auth",
            add_invoice_path="/api/addInvoice",
            invoice_path="/api/getInvoice/{id}",
            transaction_path="/api/getInvoice/{id}",
        ),
        EndpointProfile(
            name="alternate",
            base_url=settings.paylink_fallback_base_url,
            auth_path="/api/v2/auth",
            add_invoice_path="/api/v2/invoices",
            invoice_path="/api/v2/invoices/{id}",
            transaction_path="/api/v2/invoices/{id}",
        ),
    ]


def _candidates(data: Dict[str, Any]) -> Iterable[Dict[str, Any]]:
    yield data
    for key in NESTED_KEYS:
        nested = data.get(key)
        if isinstance(nested, dict):
            yield nested


def _first_present(data: Dict[str, Any], keys: Tuple[str, ...]) -> Optional[str]:
    for candidate in _candidates(data):
        for key in keys:
            value = candidate.get(key)
            if value not in (None, ""):
                return str(value)
    return None


def _first_error_code(data: Dict[str, Any]) -> Optional[str]:
    code = _first_present(data, ERROR_CODE_KEYS)
    if code:
        return code
    errors = data.get("paymentErrors")
    if isinstance(errors, list):
        for error in errors:
            if isinstance(error, dict):
                code = error.get("errorCode") or error.get("code") or error.get("errorTitle")
                if code:
                    return str(code)
    return None


def normalize_payment_data(raw: Dict[str, Any]) -> GatewayPaymentData:
    """Map any known Paylink lookup response onto ``GatewayPaymentData``."""
    amount = _first_present(raw, AMOUNT_KEYS)
    return GatewayPaymentData(
        status=(_first_present(raw, STATUS_KEYS) or "unknown").lower(),
        paid_date=_first_present(raw, PAID_DATE_KEYS),
        amount=format_amount(amount) if amount is not None else None,
        currency=_first_present(raw, ("currency",)),
        transaction_no=_first_present(raw, TRANSACTION_NO_KEYS),
        invoice_id=_first_present(raw, ("invoiceId", "invoice_id", "id")),
        order_number=_first_present(raw, ("orderNumber", "order_number")),
        error_code=_first_error_code(raw),
        error_message=_first_present(raw, ("errorMessage", "message", "detail")),
        raw=redact_sensitive(raw),
    )


class PaylinkGateway(PaymentGatewayInterface):
    """Paylink REST client with token caching and endpoint failover."""

    def __init__(
        self,
        token_cache: TokenCache,
        api_id: Optional[str] = None,
        secret_key: Optional[str] = None,
        profiles: Optional[List[EndpointProfile]] = None,
        currency: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.token_cache = token_cache
        self.api_id = api_id if api_id is not None else settings.paylink_api_id
        self.secret_key = (
            secret_key if secret_key is not None else settings.paylink_secret_key
        )
        self.profiles = profiles or default_endpoint_profiles()
        self.currency = currency or settings.paylink_currency
        self.timeout = httpx.Timeout(
            timeout_seconds
            if timeout_seconds is not None
            else settings.paylink_timeout_seconds
        )
        self._transport = transport

    def _client(self, profile: EndpointProfile) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=profile.base_url,
            timeout=self.timeout,
            transport=self._transport,
            headers={"Accept": "application/json"},
        )

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------

    async def _exchange_credentials(self, profile: EndpointProfile) -> Tuple[str, int]:
        async with self._client(profile) as client:
            response = await client.post(
                profile.auth_path,
                json={
                    "apiId": self.api_id,
                    "secretKey": self.secret_key,
                    "persistToken": settings.paylink_persist_token,
                },
            )
            response.raise_for_status()
            data = response.json()

        if not isinstance(data, dict):
            raise ValueError("auth response is not an object")
        token = data.get("id_token") or data.get("token") or data.get("access_token")
        if not token:
            raise ValueError("auth response did not include a token")
        lifetime = int(data.get("expires_in") or settings.paylink_token_ttl_seconds)
        return token, lifetime

    @trace_span
    async def get_auth_token(self) -> str:
        cached = self.token_cache.get()
        if cached:
            return cached

        if not (self.api_id and self.secret_key):
            raise AuthenticationError("Paylink credentials are not configured")

        async with self.token_cache.lock:
            # Another request may have refreshed while we waited
            cached = self.token_cache.get()
            if cached:
                return cached

            failures = []
            for profile in self.profiles:
                try:
                    token, lifetime = await self._exchange_credentials(profile)
                    self.token_cache.set(token, lifetime)
                    logger.info(
                        f"Obtained Paylink token from {profile.name} endpoint",
                        extra={"profile": profile.name, "lifetime": lifetime},
                    )
                    return token
                except (httpx.HTTPError, ValueError) as e:
                    failures.append(f"{profile.name}: {e!r}")
                    logger.warning(
                        f"Paylink auth failed on {profile.name} endpoint: {e!r}",
                        extra={"profile": profile.name},
                    )

        raise AuthenticationError(
            f"Paylink credential exchange failed ({'; '.join(failures)})"
        )

    # ------------------------------------------------------------------
    # Invoices
    # ------------------------------------------------------------------

    def _build_invoice_payload(
        self, request: InvoiceRequest, amount: Decimal, order_number: str
    ) -> Dict[str, Any]:
        products = [
            {
                "title": product.title,
                "price": float(format_amount(product.price)),
                "qty": product.qty,
                "description": product.description or product.title,
            }
            for product in request.products
        ] or [
            {
                "title": request.note or "Subscription",
                "price": float(amount),
                "qty": 1,
                "description": request.note or "Subscription",
            }
        ]

        payload = {
            "orderNumber": order_number,
            "amount": float(amount),
            "callBackUrl": collapse_slashes(request.callback_url),
            "currency": request.currency or self.currency,
            "clientName": request.client_name or "Customer",
            "clientEmail": request.client_email or "",
            "clientMobile": request.client_mobile or "",
            "note": request.note or "",
            "products": products,
        }
        if request.cancel_url:
            payload["cancelUrl"] = collapse_slashes(request.cancel_url)
        if request.three_ds_callback_url:
            payload["threeDSCallbackUrl"] = collapse_slashes(
                request.three_ds_callback_url
            )
        if request.metadata:
            payload["metadata"] = request.metadata
        return payload

    @trace_span
    async def create_invoice(self, request: InvoiceRequest) -> GatewayInvoice:
        amount = format_amount(request.amount)
        if amount <= 0:
            raise InvoiceCreationError(f"Invalid invoice amount: {request.amount}")

        order_number = request.order_number or generate_reference_number()
        payload = self._build_invoice_payload(request, amount, order_number)
        token = await self.get_auth_token()

        logger.info(
            f"Creating Paylink invoice {order_number} for {amount} {payload['currency']}",
            extra={"order_number": order_number, "amount": str(amount)},
        )
        logger.debug(f"Invoice payload: {redact_sensitive(payload)}")

        failures = []
        for profile in self.profiles:
            try:
                async with self._client(profile) as client:
                    response = await client.post(
                        profile.add_invoice_path,
                        json=payload,
                        headers={"Authorization": f"Bearer {token}"},
                    )
                    if response.status_code == 401:
                        self.token_cache.clear()
                    response.raise_for_status()
                    data = response.json()

                if not isinstance(data, dict):
                    raise ValueError("invoice response is not an object")

                invoice_id = _first_present(data, INVOICE_ID_KEYS)
                payment_url = _first_present(data, PAYMENT_URL_KEYS)
                if not invoice_id or not payment_url:
                    raise ValueError("invoice response missing id or payment URL")

                transaction_no = _first_present(data, TRANSACTION_NO_KEYS)
                invoice = GatewayInvoice(
                    invoice_id=invoice_id,
                    payment_url=collapse_slashes(payment_url),
                    order_number=order_number,
                    transaction_no=transaction_no,
                    reference=_first_present(data, ("reference", "paylinkReference"))
                    or transaction_no,
                    raw=redact_sensitive(data),
                )
                logger.info(
                    f"Created Paylink invoice {invoice.invoice_id} via {profile.name}",
                    extra={
                        "invoice_id": invoice.invoice_id,
                        "order_number": order_number,
                        "profile": profile.name,
                    },
                )
                return invoice
            except (httpx.HTTPError, ValueError) as e:
                failures.append(f"{profile.name}: {e!r}")
                logger.warning(
                    f"Invoice creation failed on {profile.name} endpoint: {e!r}",
                    extra={"order_number": order_number, "profile": profile.name},
                )

        logger.error(
            f"Failed to create Paylink invoice {order_number}",
            extra={"order_number": order_number, "error": "; ".join(failures)},
        )
        raise InvoiceCreationError(
            f"Paylink invoice creation failed ({'; '.join(failures)})"
        )

    # ------------------------------------------------------------------
    # Lookups (never raise)
    # ------------------------------------------------------------------

    async def _fetch_payment(
        self, profile: EndpointProfile, path: str, token: str
    ) -> Optional[Dict[str, Any]]:
        """GET one lookup path; None on 404, GatewayUnavailable on anything unusable."""
        try:
            async with self._client(profile) as client:
                response = await client.get(
                    path, headers={"Authorization": f"Bearer {token}"}
                )
                if response.status_code == 401:
                    self.token_cache.clear()
                if response.status_code == 404:
                    return None
                response.raise_for_status()
                data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise GatewayUnavailable(f"{profile.name}: {e!r}") from e

        if not isinstance(data, dict):
            raise GatewayUnavailable(f"{profile.name}: lookup response is not an object")
        return data

    async def _lookup(self, path_attr: str, identifier: str) -> GatewayLookupResult:
        if not identifier:
            return GatewayLookupResult.unavailable("No identifier supplied")

        try:
            token = await self.get_auth_token()
        except AuthenticationError as e:
            logger.error(f"Paylink lookup skipped, no token: {str(e)}")
            return GatewayLookupResult.unavailable(str(e))
        except Exception as e:
            logger.error(
                f"Unexpected error obtaining Paylink token for lookup of {identifier}: {str(e)}",
                extra={"error": str(e)},
            )
            return GatewayLookupResult.unavailable(str(e))

        last_error = "no endpoint answered"
        for profile in self.profiles:
            path = getattr(profile, path_attr).format(id=identifier)
            try:
                data = await self._fetch_payment(profile, path, token)
                if data is None:
                    last_error = f"{identifier} not found on {profile.name}"
                    continue
                normalized = normalize_payment_data(data)
                logger.info(
                    f"Paylink lookup {identifier}: status={normalized.status} paid_date={normalized.paid_date}",
                    extra={"identifier": identifier, "gateway_status": normalized.status},
                )
                return GatewayLookupResult(success=True, data=normalized)
            except GatewayUnavailable as e:
                last_error = str(e)
                logger.warning(f"Paylink lookup for {identifier} failed on {e}")
            except Exception as e:
                last_error = f"{profile.name}: {e!r}"
                logger.error(
                    f"Unexpected error during Paylink lookup for {identifier}: {str(e)}",
                    extra={"error": str(e)},
                )

        return GatewayLookupResult.unavailable(last_error)

    @trace_span
    async def get_invoice(self, invoice_id: str) -> GatewayLookupResult:
        return await self._lookup("invoice_path", invoice_id)

    @trace_span
    async def get_transaction_by_number(self, transaction_no: str) -> GatewayLookupResult:
        return await self._lookup("transaction_path", transaction_no)

    @trace_span
    async def check_configuration(self) -> GatewayHealth:
        environment = "production" if settings.paylink_production else "sandbox"
        base_url = self.profiles[0].base_url
        if not (self.api_id and self.secret_key):
            return GatewayHealth(
                configured=False,
                environment=environment,
                base_url=base_url,
                authenticated=False,
                message="Paylink credentials are not configured",
            )
        try:
            await self.get_auth_token()
            return GatewayHealth(
                configured=True,
                environment=environment,
                base_url=base_url,
                authenticated=True,
            )
        except AuthenticationError as e:
            return GatewayHealth(
                configured=True,
                environment=environment,
                base_url=base_url,
                authenticated=False,
                message=str(e),
            )
