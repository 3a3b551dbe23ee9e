"""
Service for starting a checkout.

Records a PaymentIntent, opens a Paylink invoice and stores a pending
transaction carrying every identifier the gateway might echo back later. No
subscription is written here; that only happens once the payment is confirmed.
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Optional
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from common.core.config import settings
from common.core.exceptions import ValidationError
from common.core.otel_axiom_exporter import trace_span, get_logger
from common.core.redaction import redact_sensitive
from packages.payments.models.domain.enums import PaymentIntentStatus
from packages.payments.models.domain.gateway import InvoiceProduct, InvoiceRequest
from packages.payments.models.domain.payment_intent import (
    PaymentIntentCreateModel,
    PaymentIntentUpdateModel,
)
from packages.payments.models.domain.payment_transaction import (
    PaymentTransactionCreateModel,
)
from packages.payments.models.schemas.checkout import (
    CheckoutRequest,
    CheckoutResult,
    CustomerInfo,
)
from packages.payments.providers.gateway.factory import get_payment_gateway
from packages.payments.repositories.payment_intent_repository import (
    PaymentIntentRepository,
)
from packages.payments.repositories.payment_transaction_repository import (
    PaymentTransactionRepository,
)
from packages.payments.utils.formatting import format_amount, generate_reference_number
from packages.subscriptions.models.domain.plan import SubscriptionPlan
from packages.subscriptions.models.domain.subscription import Subscription
from packages.subscriptions.repositories.plan_repository import PlanRepository
from packages.subscriptions.repositories.subscription_repository import (
    SubscriptionRepository,
)
from packages.subscriptions.services.promo_code_service import PromoCodeService
from packages.users.repositories.user_repository import UserRepository

logger = get_logger(__name__)

CALLBACK_PATH = "/api/v1/paylink/callback"
THREE_DS_CALLBACK_PATH = "/api/v1/paylink/3ds-callback"


def _with_params(url: str, **params: Optional[str]) -> str:
    """Add query parameters to ``url`` while keeping the ones already there."""
    parts = urlsplit(url)
    query = [
        (key, value)
        for key, value in parse_qsl(parts.query, keep_blank_values=True)
        if key not in params
    ]
    query.extend((key, value) for key, value in params.items() if value)
    return urlunsplit(
        (parts.scheme, parts.netloc, parts.path, urlencode(query), parts.fragment)
    )


def _three_ds_variant(callback_url: str) -> str:
    parts = urlsplit(callback_url)
    path = parts.path.rstrip("/")
    if path.endswith("/callback"):
        path = path[: -len("callback")] + "3ds-callback"
    else:
        path = f"{path}/3ds-callback"
    return urlunsplit((parts.scheme, parts.netloc, path, parts.query, ""))


class CheckoutService:
    """Service for initiating hosted-page payments."""

    def __init__(self):
        self.plan_repo = PlanRepository()
        self.subscription_repo = SubscriptionRepository()
        self.user_repo = UserRepository()
        self.intent_repo = PaymentIntentRepository()
        self.transaction_repo = PaymentTransactionRepository()
        self.promo_code_service = PromoCodeService()
        self.gateway = get_payment_gateway()

    async def _load_plan(self, plan_id: Optional[str]) -> Optional[SubscriptionPlan]:
        if not plan_id:
            return None
        try:
            return await self.plan_repo.get(plan_id)
        except Exception as e:
            logger.error(
                f"Could not load plan {plan_id}, continuing without it: {str(e)}",
                extra={"plan_id": plan_id},
            )
            return None

    async def _load_subscription(
        self, subscription_id: Optional[str], user_id: str
    ) -> Optional[Subscription]:
        if not subscription_id:
            return None
        subscription = await self.subscription_repo.get(subscription_id)
        if subscription is None or subscription.user_id != user_id:
            raise ValidationError(f"Subscription {subscription_id} not found")
        return subscription

    def _gross_amount(
        self,
        request: CheckoutRequest,
        plan: Optional[SubscriptionPlan],
        subscription: Optional[Subscription],
    ) -> Decimal:
        candidates = (
            request.amount,
            plan.price_for(request.subscription_type) if plan else None,
            subscription.amount if subscription else None,
        )
        for candidate in candidates:
            if candidate is not None:
                amount = format_amount(candidate)
                if amount <= 0:
                    raise ValidationError(f"Invalid payment amount: {candidate}")
                return amount
        raise ValidationError("Payment amount could not be determined")

    async def _resolve_customer(
        self,
        user_id: str,
        request: CheckoutRequest,
        subscription: Optional[Subscription],
    ) -> CustomerInfo:
        customer = request.customer or CustomerInfo()
        if subscription is not None:
            customer = CustomerInfo(
                name=customer.name or subscription.customer_name,
                email=customer.email or subscription.customer_email,
                phone=customer.phone or subscription.customer_phone,
            )
        if customer.name and customer.email and customer.phone:
            return customer

        try:
            user = await self.user_repo.get_contact_details(user_id)
        except Exception as e:
            logger.error(f"Could not load profile of user {user_id}: {str(e)}")
            return customer
        if user is None:
            return customer
        return CustomerInfo(
            name=customer.name or user.name,
            email=customer.email or user.email,
            phone=customer.phone or user.phone,
        )

    def _callback_base(self, request: CheckoutRequest, origin: str) -> str:
        if request.callback_url:
            return request.callback_url
        if settings.paylink_callback_url:
            return settings.paylink_callback_url
        return f"{origin.rstrip('/')}{CALLBACK_PATH}"

    @trace_span
    async def initiate_checkout(
        self, user_id: str, request: CheckoutRequest, origin: str
    ) -> CheckoutResult:
        """
        Start a payment for ``user_id``.

        Args:
            user_id: Authenticated user paying
            request: Plan, period, optional promo code and overrides
            origin: Base URL of the incoming request, last-resort callback host

        Raises:
            ValidationError: bad amount, unknown promo code or foreign subscription
            AuthenticationError: gateway credentials rejected
            InvoiceCreationError: gateway did not issue an invoice
        """
        plan = await self._load_plan(request.plan_id)
        subscription = await self._load_subscription(request.subscription_id, user_id)
        gross = self._gross_amount(request, plan, subscription)
        discount = await self.promo_code_service.calculate_discount(
            gross, request.promo_code
        )
        if discount.net_amount <= 0:
            raise ValidationError("Discounted amount must be greater than zero")

        customer = await self._resolve_customer(user_id, request, subscription)
        currency = settings.paylink_currency

        intent = await self.intent_repo.create(
            PaymentIntentCreateModel(
                user_id=user_id,
                plan_id=plan.id if plan else request.plan_id,
                subscription_type=request.subscription_type,
                amount=discount.gross_amount,
                discount_amount=discount.discount_amount,
                net_amount=discount.net_amount,
                currency=currency,
                promo_code=discount.code,
                subscription_id=subscription.id if subscription else None,
                expires_at=datetime.now(timezone.utc)
                + timedelta(minutes=settings.payment_intent_ttl_minutes),
            )
        )

        reference = generate_reference_number("SUB")
        tags = {
            "txn_id": reference,
            "orderNumber": reference,
            "transactionNo": reference,
            "payment_intent_id": intent.id,
        }
        callback_base = self._callback_base(request, origin)
        callback_url = _with_params(callback_base, **tags)
        three_ds_url = _with_params(_three_ds_variant(callback_base), **tags)
        return_url = _with_params(callback_base, source="return", **tags)

        title = f"{plan.name if plan else 'Subscription'} ({request.subscription_type.value})"
        try:
            invoice = await self.gateway.create_invoice(
                InvoiceRequest(
                    amount=discount.net_amount,
                    order_number=reference,
                    callback_url=callback_url,
                    cancel_url=return_url,
                    three_ds_callback_url=three_ds_url,
                    currency=currency,
                    client_name=customer.name,
                    client_email=customer.email,
                    client_mobile=customer.phone,
                    note=title,
                    products=[
                        InvoiceProduct(title=title, price=discount.net_amount, qty=1)
                    ],
                )
            )
        except Exception as e:
            logger.error(
                f"Checkout {reference} failed at invoice creation: {str(e)}",
                extra={"transaction_id": reference, "payment_intent_id": intent.id},
            )
            await self.intent_repo.update(
                intent.id, PaymentIntentUpdateModel(status=PaymentIntentStatus.FAILED)
            )
            raise

        txn = await self.transaction_repo.create(
            PaymentTransactionCreateModel(
                user_id=user_id,
                subscription_id=subscription.id if subscription else None,
                payment_intent_id=intent.id,
                amount=discount.net_amount,
                currency=currency,
                transaction_id=reference,
                order_number=invoice.order_number,
                paylink_invoice_id=invoice.invoice_id,
                paylink_reference=invoice.reference,
                transaction_no=invoice.transaction_no,
                payment_gateway_response={
                    "invoice": redact_sensitive(invoice.raw),
                    "customer": customer.model_dump(),
                },
            )
        )
        await self.intent_repo.update(
            intent.id, PaymentIntentUpdateModel(transaction_reference=reference)
        )

        logger.info(
            f"Checkout {reference} started for user {user_id}: {discount.net_amount} {currency}",
            extra={
                "transaction_id": txn.transaction_id,
                "invoice_id": invoice.invoice_id,
                "payment_intent_id": intent.id,
            },
        )
        return CheckoutResult(
            payment_url=invoice.payment_url,
            transaction_id=txn.transaction_id,
            invoice_id=invoice.invoice_id,
            payment_intent_id=intent.id,
            amount=discount.gross_amount,
            discount=discount.discount_amount,
            net_amount=discount.net_amount,
            currency=currency,
        )
