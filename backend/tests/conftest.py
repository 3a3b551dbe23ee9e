# Shared pytest configuration and fixtures for all test types
import pytest_asyncio
from decimal import Decimal
from datetime import datetime, timezone, timedelta
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from slowapi import Limiter
from slowapi.util import get_remote_address
from unittest.mock import patch

# Create a disabled test limiter with in-memory storage
test_limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[],
    storage_uri="memory://",
    enabled=False,
)

# Patch the limiter before importing the app so decorators use test limiter
with patch("common.providers.rate_limiter.limiter.limiter", test_limiter):
    from api.main import app

from common.db.session import get_db
from common.db.base import Base
from packages.auth.dependencies import get_current_active_user
from packages.auth.models.domain.authenticated_user import AuthenticatedUser
from packages.users.models.database.user import UserEntity
from packages.subscriptions.models.database import (
    SubscriptionEntity,
    SubscriptionPlanEntity,
    PromoCodeEntity,
    SubscriptionHistoryEntity,  # noqa: F401 (registers the table)
)
from packages.subscriptions.models.domain.enums import (
    DiscountType,
    SubscriptionStatus,
    SubscriptionType,
)
from packages.payments.models.database import (
    PaymentIntentEntity,
    PaymentTransactionEntity,
)
from packages.payments.models.domain.enums import (
    PaymentIntentStatus,
    TransactionStatus,
)

# Test database URL
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture(scope="function")
async def test_engine():
    """Create test database engine and initialize schema."""
    engine = create_async_engine(TEST_DATABASE_URL, echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def test_connection(test_engine):
    """Create test connection with outer transaction for rollback isolation."""
    async with test_engine.connect() as connection:
        trans = await connection.begin()
        yield connection
        await trans.rollback()


@pytest_asyncio.fixture(scope="function")
async def test_session_factory(test_connection):
    """Create session factory bound to test connection.

    Using join_transaction_mode="create_savepoint" so nested transaction()
    calls create savepoints instead of real nested transactions.
    """
    return async_sessionmaker(
        bind=test_connection,
        class_=AsyncSession,
        expire_on_commit=False,
        join_transaction_mode="create_savepoint",
    )


@pytest_asyncio.fixture(scope="function")
async def test_db(test_session_factory):
    """Create a test database session."""
    async with test_session_factory() as session:
        yield session


@pytest_asyncio.fixture(scope="function", autouse=True)
async def patch_lazy_sessions(test_session_factory, monkeypatch):
    """
    Patch session factories to use test database.

    This allows real transaction() and get_session() to run with proper
    commit/rollback/ContextVar semantics while using the test database.
    """
    monkeypatch.setattr("common.db.scoped.AsyncSessionLocal", test_session_factory)
    monkeypatch.setattr(
        "common.db.scoped.AsyncSessionLocalReadonly", test_session_factory
    )


@pytest_asyncio.fixture(scope="function")
async def client(test_db: AsyncSession, test_user):
    """Create a test client."""

    def override_get_db():
        try:
            yield test_db
        finally:
            pass

    def override_get_current_active_user():
        return test_user

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_current_active_user] = override_get_current_active_user

    try:
        async with AsyncClient(
            transport=ASGITransport(app=app), base_url="http://test"
        ) as ac:
            yield ac
    finally:
        app.dependency_overrides.clear()


@pytest_asyncio.fixture(scope="function")
async def sample_user(test_db: AsyncSession):
    """Create a sample dashboard user."""
    user = UserEntity(
        name="Test Customer", email="customer@example.com", phone="+966500000000"
    )
    test_db.add(user)
    await test_db.commit()
    await test_db.refresh(user)
    return user


@pytest_asyncio.fixture(scope="function")
async def test_user(sample_user):
    """Create a test authenticated user."""
    return AuthenticatedUser(user_id=sample_user.id, role="user")


@pytest_asyncio.fixture(scope="function")
async def sample_plan(test_db: AsyncSession):
    """Create a plan with prices for every period."""
    plan = SubscriptionPlanEntity(
        name="Pro",
        description="Pro plan",
        price_weekly=Decimal("29.00"),
        price_monthly=Decimal("99.00"),
        price_yearly=Decimal("999.00"),
        features={"bots": 3},
        is_active=True,
    )
    test_db.add(plan)
    await test_db.commit()
    await test_db.refresh(plan)
    return plan


@pytest_asyncio.fixture(scope="function")
async def sample_promo_code(test_db: AsyncSession):
    """Create a 20% promo code with uses left."""
    promo = PromoCodeEntity(
        code="SAVE20",
        discount_type=DiscountType.PERCENTAGE.value,
        discount_value=Decimal("20"),
        max_uses=5,
        used_count=0,
        expiry_date=datetime.now(timezone.utc) + timedelta(days=30),
        active=True,
    )
    test_db.add(promo)
    await test_db.commit()
    await test_db.refresh(promo)
    return promo


@pytest_asyncio.fixture(scope="function")
async def sample_intent(test_db: AsyncSession, sample_user, sample_plan):
    """Create a pending monthly payment intent."""
    intent = PaymentIntentEntity(
        user_id=sample_user.id,
        plan_id=sample_plan.id,
        subscription_type=SubscriptionType.MONTHLY.value,
        amount=Decimal("99.00"),
        discount_amount=Decimal("0.00"),
        net_amount=Decimal("99.00"),
        currency="SAR",
        status=PaymentIntentStatus.PENDING.value,
        transaction_reference="SUB-123",
        expires_at=datetime.now(timezone.utc) + timedelta(hours=1),
    )
    test_db.add(intent)
    await test_db.commit()
    await test_db.refresh(intent)
    return intent


@pytest_asyncio.fixture(scope="function")
async def sample_transaction(test_db: AsyncSession, sample_user, sample_intent):
    """Create a pending transaction with the usual Paylink identifiers."""
    txn = PaymentTransactionEntity(
        user_id=sample_user.id,
        payment_intent_id=sample_intent.id,
        amount=Decimal("99.00"),
        currency="SAR",
        status=TransactionStatus.PENDING.value,
        transaction_id="SUB-123",
        order_number="SUB-123",
        paylink_invoice_id="INV-9",
        transaction_no="1718000000001",
        payment_gateway_response={"customer": {"name": "Test Customer"}},
    )
    test_db.add(txn)
    await test_db.commit()
    await test_db.refresh(txn)
    return txn


@pytest_asyncio.fixture(scope="function")
async def legacy_subscription(test_db: AsyncSession, sample_user, sample_plan):
    """A pending subscription written by an older client before payment."""
    subscription = SubscriptionEntity(
        user_id=sample_user.id,
        plan_id=sample_plan.id,
        subscription_type=SubscriptionType.MONTHLY.value,
        amount=Decimal("99.00"),
        status=SubscriptionStatus.PENDING.value,
        payment_confirmed=False,
        transaction_id="SUB-LEGACY-1",
        customer_name="Legacy Customer",
    )
    test_db.add(subscription)
    await test_db.commit()
    await test_db.refresh(subscription)
    return subscription
