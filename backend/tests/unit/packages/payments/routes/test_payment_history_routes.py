"""
Unit tests for the payment history route.
"""

import pytest
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from api.main import app
from packages.auth.dependencies import get_current_active_user
from packages.payments.models.database import PaymentTransactionEntity
from packages.payments.models.domain.enums import TransactionStatus

BASE = datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)


async def add_transaction(test_db, user_id, transaction_id, minutes, **fields):
    txn = PaymentTransactionEntity(
        user_id=user_id,
        amount=fields.pop("amount", Decimal("99.00")),
        currency="SAR",
        status=fields.pop("status", TransactionStatus.PENDING.value),
        transaction_id=transaction_id,
        created_at=BASE + timedelta(minutes=minutes),
        **fields,
    )
    test_db.add(txn)
    await test_db.commit()
    await test_db.refresh(txn)
    return txn


@pytest.mark.asyncio
class TestPaymentHistoryRoute:
    async def test_lists_own_transactions_newest_first(
        self, client, test_db, test_user
    ):
        await add_transaction(test_db, test_user.user_id, "SUB-OLD", 0)
        await add_transaction(
            test_db,
            test_user.user_id,
            "SUB-NEW",
            5,
            status=TransactionStatus.COMPLETED.value,
            paylink_invoice_id="INV-NEW",
            amount=Decimal("79.20"),
        )
        await add_transaction(test_db, "someone-else", "SUB-FOREIGN", 10)

        response = await client.get("/api/v1/payments")

        assert response.status_code == 200
        body = response.json()
        assert [t["transactionId"] for t in body["transactions"]] == [
            "SUB-NEW",
            "SUB-OLD",
        ]
        newest = body["transactions"][0]
        assert newest["status"] == "completed"
        assert newest["invoiceId"] == "INV-NEW"
        assert newest["amount"] == 79.2
        assert body["limit"] == 50
        assert body["offset"] == 0

    async def test_pagination(self, client, test_db, test_user):
        for minute in range(3):
            await add_transaction(test_db, test_user.user_id, f"SUB-{minute}", minute)

        response = await client.get(
            "/api/v1/payments", params={"limit": 1, "offset": 1}
        )

        assert response.status_code == 200
        assert [t["transactionId"] for t in response.json()["transactions"]] == [
            "SUB-1"
        ]

    async def test_empty_history(self, client):
        response = await client.get("/api/v1/payments")

        assert response.status_code == 200
        assert response.json()["transactions"] == []

    async def test_limit_out_of_range(self, client):
        response = await client.get("/api/v1/payments", params={"limit": 500})

        assert response.status_code == 422

    async def test_requires_auth(self, client):
        app.dependency_overrides.pop(get_current_active_user)

        response = await client.get("/api/v1/payments")

        assert response.status_code == 401
