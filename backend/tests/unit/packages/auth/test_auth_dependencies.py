"""
Unit tests for session token authentication.
"""

import jwt
import pytest
from datetime import datetime, timedelta, timezone
from fastapi import HTTPException
from unittest.mock import patch

from common.core.config import settings
from packages.auth.dependencies import (
    _extract_token,
    get_current_active_user,
    get_current_user,
    get_optional_user,
)
from packages.auth.token_verifier import decode_access_token


def make_token(secret=None, expires_in=timedelta(hours=1), **claims) -> str:
    payload = {"exp": datetime.now(timezone.utc) + expires_in}
    payload.update(claims)
    return jwt.encode(
        payload, secret or settings.jwt_secret, algorithm=settings.jwt_algorithm
    )


class TestExtractToken:
    def test_bearer_header(self):
        assert _extract_token("Bearer abc", None) == "abc"

    def test_header_wins_over_cookie(self):
        assert _extract_token("Bearer abc", "cookie") == "abc"

    def test_cookie_fallback(self):
        assert _extract_token(None, "cookie") == "cookie"
        assert _extract_token("Basic xyz", "cookie") == "cookie"

    def test_nothing(self):
        assert _extract_token(None, None) is None
        assert _extract_token("Bearer ", None) is None


class TestDecodeAccessToken:
    def test_valid_token(self):
        claims = decode_access_token(make_token(userId="user-1"))
        assert claims["userId"] == "user-1"

    def test_expired_token(self):
        with pytest.raises(HTTPException) as exc_info:
            decode_access_token(make_token(expires_in=timedelta(seconds=-5), userId="u"))
        assert exc_info.value.status_code == 401
        assert exc_info.value.detail == "Token has expired"

    def test_wrong_signature(self):
        with pytest.raises(HTTPException) as exc_info:
            decode_access_token(make_token(secret="x" * 32, userId="u"))
        assert exc_info.value.status_code == 401

    def test_garbage(self):
        with pytest.raises(HTTPException):
            decode_access_token("not-a-jwt")


@patch("common.core.otel_axiom_exporter.axiom_tracer.start_as_current_span")
@pytest.mark.asyncio
class TestUserDependencies:
    async def test_user_from_bearer_token(self, mock_start_span):
        token = make_token(userId="user-1", role="admin")

        user = await get_current_user(authorization=f"Bearer {token}", token=None)

        assert user.user_id == "user-1"
        assert user.is_admin is True

    async def test_user_from_cookie_and_sub_claim(self, mock_start_span):
        user = await get_current_user(authorization=None, token=make_token(sub="user-2"))

        assert user.user_id == "user-2"
        assert user.role == "user"

    async def test_missing_token(self, mock_start_span):
        with pytest.raises(HTTPException) as exc_info:
            await get_current_user(authorization=None, token=None)
        assert exc_info.value.status_code == 401

    async def test_token_without_user(self, mock_start_span):
        with pytest.raises(HTTPException) as exc_info:
            await get_current_user(authorization=None, token=make_token(role="user"))
        assert exc_info.value.detail == "Token does not identify a user"

    async def test_active_user_passthrough(self, mock_start_span):
        user = await get_current_user(authorization=None, token=make_token(userId="u"))
        assert await get_current_active_user(current_user=user) == user

    async def test_optional_user(self, mock_start_span):
        assert await get_optional_user(authorization=None, token=None) is None
        assert await get_optional_user(authorization="Bearer junk", token=None) is None
        user = await get_optional_user(
            authorization=f"Bearer {make_token(userId='user-3')}", token=None
        )
        assert user.user_id == "user-3"
