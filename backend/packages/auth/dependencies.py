from typing import Annotated, Optional
from fastapi import Cookie, Depends, HTTPException, status, Header

from common.core.otel_axiom_exporter import trace_span, get_logger
from packages.auth.models.domain.authenticated_user import AuthenticatedUser
from packages.auth.token_verifier import decode_access_token

logger = get_logger(__name__)


def _extract_token(authorization: Optional[str], cookie_token: Optional[str]) -> Optional[str]:
    if authorization and authorization.startswith("Bearer "):
        return authorization.split(" ", 1)[1].strip() or None
    return cookie_token or None


def _user_from_token(token: str) -> AuthenticatedUser:
    claims = decode_access_token(token)
    user_id = claims.get("userId") or claims.get("sub")
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token does not identify a user",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return AuthenticatedUser(user_id=str(user_id), role=claims.get("role") or "user")


@trace_span
async def get_current_user(
    authorization: Annotated[Optional[str], Header()] = None,
    token: Annotated[Optional[str], Cookie()] = None,
) -> AuthenticatedUser:
    """Get current authenticated user from a Bearer header or the session cookie."""
    raw_token = _extract_token(authorization, token)
    if not raw_token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authorization header missing or invalid",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return _user_from_token(raw_token)


@trace_span
async def get_current_active_user(
    current_user: AuthenticatedUser = Depends(get_current_user),
) -> AuthenticatedUser:
    """Get current active user."""
    logger.info(f"Authenticated user_id={current_user.user_id}")
    return current_user


@trace_span
async def get_optional_user(
    authorization: Annotated[Optional[str], Header()] = None,
    token: Annotated[Optional[str], Cookie()] = None,
) -> Optional[AuthenticatedUser]:
    """Authenticated user when a valid token is present, otherwise None."""
    raw_token = _extract_token(authorization, token)
    if not raw_token:
        return None
    try:
        return _user_from_token(raw_token)
    except HTTPException as e:
        logger.info(f"Ignoring invalid token on optional-auth route: {e.detail}")
        return None
