"""
In-process cache for the gateway bearer token.
"""

import asyncio
import time
from dataclasses import dataclass
from typing import Callable, Optional

from common.core.constants import TOKEN_EXPIRY_SAFETY_MARGIN_SECONDS
from common.core.otel_axiom_exporter import get_logger

logger = get_logger(__name__)


@dataclass
class CachedToken:
    """A bearer token and the moment it stops being handed out."""

    value: str
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


class TokenCache:
    """
    Single-slot token cache with explicit expiry.

    Injected into the gateway client. ``lock`` serializes refreshes within one
    process; a redundant fetch across processes is harmless.
    """

    def __init__(
        self,
        safety_margin_seconds: int = TOKEN_EXPIRY_SAFETY_MARGIN_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        self.safety_margin_seconds = safety_margin_seconds
        self._clock = clock
        self._token: Optional[CachedToken] = None
        self.lock = asyncio.Lock()

    def get(self) -> Optional[str]:
        if self._token is None:
            return None
        if self._token.is_expired(self._clock()):
            logger.debug("Cached gateway token expired")
            self._token = None
            return None
        return self._token.value

    def set(self, token: str, lifetime_seconds: int) -> None:
        """Store ``token``, expiring ``safety_margin_seconds`` before the gateway says."""
        ttl = max(0, lifetime_seconds - self.safety_margin_seconds)
        self._token = CachedToken(value=token, expires_at=self._clock() + ttl)
        logger.debug(f"Cached gateway token for {ttl}s")

    def clear(self) -> None:
        self._token = None
