"""
Polling schedule for payment status.

The API only advises clients (see the ``polling`` hint in the status
envelope); ``poll_until_settled`` drives the same schedule server-side, e.g.
for scripts and tests that wait on a payment.
"""

import asyncio
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, TypeVar

from common.core.otel_axiom_exporter import get_logger
from packages.payments.models.domain.enums import PollStatus

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class PollingPolicy:
    interval_seconds: float = 5.0
    backoff_factor: float = 1.5
    max_interval_seconds: float = 30.0
    max_attempts: int = 10
    max_duration_seconds: float = 120.0

    def delay_for(self, attempt: int) -> float:
        """Seconds to wait before poll number ``attempt + 1`` (attempt counts from 0)."""
        delay = self.interval_seconds * (self.backoff_factor ** max(attempt, 0))
        return min(delay, self.max_interval_seconds)

    def should_continue(self, attempt: int, elapsed_seconds: float = 0.0) -> bool:
        return attempt < self.max_attempts and elapsed_seconds < self.max_duration_seconds

    def attempts_remaining(self, attempt: int) -> int:
        return max(self.max_attempts - attempt, 0)


async def poll_until_settled(
    fetch: Callable[[], Awaitable[T]],
    policy: Optional[PollingPolicy] = None,
    status_of: Callable[[T], PollStatus] = lambda result: result.status,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> T:
    """
    Call ``fetch`` until it reports a settled status or the policy gives up.

    Returns the last result either way; callers inspect its status.
    """
    policy = policy or PollingPolicy()
    started = clock()
    attempt = 0
    while True:
        result = await fetch()
        attempt += 1
        status = status_of(result)
        if status.is_settled():
            return result
        elapsed = clock() - started
        if not policy.should_continue(attempt, elapsed):
            logger.info(
                f"Stopped polling after {attempt} attempts with status {status.value}",
                extra={"attempts": attempt, "elapsed": elapsed},
            )
            return result
        await sleep(policy.delay_for(attempt - 1))
