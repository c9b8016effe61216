"""Bounded retry with exponential backoff.

Notes:
- Backoff goes through `asyncio.sleep`, so a request waiting for its next
  attempt never blocks other requests or health checks.
- The sleep function is injectable; tests record delays instead of waiting.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

from core.domain.errors import CertWebhookError

T = TypeVar("T")

logger = logging.getLogger(__name__)


def is_retryable(exc: BaseException) -> bool:
    """Only sync-engine errors flagged as transient are re-attempted."""

    return isinstance(exc, CertWebhookError) and exc.retryable


class RetryExecutor:
    """Runs an async operation up to `max_attempts` times.

    Attempt k+1 waits `base_delay * 2**(k-1)` seconds after attempt k fails.
    The first success is returned as is; after the last failure, the last
    error is raised. Errors rejected by `retry_on` are raised immediately.
    """

    def __init__(
        self,
        *,
        max_attempts: int = 3,
        base_delay: float = 0.5,
        retry_on: Callable[[BaseException], bool] = is_retryable,
        sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if base_delay < 0:
            raise ValueError("base_delay must be >= 0")
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self._retry_on = retry_on
        self._sleep = sleep

    def delay_before(self, attempt: int) -> float:
        """Backoff preceding `attempt` (1-based); the first attempt has none."""

        if attempt <= 1:
            return 0.0
        return self.base_delay * (2 ** (attempt - 2))

    async def execute(self, operation: Callable[[], Awaitable[T]], *, label: str = "operation") -> T:
        for attempt in range(1, self.max_attempts + 1):
            try:
                return await operation()
            except Exception as exc:
                if not self._retry_on(exc):
                    logger.warning("%s failed with a non-retryable error: %s", label, exc)
                    raise
                logger.warning("%s failed (attempt %d/%d): %s", label, attempt, self.max_attempts, exc)
                if attempt >= self.max_attempts:
                    raise
                backoff = self.delay_before(attempt + 1)
                logger.debug("Retrying %s after %.3fs", label, backoff)
                await self._sleep(backoff)

        raise AssertionError("unreachable")  # pragma: no cover
