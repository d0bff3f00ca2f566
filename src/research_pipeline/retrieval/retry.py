"""Retry policy for network fetches.

Wraps tenacity so that the attempt budget, the backoff curve and the
retryable-error predicate are plain attributes that can be tested
without network I/O. Sleep is injectable for the same reason.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, TypeVar

import httpx
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
)

from ..errors import FetchError
from ..log import get_logger

logger = get_logger("retry")

T = TypeVar("T")


def is_retryable_fetch_error(exc: BaseException) -> bool:
    # Every failed attempt is worth another try; programming errors are not.
    return isinstance(exc, (FetchError, httpx.HTTPError))


@dataclass(frozen=True)
class RetryPolicy:
    retries: int = 2
    base_delay: float = 1.0
    retryable: Callable[[BaseException], bool] = is_retryable_fetch_error
    sleep: Callable[[float], Awaitable[Any]] = field(default=asyncio.sleep, compare=False)

    @property
    def max_attempts(self) -> int:
        return self.retries + 1

    def backoff(self, attempt: int) -> float:
        """Seconds to wait after failed attempt number `attempt` (0-based)."""
        return self.base_delay * (2 ** attempt)

    def _wait(self, retry_state: RetryCallState) -> float:
        return self.backoff(retry_state.attempt_number - 1)

    def retrying(self) -> AsyncRetrying:
        return AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=self._wait,
            retry=retry_if_exception(self.retryable),
            sleep=self.sleep,
            before_sleep=before_sleep_log(logger, logging.INFO),
            reraise=True,
        )

    async def call(self, fn: Callable[..., Awaitable[T]], *args, **kwargs) -> T:
        """Runs `fn` until it succeeds or the budget is spent; re-raises the last error."""
        return await self.retrying()(fn, *args, **kwargs)
