"""Reusable retry policy on top of tenacity, parameterized per call site."""

import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, TypeVar

from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from solfolio.exceptions import RateLimitError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded exponential backoff for a fixed set of retryable exceptions.

    Anything not in ``retry_on`` propagates on the first failure. Once
    ``max_attempts`` is used up the last exception is re-raised as-is.
    """

    max_attempts: int = 3
    multiplier: float = 2.0
    min_wait: float = 2.0
    max_wait: float = 8.0
    retry_on: tuple[type[BaseException], ...] = field(default=(RateLimitError,))

    def retrying(self) -> AsyncRetrying:
        return AsyncRetrying(
            retry=retry_if_exception_type(self.retry_on),
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(multiplier=self.multiplier, min=self.min_wait, max=self.max_wait),
            before_sleep=before_sleep_log(logger, logging.INFO),
            reraise=True,
        )

    async def call(self, fn: Callable[..., Awaitable[T]], *args: Any, **kwargs: Any) -> T:
        return await self.retrying()(fn, *args, **kwargs)

