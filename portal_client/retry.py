"""Retry coordination with a fixed delay between attempts."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, TypeVar

from .config import DEFAULT_MAX_RETRIES, DEFAULT_RETRY_DELAY_MS, ClientConfig
from .exceptions import ApiError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """How many times a failed attempt is repeated, and how long to wait in between."""

    max_retries: int = DEFAULT_MAX_RETRIES
    retry_delay_ms: int = DEFAULT_RETRY_DELAY_MS

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1

    @property
    def delay_seconds(self) -> float:
        return self.retry_delay_ms / 1000.0

    @classmethod
    def from_config(cls, config: ClientConfig) -> "RetryPolicy":
        return cls(max_retries=config.max_retries, retry_delay_ms=config.retry_delay_ms)

    def should_retry(self, error: BaseException) -> bool:
        """Only network failures and timeouts are worth another attempt."""
        return isinstance(error, ApiError) and error.is_retryable


@dataclass
class AttemptState:
    """Bookkeeping for one logical call."""

    attempts_remaining: int
    attempts_made: int = 0
    last_error: Optional[ApiError] = None


NO_RETRY = RetryPolicy(max_retries=0)


class RetryCoordinator:
    """Drives attempts of one request until success, a fatal error or exhaustion."""

    def __init__(
        self,
        policy: Optional[RetryPolicy] = None,
        on_retry: Optional[Callable[[int, ApiError, float], None]] = None,
        on_give_up: Optional[Callable[[BaseException], None]] = None,
    ):
        self.policy = policy or RetryPolicy()
        self.on_retry = on_retry
        self.on_give_up = on_give_up

    async def run(self, attempt: Callable[[], Awaitable[T]]) -> T:
        """Run ``attempt`` with retries. Raises the last ApiError when attempts run out."""
        state = AttemptState(attempts_remaining=self.policy.max_retries)

        while True:
            state.attempts_made += 1
            try:
                return await attempt()
            except ApiError as e:
                state.last_error = e

                if not self.policy.should_retry(e) or state.attempts_remaining <= 0:
                    self._give_up(e, state)
                    raise

                state.attempts_remaining -= 1
                delay = self.policy.delay_seconds
                logger.warning(
                    f"Attempt {state.attempts_made} failed ({e.status}: {e.message}), "
                    f"retrying in {delay:.2f}s ({state.attempts_remaining} retries left)"
                )
                if self.on_retry:
                    self.on_retry(state.attempts_made, e, delay)

                await asyncio.sleep(delay)

    def _give_up(self, error: ApiError, state: AttemptState) -> None:
        if error.is_retryable:
            logger.error(f"Giving up after {state.attempts_made} attempt(s): {error.status} {error.message}")
        if self.on_give_up:
            self.on_give_up(error)
