"""
Retry policy with exponential backoff for async operations.
"""

import asyncio
import random
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Optional, Tuple, Type, TypeVar

import httpx

from .error_handler import (
    AuthenticationError,
    DownloadCancelledError,
    DownloadError,
    RateLimitError,
    RetryExhaustedError,
)
from .logger import logger


T = TypeVar("T")

FailedAttemptObserver = Callable[[BaseException, int, int], None]


@dataclass
class RetryConfig:
    """Configuration for retry behaviour."""

    max_retries: int = 3
    initial_delay: float = 1.0
    max_delay: float = 30.0
    backoff_factor: float = 2.0
    retryable_errors: Tuple[Type[BaseException], ...] = field(
        default_factory=lambda: (DownloadError, httpx.HTTPError, ValueError)
    )
    # Checked first: these are never retried even when they match above
    fatal_errors: Tuple[Type[BaseException], ...] = field(
        default_factory=lambda: (DownloadCancelledError, AuthenticationError, RateLimitError)
    )


class RetryManager:
    """
    Runs an async operation, retrying failures with capped exponential
    backoff. The first attempt is not a retry: ``max_retries=3`` means up to
    four attempts.
    """

    def __init__(
        self,
        max_retries: int = 3,
        base_delay: float = 1.0,
        max_delay: float = 30.0,
        exponential_base: float = 2.0,
        jitter: bool = True,
        config: Optional[RetryConfig] = None
    ):
        self.config = config or RetryConfig(
            max_retries=max_retries,
            initial_delay=base_delay,
            max_delay=max_delay,
            backoff_factor=exponential_base,
        )
        self.max_retries = self.config.max_retries
        self.base_delay = self.config.initial_delay
        self.max_delay = self.config.max_delay
        self.exponential_base = self.config.backoff_factor
        self.jitter = jitter

    def _calculate_delay(self, attempt: int) -> float:
        """Delay before retry number ``attempt + 1`` (0-based)."""

        delay = min(self.base_delay * (self.exponential_base ** attempt), self.max_delay)
        if self.jitter:
            delay *= random.uniform(0.8, 1.2)
        return delay

    async def execute(
        self,
        func: Callable[[], Awaitable[T]],
        exceptions: Optional[Tuple[Type[BaseException], ...]] = None,
        max_retries: Optional[int] = None,
        on_failed_attempt: Optional[FailedAttemptObserver] = None
    ) -> T:
        """
        Execute ``func`` with retries.

        Args:
            func: Zero-argument coroutine function to run
            exceptions: Retryable exception types (config default when None)
            max_retries: Override for the configured retry count
            on_failed_attempt: Called as (error, attempt_number, retries_left)
                after every failed retryable attempt

        Returns:
            Whatever ``func`` returns on its first successful attempt

        Raises:
            RetryExhaustedError: When every attempt failed, chained from
                the last error
        """
        retryable = exceptions or self.config.retryable_errors
        retries = self.max_retries if max_retries is None else max_retries
        attempts = retries + 1

        for attempt in range(attempts):
            try:
                return await func()

            except self.config.fatal_errors:
                raise

            except retryable as e:
                retries_left = retries - attempt
                if on_failed_attempt is not None:
                    on_failed_attempt(e, attempt + 1, retries_left)

                if retries_left == 0:
                    logger.error(f"All {attempts} attempts failed, giving up")
                    raise RetryExhaustedError(e, attempts) from e

                delay = self._calculate_delay(attempt)
                logger.warning(
                    f"Attempt {attempt + 1} failed: {e}. Retrying in {delay:.2f}s"
                )
                await asyncio.sleep(delay)

        raise AssertionError("unreachable")  # pragma: no cover

    __call__ = execute


__all__ = [
    "RetryConfig",
    "RetryManager",
    "FailedAttemptObserver",
]
