"""Retry with exponential backoff.

Decorator and policy used for the MQTT connect and reconnect budget.
"""

from __future__ import annotations

import functools
import logging
import random
import time
from dataclasses import dataclass
from typing import Callable, Optional, Tuple, Type, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class RetryConfig:
    """Retry/backoff policy."""

    max_attempts: int = 3
    base_delay: float = 0.5  # seconds
    max_delay: float = 10.0  # seconds
    exponential_base: float = 2.0
    jitter: bool = True  # ±25% random variation
    retryable_exceptions: Tuple[Type[Exception], ...] = (Exception,)

    def calculate_delay(self, attempt: int) -> float:
        """Delay before retrying after ``attempt`` (1-indexed) failed."""
        delay = self.base_delay * (self.exponential_base ** (attempt - 1))
        delay = min(delay, self.max_delay)

        if self.jitter:
            jitter_range = delay * 0.25
            delay += random.uniform(-jitter_range, jitter_range)

        return max(0, delay)


def retry_with_backoff(
    config: Optional[RetryConfig] = None,
    max_attempts: int = 3,
    base_delay: float = 0.5,
    max_delay: float = 10.0,
    retryable_exceptions: Tuple[Type[Exception], ...] = (Exception,),
    on_retry: Optional[Callable[[int, Exception], None]] = None,
    sleep: Callable[[float], None] = time.sleep,
):
    """Decorator retrying a call with exponential backoff.

    Args:
        config: Retry policy (other args are ignored when given)
        max_attempts: Maximum number of attempts
        base_delay: Base delay in seconds
        max_delay: Delay cap in seconds
        retryable_exceptions: Exceptions that trigger a retry
        on_retry: Called before each retry with (attempt, exception)
        sleep: Sleep function, replaceable in tests

    Example:
        @retry_with_backoff(max_attempts=3, base_delay=0.5)
        def connect():
            ...
    """
    if config is None:
        config = RetryConfig(
            max_attempts=max_attempts,
            base_delay=base_delay,
            max_delay=max_delay,
            retryable_exceptions=retryable_exceptions,
        )

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(func)
        def wrapper(*args, **kwargs) -> T:
            for attempt in range(1, config.max_attempts + 1):
                try:
                    return func(*args, **kwargs)

                except config.retryable_exceptions as e:
                    if attempt >= config.max_attempts:
                        logger.error(
                            "RETRY_EXHAUSTED func=%s attempts=%d err=%s",
                            func.__name__, attempt, e
                        )
                        raise

                    delay = config.calculate_delay(attempt)

                    logger.warning(
                        "RETRY func=%s attempt=%d/%d delay=%.2fs err=%s",
                        func.__name__, attempt, config.max_attempts, delay, e
                    )

                    if on_retry:
                        on_retry(attempt, e)

                    sleep(delay)

            raise RuntimeError("Retry loop completed without result")

        return wrapper
    return decorator
