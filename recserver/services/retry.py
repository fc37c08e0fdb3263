"""
Bounded retry with exponential backoff.

Wraps one unit of work; the attempt counter is local to each call, so there is
no shared retry budget across requests. Delay before attempt n+1 is
base_delay * 2 ** (n - 1): 1s, 2s, 4s, ... for base_delay=1.0.
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional, TypeVar

T = TypeVar("T")

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetryPolicy:
    """How many attempts to make and how long to wait between them."""

    max_attempts: int = 3
    base_delay: float = 1.0

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {self.max_attempts}")
        if self.base_delay < 0:
            raise ValueError("base_delay must be non-negative")

    def delay_for(self, attempt: int) -> float:
        """Backoff after the given (1-based) failed attempt."""
        return self.base_delay * (2 ** (attempt - 1))


DEFAULT_RETRY_POLICY = RetryPolicy()


def _is_retryable(exc: Exception) -> bool:
    """Errors are retryable unless they say otherwise."""
    return getattr(exc, "retryable", True)


def call_with_retry(
    fn: Callable[[], T],
    policy: RetryPolicy = DEFAULT_RETRY_POLICY,
    *,
    sleep: Callable[[float], None] = time.sleep,
    is_retryable: Callable[[Exception], bool] = _is_retryable,
    label: str = "request",
    on_retry: Optional[Callable[[int, Exception], None]] = None,
) -> T:
    """
    Call fn until it succeeds or the policy's attempt bound is reached.

    Non-retryable errors are raised immediately. After the last attempt the
    final error is raised unchanged.
    """
    for attempt in range(1, policy.max_attempts + 1):
        try:
            return fn()
        except Exception as e:
            if not is_retryable(e):
                logger.warning("[retry] %s failed (not retryable): %s", label, e)
                raise
            if attempt == policy.max_attempts:
                logger.warning(
                    "[retry] %s failed after %d attempts: %s", label, policy.max_attempts, e
                )
                raise
            delay = policy.delay_for(attempt)
            logger.info(
                "[retry] %s attempt %d/%d failed: %s; waiting %.1fs",
                label, attempt, policy.max_attempts, e, delay,
            )
            if on_retry:
                on_retry(attempt, e)
            sleep(delay)
    raise AssertionError("unreachable")
