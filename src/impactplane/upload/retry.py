"""Fixed-count retry of a fallible operation."""

from __future__ import annotations

from collections.abc import Callable
from typing import TypeVar

from impactplane.core.logging import get_logger

T = TypeVar("T")

log = get_logger(__name__)


def retry(
    max_attempts: int,
    operation: Callable[[], T],
    *,
    retry_on: tuple[type[BaseException], ...] = (Exception,),
) -> T:
    """Run ``operation`` up to ``max_attempts`` times, sequentially.

    Returns the first successful result. Errors matching ``retry_on`` trigger
    another attempt; anything else propagates immediately. When all attempts
    fail, the error of the last attempt is re-raised unchanged.

    ``retry_on`` defaults to every ``Exception``: this layer does not decide
    which failures are transient, callers narrow it when they can.
    """
    if max_attempts < 1:
        raise ValueError(f"max_attempts must be positive, got {max_attempts}")

    attempt = 1
    while True:
        try:
            return operation()
        except retry_on as e:
            log.info(
                "retry_attempt_failed",
                attempt=attempt,
                max_attempts=max_attempts,
                error=str(e),
                error_type=type(e).__name__,
            )
            if attempt >= max_attempts:
                raise
        attempt += 1
