"""
DealFinder - Bounded Retry

Fixed-delay retry for a single awaitable operation. Used by the page
navigator for navigation and content waits.

Attempts are counted from 1. The delay is applied only *between* attempts,
never after the last one. On exhaustion the caller's error type is raised
with the final underlying exception chained as ``__cause__``.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, TypeVar

import structlog

from dealfinder.scraper.errors import ScraperError

logger = structlog.get_logger(__name__)

T = TypeVar("T")


async def retry_async(
    operation: Callable[[int], Awaitable[T]],
    *,
    max_attempts: int,
    delay_seconds: float,
    label: str,
    error_cls: type[ScraperError] = ScraperError,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """
    Run ``operation`` until it succeeds or ``max_attempts`` is used up.

    Args:
        operation: Coroutine factory, called with the 1-based attempt number.
        max_attempts: Total attempts, including the first (>= 1).
        delay_seconds: Fixed pause between consecutive attempts.
        label: Event prefix for logs and the exhaustion message.
        error_cls: Exception type raised on exhaustion.
        sleep: Injected for tests.

    Returns:
        Whatever the first successful attempt returned.

    Raises:
        error_cls: after the final attempt fails.
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    last_error: Exception | None = None

    for attempt in range(1, max_attempts + 1):
        try:
            return await operation(attempt)
        except Exception as e:
            last_error = e
            logger.warning(
                f"{label}_attempt_failed",
                attempt=attempt,
                max_attempts=max_attempts,
                error=str(e),
                error_type=type(e).__name__,
                source="retry",
            )
            if attempt < max_attempts:
                await sleep(delay_seconds)

    raise error_cls(f"{label} failed after {max_attempts} attempts") from last_error
