"""Tests for the bounded fixed-delay retry helper."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from dealfinder.scraper.errors import NavigationError, ScraperError
from dealfinder.scraper.retry import retry_async


def _flaky(failures: int, result: str = "ok"):
    """Operation that fails ``failures`` times, then returns ``result``."""
    attempts: list[int] = []

    async def operation(attempt: int) -> str:
        attempts.append(attempt)
        if len(attempts) <= failures:
            raise TimeoutError(f"timeout on attempt {attempt}")
        return result

    return operation, attempts


class TestRetryAsync:
    async def test_first_attempt_success_never_sleeps(self) -> None:
        op, attempts = _flaky(0)
        sleep = AsyncMock()

        result = await retry_async(op, max_attempts=3, delay_seconds=2.0, label="nav", sleep=sleep)

        assert result == "ok"
        assert attempts == [1]
        sleep.assert_not_awaited()

    async def test_succeeds_on_last_attempt(self) -> None:
        op, attempts = _flaky(2)
        sleep = AsyncMock()

        result = await retry_async(op, max_attempts=3, delay_seconds=2.0, label="nav", sleep=sleep)

        assert result == "ok"
        assert attempts == [1, 2, 3]
        assert sleep.await_count == 2
        sleep.assert_awaited_with(2.0)

    async def test_exhaustion_runs_exactly_max_attempts(self) -> None:
        op, attempts = _flaky(10)
        sleep = AsyncMock()

        with pytest.raises(NavigationError) as exc_info:
            await retry_async(
                op,
                max_attempts=3,
                delay_seconds=2.0,
                label="navigation",
                error_cls=NavigationError,
                sleep=sleep,
            )

        assert attempts == [1, 2, 3]
        # No delay after the final attempt
        assert sleep.await_count == 2
        assert "navigation failed after 3 attempts" in str(exc_info.value)

    async def test_final_error_is_chained(self) -> None:
        op, _ = _flaky(10)

        with pytest.raises(ScraperError) as exc_info:
            await retry_async(op, max_attempts=2, delay_seconds=0, label="wait", sleep=AsyncMock())

        assert isinstance(exc_info.value.__cause__, TimeoutError)
        assert "attempt 2" in str(exc_info.value.__cause__)

    async def test_single_attempt_budget(self) -> None:
        op, attempts = _flaky(1)
        sleep = AsyncMock()

        with pytest.raises(ScraperError):
            await retry_async(op, max_attempts=1, delay_seconds=5.0, label="x", sleep=sleep)

        assert attempts == [1]
        sleep.assert_not_awaited()

    async def test_zero_attempts_rejected(self) -> None:
        op, attempts = _flaky(0)
        with pytest.raises(ValueError):
            await retry_async(op, max_attempts=0, delay_seconds=0, label="x")
        assert attempts == []
