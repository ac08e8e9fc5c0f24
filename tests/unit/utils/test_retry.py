"""Tests for the retry helper."""

import asyncio
import logging
from unittest.mock import AsyncMock

import pytest

from trace_collector.errors import RemoteJobError
from trace_collector.utils.retry import RetryPolicy, repeat_until_success


def failing_then(value, failures):
    """Operation that raises `failures` times, then returns `value`."""
    operation = AsyncMock(
        side_effect=[RemoteJobError(400, "Invalid URL")] * failures + [value]
    )
    return operation


@pytest.mark.asyncio
async def test_returns_first_success_without_retrying():
    operation = failing_then("trace", 0)

    assert await repeat_until_success(operation) == "trace"
    assert operation.await_count == 1


@pytest.mark.asyncio
async def test_retries_until_success():
    operation = failing_then("trace", 4)

    assert await repeat_until_success(operation) == "trace"
    assert operation.await_count == 5


@pytest.mark.asyncio
async def test_logs_every_failure(caplog):
    operation = failing_then("trace", 2)

    with caplog.at_level(logging.ERROR, logger="trace_collector.utils.retry"):
        await repeat_until_success(operation)

    failures = [r for r in caplog.records if r.name == "trace_collector.utils.retry"]
    assert len(failures) == 2
    assert "Invalid URL" in failures[0].getMessage()
    assert failures[0].error_type == "RemoteJobError"


@pytest.mark.asyncio
async def test_default_policy_retries_immediately():
    sleep = AsyncMock()
    operation = failing_then("trace", 3)

    await repeat_until_success(operation, sleep=sleep)

    sleep.assert_not_awaited()


@pytest.mark.asyncio
async def test_backoff_between_attempts():
    sleep = AsyncMock()
    operation = failing_then("trace", 2)

    await repeat_until_success(operation, RetryPolicy(backoff_seconds=1.5), sleep=sleep)

    assert sleep.await_count == 2
    sleep.assert_awaited_with(1.5)


@pytest.mark.asyncio
async def test_max_attempts_reraises_last_error():
    operation = failing_then("trace", 3)

    with pytest.raises(RemoteJobError):
        await repeat_until_success(operation, RetryPolicy(max_attempts=3))
    assert operation.await_count == 3


@pytest.mark.asyncio
async def test_cancellation_is_not_retried():
    operation = AsyncMock(side_effect=asyncio.CancelledError())

    with pytest.raises(asyncio.CancelledError):
        await repeat_until_success(operation)
    assert operation.await_count == 1
