import asyncio

import pytest

from refsense.domain.models import RetryPolicy
from refsense.infrastructure.llm.exceptions import (
    AuthError,
    BackendTimeoutError,
    NetworkError,
    UpstreamError,
)
from refsense.infrastructure.llm.retry import retry_async


class Scripted:
    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        o = self.outcomes.pop(0)
        if isinstance(o, BaseException):
            raise o
        return o


def test_fails_twice_then_succeeds(sleep):
    op = Scripted(NetworkError("down"), BackendTimeoutError("slow"), "ok")

    result = asyncio.run(retry_async(op, RetryPolicy(max_attempts=3), sleep=sleep))

    assert result == "ok"
    assert op.calls == 3
    assert sleep.delays == [1.0, 2.0]


def test_last_failure_is_surfaced(sleep):
    op = Scripted(NetworkError("1"), NetworkError("2"), NetworkError("3"))

    with pytest.raises(NetworkError, match="3"):
        asyncio.run(retry_async(op, RetryPolicy(max_attempts=3), sleep=sleep))

    assert op.calls == 3
    assert sleep.delays == [1.0, 2.0]


def test_auth_error_is_not_retried(sleep):
    op = Scripted(AuthError("bad key"), "never")

    with pytest.raises(AuthError):
        asyncio.run(retry_async(op, RetryPolicy(), sleep=sleep))

    assert op.calls == 1
    assert sleep.delays == []


@pytest.mark.parametrize("status,retried", [(400, False), (404, False), (429, True), (500, True), (503, True)])
def test_upstream_retry_depends_on_status(sleep, status, retried):
    op = Scripted(UpstreamError(status, "x"), "ok")

    if retried:
        assert asyncio.run(retry_async(op, RetryPolicy(), sleep=sleep)) == "ok"
        assert op.calls == 2
    else:
        with pytest.raises(UpstreamError):
            asyncio.run(retry_async(op, RetryPolicy(), sleep=sleep))
        assert op.calls == 1


def test_invalid_shape_is_not_retried(sleep):
    op = Scripted(UpstreamError(200, UpstreamError.INVALID_SHAPE), "ok")

    with pytest.raises(UpstreamError):
        asyncio.run(retry_async(op, RetryPolicy(), sleep=sleep))
    assert op.calls == 1


def test_custom_base_delay(sleep):
    op = Scripted(NetworkError("a"), NetworkError("b"), NetworkError("c"), "ok")

    asyncio.run(retry_async(op, RetryPolicy(max_attempts=4, base_delay=0.5), sleep=sleep))

    assert sleep.delays == [0.5, 1.0, 2.0]


def test_cancellation_stops_retries():
    calls = []

    async def op():
        calls.append(1)
        raise NetworkError("down")

    async def scenario():
        task = asyncio.create_task(
            retry_async(op, RetryPolicy(max_attempts=5, base_delay=10.0))
        )
        await asyncio.sleep(0.05)  # first attempt failed, task is in backoff
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    asyncio.run(scenario())
    assert len(calls) == 1
