"""Tests for per-attempt deadlines and external abort signals."""

import asyncio
import time

import pytest

from portal_client import AbortSignal, RequestAbortedError, RequestTimeoutError, run_with_deadline


class UserNavigatedAway(Exception):
    pass


def _capture_timers(loop, handles):
    original = loop.call_later

    def call_later(*args, **kwargs):
        handle = original(*args, **kwargs)
        handles.append(handle)
        return handle

    loop.call_later = call_later


def test_fast_attempt_returns_result_and_releases_timer():
    handles = []

    async def run_test():
        _capture_timers(asyncio.get_running_loop(), handles)

        async def attempt():
            return "done"

        return await run_with_deadline(attempt, 1000)

    assert asyncio.run(run_test()) == "done"
    assert len(handles) == 1
    assert handles[0].cancelled()


def test_never_settling_attempt_times_out_and_is_cancelled():
    cancelled = []

    async def never_settles():
        try:
            await asyncio.sleep(10)
        except asyncio.CancelledError:
            cancelled.append(True)
            raise

    start = time.monotonic()
    with pytest.raises(RequestTimeoutError) as exc_info:
        asyncio.run(run_with_deadline(never_settles, 50))
    elapsed = time.monotonic() - start

    assert exc_info.value.status == 408
    assert exc_info.value.message == "Request timeout"
    assert cancelled == [True]
    assert elapsed < 1.0


def test_failure_releases_timer_and_propagates():
    handles = []

    async def run_test():
        _capture_timers(asyncio.get_running_loop(), handles)

        async def attempt():
            raise ValueError("boom")

        await run_with_deadline(attempt, 1000)

    with pytest.raises(ValueError):
        asyncio.run(run_test())
    assert handles[0].cancelled()


def test_zero_timeout_disables_deadline():
    handles = []

    async def run_test():
        _capture_timers(asyncio.get_running_loop(), handles)

        async def attempt():
            await asyncio.sleep(0)
            return 1

        return await run_with_deadline(attempt, 0)

    assert asyncio.run(run_test()) == 1
    assert handles == []


def test_external_abort_propagates_reason_unchanged():
    signal = AbortSignal()
    reason = UserNavigatedAway()
    cancelled = []

    async def run_test():
        async def slow():
            try:
                await asyncio.sleep(10)
            except asyncio.CancelledError:
                cancelled.append(True)
                raise

        asyncio.get_running_loop().call_later(0.01, signal.abort, reason)
        await run_with_deadline(slow, 5000, signal)

    with pytest.raises(UserNavigatedAway) as exc_info:
        asyncio.run(run_test())

    assert exc_info.value is reason
    assert cancelled == [True]


def test_already_aborted_signal_skips_the_attempt():
    signal = AbortSignal()
    signal.abort()
    calls = []

    async def attempt():
        calls.append(1)

    with pytest.raises(RequestAbortedError):
        asyncio.run(run_with_deadline(attempt, 1000, signal))
    assert calls == []


def test_abort_signal_fires_once_and_removes_listeners():
    signal = AbortSignal()
    fired = []
    remove = signal.add_listener(lambda: fired.append("a"))
    signal.add_listener(lambda: fired.append("b"))
    remove()

    signal.abort()
    signal.abort(UserNavigatedAway())

    assert fired == ["b"]
    assert isinstance(signal.reason, RequestAbortedError)
