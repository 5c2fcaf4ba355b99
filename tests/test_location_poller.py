"""LocationPoller tests — fix acquisition, failures, staleness, task lifecycle."""

from __future__ import annotations

import asyncio

import pytest

from liveops.attendance.location import GpsFix, LocationPoller
from liveops.common.exceptions import LocationUnavailable


class FakeClock:
    def __init__(self, now: float = 1_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


def _provider(*fixes):
    calls = []

    async def provide() -> GpsFix:
        calls.append(1)
        return fixes[min(len(calls), len(fixes)) - 1]

    provide.calls = calls
    return provide


OFFICE_FIX = GpsFix(latitude=-6.2, longitude=106.816666, accuracy_meters=12.0)


class GeolocationDenied(Exception):
    pass


class TestPollOnce:

    async def test_success_stores_fix_with_acquisition_time(self):
        clock = FakeClock(500.0)
        poller = LocationPoller(_provider(OFFICE_FIX), clock=clock)

        fix = await poller.poll_once()

        assert fix.latitude == -6.2
        assert fix.accuracy_meters == 12.0
        assert fix.acquired_at == 500.0
        assert poller.current_fix() == fix
        assert poller.last_error is None

    async def test_timeout_leaves_fix_unknown(self):
        async def stalled() -> GpsFix:
            await asyncio.sleep(5)
            return OFFICE_FIX

        poller = LocationPoller(stalled, fix_timeout=0.01)

        assert await poller.poll_once() is None
        assert poller.current_fix() is None
        assert poller.last_error == "GPS fix timed out."
        with pytest.raises(LocationUnavailable) as exc_info:
            poller.require_fix()
        assert exc_info.value.detail == "GPS fix timed out."

    async def test_permission_denied_is_recorded(self):
        async def denied() -> GpsFix:
            raise PermissionError("location permission denied")

        poller = LocationPoller(denied)

        assert await poller.poll_once() is None
        assert "permission denied" in poller.last_error

    async def test_unexpected_provider_error_is_recorded_then_recovers(self):
        calls = []

        async def denied_once() -> GpsFix:
            calls.append(1)
            if len(calls) == 1:
                raise GeolocationDenied("user dismissed the prompt")
            return OFFICE_FIX

        poller = LocationPoller(denied_once)

        assert await poller.poll_once() is None
        assert "user dismissed the prompt" in poller.last_error
        assert await poller.poll_once() is not None
        assert poller.last_error is None

    async def test_failure_after_success_keeps_last_fix_until_stale(self):
        clock = FakeClock()
        state = {"fail": False}

        async def flaky() -> GpsFix:
            if state["fail"]:
                raise OSError("no satellites")
            return OFFICE_FIX

        poller = LocationPoller(flaky, slow_interval=60, fix_timeout=5, clock=clock)
        await poller.poll_once()
        state["fail"] = True
        await poller.poll_once()

        assert poller.current_fix() is not None
        clock.now += 66
        assert poller.current_fix() is None
        with pytest.raises(LocationUnavailable):
            poller.require_fix()

    async def test_explicit_max_fix_age(self):
        clock = FakeClock()
        poller = LocationPoller(_provider(OFFICE_FIX), max_fix_age=10, clock=clock)
        await poller.poll_once()
        clock.now += 10
        assert poller.current_fix() is not None
        clock.now += 1
        assert poller.current_fix() is None


class TestIntervals:

    async def test_fast_until_first_fix_then_slow(self):
        poller = LocationPoller(_provider(OFFICE_FIX), fast_interval=1, slow_interval=30)
        assert poller.next_interval() == 1
        await poller.poll_once()
        assert poller.next_interval() == 30


class TestLifecycle:

    async def test_start_polls_and_stop_cancels(self):
        provider = _provider(OFFICE_FIX)
        poller = LocationPoller(provider, fast_interval=0.01, slow_interval=0.01)

        poller.start()
        assert poller.running is True
        await asyncio.sleep(0.05)
        await poller.stop()

        assert poller.running is False
        assert len(provider.calls) >= 1
        assert poller.current_fix() is not None

    async def test_provider_error_does_not_stop_polling(self):
        calls = []

        async def denied_once() -> GpsFix:
            calls.append(1)
            if len(calls) == 1:
                raise GeolocationDenied("denied")
            return OFFICE_FIX

        poller = LocationPoller(denied_once, fast_interval=0.01, slow_interval=0.01)
        poller.start()
        await asyncio.sleep(0.05)

        assert poller.running is True
        assert len(calls) >= 2
        assert poller.current_fix() is not None
        await poller.stop()

    async def test_start_is_idempotent(self):
        poller = LocationPoller(_provider(OFFICE_FIX), fast_interval=0.01)
        poller.start()
        task = poller._task
        poller.start()
        assert poller._task is task
        await poller.stop()

    async def test_stop_without_start(self):
        poller = LocationPoller(_provider(OFFICE_FIX))
        await poller.stop()
        assert poller.running is False

    async def test_async_context_manager(self):
        async with LocationPoller(_provider(OFFICE_FIX), fast_interval=0.01) as poller:
            assert poller.running is True
            await asyncio.sleep(0.02)
        assert poller.running is False
