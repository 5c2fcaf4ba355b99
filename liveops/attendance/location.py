"""Boundary-side GPS fix polling.

Fix acquisition is asynchronous and may stall or be denied. ``LocationPoller``
keeps the latest fix fresh on a fast interval until a first fix arrives and
on a slow interval afterwards; failures leave the fix "unknown", which the
geofence check blocks. The polling task is cancelled by ``stop()``.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from liveops.common.exceptions import LocationUnavailable
from liveops.config import settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GpsFix:
    latitude: float
    longitude: float
    accuracy_meters: Optional[float] = None
    acquired_at: float = 0.0


FixProvider = Callable[[], Awaitable[GpsFix]]


class LocationPoller:
    """Periodically refresh a GPS fix from ``provider``."""

    def __init__(
        self,
        provider: FixProvider,
        *,
        fast_interval: float = settings.GPS_FAST_POLL_SECONDS,
        slow_interval: float = settings.GPS_SLOW_POLL_SECONDS,
        fix_timeout: float = settings.GPS_FIX_TIMEOUT_SECONDS,
        max_fix_age: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._provider = provider
        self.fast_interval = fast_interval
        self.slow_interval = slow_interval
        self.fix_timeout = fix_timeout
        # A fix older than one slow interval plus the timeout is stale.
        self.max_fix_age = max_fix_age if max_fix_age is not None else slow_interval + fix_timeout
        self._clock = clock
        self._fix: Optional[GpsFix] = None
        self._last_error: Optional[str] = None
        self._task: Optional[asyncio.Task] = None

    # ── State ───────────────────────────────────────────────────────

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def last_error(self) -> Optional[str]:
        return self._last_error

    def current_fix(self) -> Optional[GpsFix]:
        """Latest fix, or ``None`` when there is none or it has gone stale."""
        if self._fix is None:
            return None
        if self._clock() - self._fix.acquired_at > self.max_fix_age:
            return None
        return self._fix

    def require_fix(self) -> GpsFix:
        fix = self.current_fix()
        if fix is None:
            raise LocationUnavailable(self._last_error or "No GPS fix available.")
        return fix

    # ── Polling ─────────────────────────────────────────────────────

    async def poll_once(self) -> Optional[GpsFix]:
        """Acquire one fix; failures are recorded, never raised."""
        try:
            fix = await asyncio.wait_for(self._provider(), timeout=self.fix_timeout)
        except asyncio.TimeoutError:
            self._last_error = "GPS fix timed out."
            logger.warning("GPS fix timed out after %.1fs", self.fix_timeout)
            return None
        except Exception as exc:
            self._last_error = f"GPS fix failed: {exc}"
            logger.warning("GPS fix failed: %s", exc)
            return None

        self._fix = GpsFix(
            latitude=fix.latitude,
            longitude=fix.longitude,
            accuracy_meters=fix.accuracy_meters,
            acquired_at=self._clock(),
        )
        self._last_error = None
        return self._fix

    def next_interval(self) -> float:
        return self.slow_interval if self._fix is not None else self.fast_interval

    async def _run(self) -> None:
        while True:
            await self.poll_once()
            await asyncio.sleep(self.next_interval())

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run())

    async def stop(self) -> None:
        """Cancel the polling task and wait for it to finish."""
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def __aenter__(self) -> "LocationPoller":
        self.start()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.stop()
