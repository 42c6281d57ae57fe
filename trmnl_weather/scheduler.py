import asyncio
import enum
import time
from collections.abc import Awaitable, Callable
from datetime import timedelta

import structlog
from structlog.typing import FilteringBoundLogger

from .integrations.common import is_rate_limited

logger = structlog.get_logger()


class SchedulerState(enum.Enum):
    IDLE = "idle"
    RUNNING = "running"
    BACKOFF = "backoff"
    STOPPED = "stopped"


class PollScheduler:
    """
    Run an update cycle immediately, and then once every interval until
    told to shut down.

    A cycle that fails because we're being rate limited pushes the next
    cycle a full interval out from the time of the failure. Any other failure
    is logged, and the next cycle runs at the regular time. A failing cycle
    never stops the scheduler.
    """

    def __init__(
        self,
        cycle: Callable[[], Awaitable[None]],
        *,
        interval: timedelta,
        clock: Callable[[], float] = time.monotonic,
        logger: FilteringBoundLogger = logger,
    ) -> None:
        if interval <= timedelta(0):
            raise ValueError("interval must be positive")

        self.cycle = cycle
        self.interval = interval
        self.clock = clock
        self.logger = logger
        self.state = SchedulerState.IDLE

    async def run(self, shutdown: asyncio.Event) -> None:
        """
        Loop until the shutdown event is set. A cycle that is already running
        when shutdown is requested is allowed to finish.
        """

        self.logger.info("Running server", update_interval=str(self.interval))

        if not shutdown.is_set():
            deadline = await self.run_cycle(scheduled_at=self.clock())

            while not await self._wait(shutdown, until=deadline):
                deadline = await self.run_cycle(scheduled_at=deadline)

        self.state = SchedulerState.STOPPED
        self.logger.info("Scheduler stopped")

    async def run_cycle(self, *, scheduled_at: float) -> float:
        """
        Run a single cycle, and return the time the next one is due.
        """

        self.state = SchedulerState.RUNNING

        try:
            await self.cycle()
        except Exception as e:
            if is_rate_limited(e):
                self.state = SchedulerState.BACKOFF
                self.logger.warning(
                    "Rate limited, applying backoff",
                    backoff=str(self.interval),
                    error=str(e),
                )
                return self.clock() + self.interval.total_seconds()

            self.logger.exception("Failed to update")

        return self.next_tick(scheduled_at=scheduled_at, now=self.clock())

    def next_tick(self, *, scheduled_at: float, now: float) -> float:
        """
        Get the next regular tick after `scheduled_at`. Ticks that were missed
        while a slow cycle ran are skipped rather than run back to back.
        """

        interval = self.interval.total_seconds()
        deadline = scheduled_at + interval
        if deadline <= now:
            missed = int((now - deadline) // interval) + 1
            deadline += missed * interval
        return deadline

    async def _wait(self, shutdown: asyncio.Event, *, until: float) -> bool:
        """
        Wait for either the deadline or the shutdown event, whichever comes
        first. Returns True if we should shut down.
        """

        if shutdown.is_set():
            return True

        timeout = max(0.0, until - self.clock())
        try:
            await asyncio.wait_for(shutdown.wait(), timeout=timeout)
        except TimeoutError:
            return False
        return True
