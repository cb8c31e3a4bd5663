"""Cancellable periodic monitoring loop."""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Awaitable, Callable

logger = logging.getLogger(__name__)

Tick = Callable[[], Awaitable[object]]
ErrorHandler = Callable[[BaseException], None]


class MonitorState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    STOPPED = "stopped"


class MonitoringHandle:
    """Runs ``tick`` every ``interval`` seconds until :meth:`stop` is called.

    The first tick runs one interval after :meth:`start`. Each tick is awaited
    before the next sleep begins, so ticks never overlap; a slow tick delays
    the following one. Exceptions raised by a tick go to ``on_error`` and the
    loop carries on.
    """

    def __init__(
        self,
        name: str,
        tick: Tick,
        interval: float,
        *,
        on_error: ErrorHandler | None = None,
    ) -> None:
        if interval <= 0:
            raise ValueError("Monitoring interval must be positive")
        self.name = name
        self.interval = interval
        self._tick = tick
        self._on_error = on_error
        self._task: asyncio.Task[None] | None = None
        self.state = MonitorState.IDLE
        self.ticks = 0
        self.failures = 0

    @property
    def running(self) -> bool:
        return self.state is MonitorState.RUNNING

    def start(self) -> "MonitoringHandle":
        if self.state is not MonitorState.IDLE:
            raise RuntimeError(f"Monitor {self.name} already {self.state.value}")
        self._task = asyncio.get_running_loop().create_task(
            self._loop(), name=f"agent-qa-monitor:{self.name}"
        )
        self.state = MonitorState.RUNNING
        logger.info("Monitoring started for %s every %ss", self.name, self.interval)
        return self

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            try:
                await self._tick()
            except asyncio.CancelledError:
                raise
            except Exception as exc:
                self.failures += 1
                if self._on_error is not None:
                    self._on_error(exc)
                else:
                    logger.exception("Monitoring tick failed for %s", self.name)
            finally:
                self.ticks += 1

    def stop(self) -> bool:
        """Cancel the loop. Returns ``False`` when it was not running."""

        if self.state is not MonitorState.RUNNING:
            return False
        self.state = MonitorState.STOPPED
        if self._task is not None:
            self._task.cancel()
        logger.info("Monitoring stopped for %s", self.name)
        return True

    __call__ = stop

    async def wait_stopped(self) -> None:
        """Wait for a cancelled loop task to finish unwinding."""

        if self._task is None:
            return
        try:
            await self._task
        except asyncio.CancelledError:
            pass


__all__ = ["MonitorState", "MonitoringHandle"]
