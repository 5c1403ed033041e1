from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)


class AsyncioIntervalRunner:
    """Periodic callback on the running event loop, one task at a time."""

    def __init__(self, *, name: str = "interval-runner") -> None:
        self._name = name
        self._task: asyncio.Task[None] | None = None
        self.interval_seconds: float | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self, interval_seconds: float, callback: Callable[[], Awaitable[object]]) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self.stop()
        self.interval_seconds = interval_seconds
        self._task = asyncio.get_running_loop().create_task(
            self._run(interval_seconds, callback), name=self._name
        )
        logger.info("%s scheduled every %.0fs", self._name, interval_seconds)

    def stop(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
            logger.info("%s stopped", self._name)
        self.interval_seconds = None

    async def aclose(self) -> None:
        task = self._task
        self.stop()
        self._task = None
        if task is not None:
            with contextlib.suppress(asyncio.CancelledError):
                await task

    async def _run(
        self, interval_seconds: float, callback: Callable[[], Awaitable[object]]
    ) -> None:
        while True:
            await asyncio.sleep(interval_seconds)
            try:
                await callback()
            except Exception as exc:
                logger.error("%s callback failed: %s", self._name, exc, exc_info=True)
