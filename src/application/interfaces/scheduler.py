from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Protocol


class PeriodicScheduler(Protocol):
    @property
    def running(self) -> bool: ...

    def start(self, interval_seconds: float, callback: Callable[[], Awaitable[object]]) -> None:
        """Run `callback` every `interval_seconds`, replacing any previous schedule."""
        ...

    def stop(self) -> None:
        """Cancel the schedule; the callback does not fire again afterwards."""
        ...

    async def aclose(self) -> None: ...
