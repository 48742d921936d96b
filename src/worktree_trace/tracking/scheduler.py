"""Timer-driven scan cycles."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Callable

from .tracker import WorktreeFileTracker

logger = logging.getLogger(__name__)


class PeriodicScanner:
    """Runs a scan cycle every *interval* seconds while the host is active."""

    def __init__(
        self,
        tracker: WorktreeFileTracker,
        interval_seconds: float,
        *,
        is_active: Callable[[], bool] | None = None,
    ) -> None:
        self._tracker = tracker
        self.interval_seconds = interval_seconds
        self._is_active = is_active or (lambda: True)
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run())
        logger.info("Started periodic refresh (every %ss)", self.interval_seconds)

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    async def restart(self, interval_seconds: float | None = None) -> None:
        await self.stop()
        if interval_seconds is not None:
            self.interval_seconds = interval_seconds
        self.start()

    async def tick(self) -> set[str] | None:
        """One timer firing: scan unless the host is inactive."""

        if not self._is_active():
            return None
        try:
            return await self._tracker.refresh()
        except Exception:
            logger.exception("Failed to scan worktrees")
            return None

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval_seconds)
            await self.tick()


__all__ = ["PeriodicScanner"]
