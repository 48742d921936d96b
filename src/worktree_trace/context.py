"""Wiring of the tracking engine for one workspace."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from .config import TraceSettings
from .git import GitRunner
from .storage import StateStore
from .tracking import (
    ComparisonBranchResolver,
    DecorationProvider,
    PeriodicScanner,
    WorktreeDiscovery,
    WorktreeFileTracker,
    WorktreeScanner,
)

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class TraceContext:
    """Every engine instance for a workspace, built once and passed explicitly."""

    settings: TraceSettings
    runner: GitRunner
    discovery: WorktreeDiscovery
    resolver: ComparisonBranchResolver
    scanner: WorktreeScanner
    store: StateStore
    tracker: WorktreeFileTracker
    decorations: DecorationProvider
    scheduler: PeriodicScanner

    async def startup(self) -> None:
        """Load persisted state, run the first scan and start the timer."""

        self.tracker.load_state()
        await self.tracker.refresh()
        await self.decorations.refresh_user_modified(None)
        if self.settings.enable_file_decorations:
            self.scheduler.start()

    async def shutdown(self) -> None:
        await self.scheduler.stop()
        self.decorations.close()

    async def apply_settings(self, settings: TraceSettings) -> None:
        """Push new settings to every component and react to what changed."""

        previous = self.settings
        self.settings = settings
        self.tracker.update_settings(settings)
        self.decorations.settings = settings

        if previous.enable_file_decorations != settings.enable_file_decorations:
            if settings.enable_file_decorations:
                self.scheduler.interval_seconds = settings.scan_interval_seconds
                self.scheduler.start()
            else:
                await self.scheduler.stop()
            await self.decorations.refresh()
        elif (
            previous.scan_interval_seconds != settings.scan_interval_seconds
            and settings.enable_file_decorations
        ):
            await self.scheduler.restart(settings.scan_interval_seconds)

        if previous.comparison_branch != settings.comparison_branch:
            self.tracker.reset_scanning_state()
            await self.tracker.refresh()
            await self.decorations.refresh()


def build_context(
    settings: TraceSettings,
    *,
    runner: GitRunner | None = None,
    is_active: Callable[[], bool] | None = None,
    on_invalid_branch: Callable[[str], None] | None = None,
    store: StateStore | None = None,
) -> TraceContext:
    """Construct the engine for ``settings.repo_root``."""

    runner = runner or GitRunner(Path(settings.git_path) if settings.git_path else None)
    workspace_root = settings.repo_root
    discovery = WorktreeDiscovery(runner, workspace_root)
    resolver = ComparisonBranchResolver(runner, workspace_root, on_invalid_branch=on_invalid_branch)
    scanner = WorktreeScanner(runner, resolver, settings)
    store = store or StateStore(settings.state_file)
    tracker = WorktreeFileTracker(
        settings,
        runner=runner,
        discovery=discovery,
        resolver=resolver,
        scanner=scanner,
        store=store,
        workspace_root=workspace_root,
    )
    decorations = DecorationProvider(tracker, settings)
    scheduler = PeriodicScanner(tracker, settings.scan_interval_seconds, is_active=is_active)
    logger.debug("Built tracking context", extra={"repo_root": str(workspace_root), "state_file": str(store.path)})
    return TraceContext(
        settings=settings,
        runner=runner,
        discovery=discovery,
        resolver=resolver,
        scanner=scanner,
        store=store,
        tracker=tracker,
        decorations=decorations,
        scheduler=scheduler,
    )


__all__ = ["TraceContext", "build_context"]
