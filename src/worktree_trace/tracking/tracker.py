"""Tracked-file state for one workspace."""

from __future__ import annotations

import asyncio
import inspect
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Awaitable, Callable, Iterable

from ..config import TraceSettings
from ..git import GitRunner
from .aggregation import aggregate_records, changed_paths, clear_worktree, copy_tracked
from .branch import ComparisonBranchResolver
from .discovery import WorktreeDiscovery
from .models import ChangeRecord, TrackedFiles, Worktree
from .parsing import unquote_path
from .scanner import WorktreeScanner

if TYPE_CHECKING:
    from ..storage import StateStore

logger = logging.getLogger(__name__)

# Receives the changed relative paths of one cycle; ``None`` means "everything".
StateObserver = Callable[[set[str] | None], Awaitable[None] | None]


class WorktreeFileTracker:
    """Owns the aggregated map and keeps it current across scan cycles.

    The map is replaced wholesale at the end of each completed cycle, then
    persisted, then observers are told which paths changed. Scan cycles are
    serialized; a trigger that arrives while one is running is dropped.
    """

    def __init__(
        self,
        settings: TraceSettings,
        *,
        runner: GitRunner,
        discovery: WorktreeDiscovery,
        resolver: ComparisonBranchResolver,
        scanner: WorktreeScanner,
        store: StateStore,
        workspace_root: Path | str,
    ) -> None:
        self.settings = settings
        self._runner = runner
        self._discovery = discovery
        self._resolver = resolver
        self._scanner = scanner
        self._store = store
        self._workspace_root = Path(workspace_root)
        self._tracked: TrackedFiles = {}
        self._observers: list[StateObserver] = []
        self._lock = asyncio.Lock()

    @property
    def workspace_root(self) -> Path:
        return self._workspace_root

    @property
    def is_scanning(self) -> bool:
        return self._lock.locked()

    def update_settings(self, settings: TraceSettings) -> None:
        self.settings = settings
        self._scanner.settings = settings

    def subscribe(self, observer: StateObserver) -> Callable[[], None]:
        """Register *observer*; the returned callable unregisters it."""

        self._observers.append(observer)

        def _unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return _unsubscribe

    async def _notify(self, changed: set[str] | None) -> None:
        for observer in list(self._observers):
            result = observer(set(changed) if changed is not None else None)
            if inspect.isawaitable(result):
                await result

    def load_state(self) -> None:
        self._tracked = self._store.load()

    def reset_scanning_state(self) -> None:
        """Clear a paused comparison branch so the next cycle re-resolves it."""

        self._resolver.reset()

    async def refresh(self, *, force: bool = False) -> set[str] | None:
        """Discover worktrees and run one scan cycle."""

        worktrees = await self._discovery.discover(self.settings.worktree_pattern)
        changed = await self.scan_all(worktrees, force=force)
        if changed is not None:
            logger.info("Scanned %d worktrees", len(worktrees), extra={"changed_paths": len(changed)})
        return changed

    async def scan_all(self, worktrees: Iterable[Worktree], *, force: bool = False) -> set[str] | None:
        """Scan *worktrees* and swap in the aggregated result.

        Returns the changed paths, or ``None`` when the cycle was skipped
        because decorations are off, the comparison branch is paused (unless
        *force*), or another cycle is already running.

        Observers are notified only when the changed set is non-empty. A
        completed cycle that changed nothing returns ``set()`` and stays
        silent, so hosts do not repaint on every timer tick.
        """

        if self._lock.locked():
            logger.debug("Scan already in progress; dropping trigger")
            return None

        async with self._lock:
            if not self.settings.enable_file_decorations:
                return None
            if self._resolver.is_paused and not force:
                return None

            comparison_branch = await self._resolver.resolve(self.settings.comparison_branch)
            if comparison_branch is None:
                return None

            agent_worktrees = sorted(
                (wt for wt in worktrees if not wt.is_main_worktree),
                key=lambda wt: (wt.name, wt.path),
            )
            groups: list[list[ChangeRecord]] = []
            for worktree in agent_worktrees:
                groups.append(await self._scanner.scan_worktree(worktree, comparison_branch))

            new_tracked = aggregate_records(groups)
            changed = changed_paths(self._tracked, new_tracked)
            self._tracked = new_tracked
            self._store.save(new_tracked)

        if changed:
            await self._notify(changed)
        return changed

    async def clear_worktree(self, worktree_name: str) -> set[str]:
        """Drop every record owned by *worktree_name*."""

        async with self._lock:
            self._tracked, affected = clear_worktree(self._tracked, worktree_name)
            self._store.save(self._tracked)
        if affected:
            await self._notify(affected)
        return affected

    async def clear_all(self) -> set[str]:
        async with self._lock:
            affected = set(self._tracked)
            self._tracked = {}
            self._store.save(self._tracked)
        await self._notify(affected)
        return affected

    def records_for(self, relative_path: str) -> list[ChangeRecord]:
        return list(self._tracked.get(relative_path, ()))

    def all_tracked(self) -> TrackedFiles:
        return copy_tracked(self._tracked)

    def tracked_file_count(self) -> int:
        return len(self._tracked)

    def active_worktree_count(self) -> int:
        return len({record.worktree_name for records in self._tracked.values() for record in records})

    async def user_modified_files(self) -> set[str]:
        """Paths with uncommitted edits in the primary checkout; empty on failure."""

        result = await self._runner.run("diff", "--name-only", "HEAD", cwd=self._workspace_root)
        if not result.ok:
            return set()
        return {unquote_path(line) for line in result.stdout.splitlines() if line}


__all__ = ["StateObserver", "WorktreeFileTracker"]
