"""Per-file decorations for the rendering host."""

from __future__ import annotations

import inspect
from pathlib import Path
from typing import Awaitable, Callable

from ..config import TraceSettings
from .badges import Badge, derive_badge, should_decorate
from .tracker import WorktreeFileTracker

DecorationObserver = Callable[[set[str] | None], Awaitable[None] | None]


class DecorationProvider:
    """Answers badge queries and tells the host which paths need repainting.

    Keeps a cache of files the user has edited in the primary checkout. On
    every tracker notification the cache is refreshed and observers receive
    the union of tracker-changed paths and paths whose local-edit state
    flipped; ``None`` asks the host to repaint everything.
    """

    def __init__(self, tracker: WorktreeFileTracker, settings: TraceSettings) -> None:
        self._tracker = tracker
        self.settings = settings
        self._user_modified: set[str] = set()
        self._observers: list[DecorationObserver] = []
        self._unsubscribe = tracker.subscribe(self.refresh_user_modified)

    @property
    def user_modified(self) -> set[str]:
        return set(self._user_modified)

    def subscribe(self, observer: DecorationObserver) -> Callable[[], None]:
        self._observers.append(observer)

        def _unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return _unsubscribe

    async def _fire(self, paths: set[str] | None) -> None:
        for observer in list(self._observers):
            result = observer(set(paths) if paths is not None else None)
            if inspect.isawaitable(result):
                await result

    async def refresh_user_modified(self, changed_paths: set[str] | None = None) -> set[str] | None:
        """Re-read local edits and notify observers; returns what was fired."""

        previous = self._user_modified
        self._user_modified = await self._tracker.user_modified_files()

        all_changed = set(changed_paths or ()) | (previous ^ self._user_modified)
        fired = all_changed or None
        await self._fire(fired)
        return fired

    async def refresh(self) -> None:
        """Ask observers to repaint every decoration."""

        await self._fire(None)

    def _relative(self, path: str | Path) -> str:
        candidate = Path(path)
        root = self._tracker.workspace_root
        if candidate.is_absolute() and candidate.is_relative_to(root):
            return candidate.relative_to(root).as_posix()
        return candidate.as_posix()

    def decoration_for(self, path: str | Path) -> Badge | None:
        """Badge for *path* (absolute, or relative to the workspace root)."""

        relative = self._relative(path)
        records = self._tracker.records_for(relative)
        if not should_decorate(
            Path(path),
            self._tracker.workspace_root,
            self.settings.enable_file_decorations,
            bool(records),
        ):
            return None

        user_modified = self.settings.show_local_edit_warning and relative in self._user_modified
        return derive_badge(records, user_modified)

    def close(self) -> None:
        self._unsubscribe()
        self._observers.clear()


__all__ = ["DecorationObserver", "DecorationProvider"]
