"""Badge and tooltip derivation for tracked files.

| Badge | Meaning |
|-------|---------|
| ``W``  | one worktree changed the file, all committed |
| ``W*`` | one worktree changed the file, with uncommitted work |
| ``W3`` | three worktrees changed the file |
| ``!W`` | worktrees and the local checkout both changed the file |
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from .models import ChangeRecord

LOCAL_CHANGES_PREFIX = "[!local changes] "


@dataclass(slots=True, frozen=True)
class Badge:
    code: str | None
    tooltip: str


def generate_badge(records: Sequence[ChangeRecord], user_modified: bool) -> str | None:
    """Return a two-character status code, or ``None`` when nothing touched the file."""

    count = len(records)
    if count == 0:
        return None
    if user_modified:
        return "!W"
    if count > 1:
        return f"W{count}"
    if any(record.has_uncommitted_changes for record in records):
        return "W*"
    return "W"


def generate_tooltip(records: Sequence[ChangeRecord], user_modified: bool) -> str:
    parts = [f"{record.worktree_name}{record.status_suffix}" for record in records]
    tooltip = f"Changed by: {', '.join(parts)}"
    if user_modified:
        tooltip = f"{LOCAL_CHANGES_PREFIX}{tooltip}"
    return tooltip


def derive_badge(records: Sequence[ChangeRecord], user_modified: bool) -> Badge:
    return Badge(code=generate_badge(records, user_modified), tooltip=generate_tooltip(records, user_modified))


def should_decorate(
    path: Path,
    workspace_root: Path,
    decorations_enabled: bool,
    has_tracked_records: bool,
) -> bool:
    """Whether *path* is eligible for a decoration at all."""

    if not decorations_enabled:
        return False
    if not path.is_absolute():
        path = workspace_root / path
    if not path.is_relative_to(workspace_root) or path == workspace_root:
        return False
    return has_tracked_records


__all__ = [
    "Badge",
    "LOCAL_CHANGES_PREFIX",
    "derive_badge",
    "generate_badge",
    "generate_tooltip",
    "should_decorate",
]
