"""Data models shared by the tracking engine."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Literal

from pydantic import BaseModel, ConfigDict, model_validator
from pydantic.alias_generators import to_camel

ChangeType = Literal["added", "modified", "deleted"]


@dataclass(slots=True, frozen=True)
class Worktree:
    """A git worktree discovered via ``git worktree list --porcelain``."""

    path: str
    branch: str
    is_main_worktree: bool = False

    @property
    def name(self) -> str:
        """Directory basename, used as the worktree's identity in tracked records."""

        return os.path.basename(os.path.normpath(self.path))


class ChangeRecord(BaseModel):
    """A file changed by one worktree relative to the comparison branch.

    ``uncommitted`` marks a change that exists only in the working tree or
    index. ``has_uncommitted_on_top`` marks a committed change with further
    uncommitted edits layered on it. Unset flags stay ``None`` so persisted
    records remain minimal.
    """

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    relative_path: str
    worktree_name: str
    branch: str
    change_type: ChangeType
    uncommitted: bool | None = None
    has_uncommitted_on_top: bool | None = None

    @model_validator(mode="after")
    def _check_exclusive_flags(self) -> "ChangeRecord":
        if self.uncommitted and self.has_uncommitted_on_top:
            raise ValueError("a record cannot be both uncommitted and committed with uncommitted changes on top")
        return self

    @property
    def is_uncommitted_only(self) -> bool:
        return bool(self.uncommitted)

    @property
    def has_uncommitted_changes(self) -> bool:
        return bool(self.uncommitted or self.has_uncommitted_on_top)

    @property
    def status_suffix(self) -> str:
        if self.has_uncommitted_on_top:
            return " (committed + uncommitted)"
        if self.uncommitted:
            return " (uncommitted)"
        return ""


TrackedFiles = dict[str, list[ChangeRecord]]


__all__ = ["ChangeRecord", "ChangeType", "TrackedFiles", "Worktree"]
