"""Cross-worktree aggregation and generational diffing of tracked files."""

from __future__ import annotations

from typing import Iterable

from .models import ChangeRecord, TrackedFiles


def aggregate_records(groups: Iterable[Iterable[ChangeRecord]]) -> TrackedFiles:
    """Merge per-worktree record lists into one path-indexed map.

    Each path keeps at most one record per worktree. When a worktree reports
    the same path twice, committed data replaces uncommitted data but never
    the reverse.
    """

    tracked: TrackedFiles = {}
    for records in groups:
        for record in records:
            bucket = tracked.setdefault(record.relative_path, [])
            for index, existing in enumerate(bucket):
                if existing.worktree_name == record.worktree_name:
                    if not record.is_uncommitted_only:
                        bucket[index] = record
                    break
            else:
                bucket.append(record)
    return tracked


def clear_worktree(tracked: TrackedFiles, worktree_name: str) -> tuple[TrackedFiles, set[str]]:
    """Return a copy of *tracked* without *worktree_name*'s records and the affected paths."""

    result: TrackedFiles = {}
    affected: set[str] = set()
    for path, records in tracked.items():
        remaining = [record for record in records if record.worktree_name != worktree_name]
        if len(remaining) != len(records):
            affected.add(path)
        if remaining:
            result[path] = remaining
    return result, affected


def _signature(record: ChangeRecord) -> tuple[str, str, bool, bool]:
    return (
        record.worktree_name,
        record.change_type,
        bool(record.uncommitted),
        bool(record.has_uncommitted_on_top),
    )


def records_equal(a: list[ChangeRecord], b: list[ChangeRecord]) -> bool:
    """Positional equality: record *i* of *a* must match record *i* of *b*."""

    if len(a) != len(b):
        return False
    return all(_signature(left) == _signature(right) for left, right in zip(a, b))


def changed_paths(old: TrackedFiles, new: TrackedFiles) -> set[str]:
    """Paths added, removed, or whose record sequence differs between two maps."""

    changed = {
        path
        for path, records in new.items()
        if path not in old or not records_equal(old[path], records)
    }
    changed.update(path for path in old if path not in new)
    return changed


def copy_tracked(tracked: TrackedFiles) -> TrackedFiles:
    """Shallow copy that callers may mutate without touching *tracked*."""

    return {path: list(records) for path, records in tracked.items()}


__all__ = [
    "aggregate_records",
    "changed_paths",
    "clear_worktree",
    "copy_tracked",
    "records_equal",
]
