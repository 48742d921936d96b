"""Human-readable summaries of tracked files."""

from __future__ import annotations

from ..config import TraceSettings
from .models import TrackedFiles


def touched_files_by_worktree(tracked: TrackedFiles) -> dict[str, list[str]]:
    """Group tracked paths by worktree name, each list sorted."""

    grouped: dict[str, list[str]] = {}
    for path, records in tracked.items():
        for record in records:
            grouped.setdefault(record.worktree_name, []).append(f"{path}{record.status_suffix}")
    return {name: sorted(paths) for name, paths in grouped.items()}


def format_touched_files(tracked: TrackedFiles) -> str:
    if not tracked:
        return "No touched files tracked"

    grouped = touched_files_by_worktree(tracked)
    lines = ["=== Touched Files by Worktree ===", ""]
    for name, paths in grouped.items():
        lines.append(f"{name} ({len(paths)} files)")
        lines.extend(f" - {path}" for path in paths)
        lines.append("")
    lines.append(f"Total: {len(tracked)} unique files across {len(grouped)} worktrees")
    return "\n".join(lines)


def status_message(file_count: int, worktree_count: int, settings: TraceSettings) -> str:
    if not settings.enable_file_decorations:
        return "Decorations disabled"
    return (
        f"{file_count} files touched by {worktree_count} worktrees "
        f"(pattern: {settings.worktree_pattern})"
    )


def status_bar_label(settings: TraceSettings) -> str:
    if settings.enable_file_decorations:
        return f"Ⓐ wrktree trace: {settings.scan_interval_seconds}s"
    return "○ wrktree trace: Off"


__all__ = [
    "format_touched_files",
    "status_bar_label",
    "status_message",
    "touched_files_by_worktree",
]
