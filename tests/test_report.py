from __future__ import annotations

from worktree_trace.config import TraceSettings
from worktree_trace.tracking import ChangeRecord
from worktree_trace.tracking.report import (
    format_touched_files,
    status_bar_label,
    status_message,
    touched_files_by_worktree,
)


def _record(path: str, worktree: str, **flags) -> ChangeRecord:
    return ChangeRecord(relative_path=path, worktree_name=worktree, branch="b", change_type="modified", **flags)


TRACKED = {
    "b.py": [_record("b.py", "worktree-agent-1"), _record("b.py", "worktree-agent-2", uncommitted=True)],
    "a.py": [_record("a.py", "worktree-agent-1", has_uncommitted_on_top=True)],
}


def test_grouping_sorts_paths_per_worktree() -> None:
    assert touched_files_by_worktree(TRACKED) == {
        "worktree-agent-1": ["a.py (committed + uncommitted)", "b.py"],
        "worktree-agent-2": ["b.py (uncommitted)"],
    }


def test_text_report() -> None:
    report = format_touched_files(TRACKED)

    assert report.splitlines() == [
        "=== Touched Files by Worktree ===",
        "",
        "worktree-agent-1 (2 files)",
        " - a.py (committed + uncommitted)",
        " - b.py",
        "",
        "worktree-agent-2 (1 files)",
        " - b.py (uncommitted)",
        "",
        "Total: 2 unique files across 2 worktrees",
    ]


def test_empty_report() -> None:
    assert format_touched_files({}) == "No touched files tracked"


def test_status_message() -> None:
    settings = TraceSettings(worktree_pattern="agent-*")

    assert status_message(3, 2, settings) == "3 files touched by 2 worktrees (pattern: agent-*)"
    assert status_message(3, 2, settings.model_copy(update={"enable_file_decorations": False})) == (
        "Decorations disabled"
    )


def test_status_bar_label() -> None:
    settings = TraceSettings(scan_interval_seconds=30)

    assert status_bar_label(settings) == "Ⓐ wrktree trace: 30s"
    assert status_bar_label(settings.model_copy(update={"enable_file_decorations": False})) == (
        "○ wrktree trace: Off"
    )
