from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from worktree_trace.tracking import (
    ChangeRecord,
    derive_badge,
    generate_badge,
    generate_tooltip,
    should_decorate,
)


def _record(worktree: str, **flags) -> ChangeRecord:
    return ChangeRecord(
        relative_path="src/app.py",
        worktree_name=worktree,
        branch="feature",
        change_type="modified",
        **flags,
    )


def test_no_records_means_no_badge() -> None:
    assert generate_badge([], user_modified=False) is None
    assert generate_badge([], user_modified=True) is None


def test_single_committed_worktree() -> None:
    assert generate_badge([_record("worktree-agent-1")], user_modified=False) == "W"


def test_single_worktree_with_uncommitted_work() -> None:
    assert generate_badge([_record("wt", uncommitted=True)], user_modified=False) == "W*"
    assert generate_badge([_record("wt", has_uncommitted_on_top=True)], user_modified=False) == "W*"


def test_multiple_worktrees_show_count() -> None:
    records = [_record("wt-1"), _record("wt-2", uncommitted=True), _record("wt-3")]

    assert generate_badge(records, user_modified=False) == "W3"


def test_local_edit_conflict_wins() -> None:
    assert generate_badge([_record("wt")], user_modified=True) == "!W"
    assert generate_badge([_record("wt-1"), _record("wt-2")], user_modified=True) == "!W"


def test_tooltip_lists_worktrees_with_status() -> None:
    records = [
        _record("worktree-agent-1"),
        _record("worktree-agent-2", uncommitted=True),
        _record("worktree-agent-3", has_uncommitted_on_top=True),
    ]

    assert generate_tooltip(records, user_modified=False) == (
        "Changed by: worktree-agent-1, worktree-agent-2 (uncommitted), "
        "worktree-agent-3 (committed + uncommitted)"
    )


def test_tooltip_prefixes_local_changes() -> None:
    tooltip = generate_tooltip([_record("wt")], user_modified=True)

    assert tooltip == "[!local changes] Changed by: wt"


def test_derive_badge_pairs_code_and_tooltip() -> None:
    badge = derive_badge([_record("wt", uncommitted=True)], user_modified=False)

    assert badge.code == "W*"
    assert badge.tooltip == "Changed by: wt (uncommitted)"


def test_record_rejects_both_uncommitted_flags() -> None:
    with pytest.raises(ValidationError):
        _record("wt", uncommitted=True, has_uncommitted_on_top=True)


@pytest.mark.parametrize(
    ("path", "enabled", "tracked", "expected"),
    [
        (Path("/repo/src/app.py"), True, True, True),
        (Path("src/app.py"), True, True, True),
        (Path("/repo/src/app.py"), False, True, False),
        (Path("/repo/src/app.py"), True, False, False),
        (Path("/elsewhere/app.py"), True, True, False),
        (Path("/repo"), True, True, False),
    ],
)
def test_should_decorate(path: Path, enabled: bool, tracked: bool, expected: bool) -> None:
    assert should_decorate(path, Path("/repo"), enabled, tracked) is expected
