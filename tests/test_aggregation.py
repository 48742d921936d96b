from __future__ import annotations

from worktree_trace.tracking import (
    ChangeRecord,
    aggregate_records,
    changed_paths,
    clear_worktree,
    copy_tracked,
    records_equal,
)


def _record(path: str, worktree: str, change_type: str = "modified", **flags) -> ChangeRecord:
    return ChangeRecord(
        relative_path=path,
        worktree_name=worktree,
        branch=f"agent/{worktree}",
        change_type=change_type,
        **flags,
    )


def test_aggregate_groups_records_by_path() -> None:
    tracked = aggregate_records(
        [
            [_record("shared.py", "wt-1"), _record("one.py", "wt-1", "added")],
            [_record("shared.py", "wt-2", "deleted")],
        ]
    )

    assert sorted(tracked) == ["one.py", "shared.py"]
    assert [r.worktree_name for r in tracked["shared.py"]] == ["wt-1", "wt-2"]


def test_committed_record_replaces_uncommitted_for_same_worktree() -> None:
    tracked = aggregate_records(
        [[_record("a.py", "wt-1", "added", uncommitted=True), _record("a.py", "wt-1", "modified")]]
    )

    assert len(tracked["a.py"]) == 1
    assert tracked["a.py"][0].uncommitted is None
    assert tracked["a.py"][0].change_type == "modified"


def test_uncommitted_record_never_replaces_committed() -> None:
    tracked = aggregate_records(
        [[_record("a.py", "wt-1", "modified"), _record("a.py", "wt-1", "deleted", uncommitted=True)]]
    )

    assert len(tracked["a.py"]) == 1
    assert tracked["a.py"][0].change_type == "modified"
    assert tracked["a.py"][0].uncommitted is None


def test_aggregate_of_nothing_is_empty() -> None:
    assert aggregate_records([]) == {}
    assert aggregate_records([[], []]) == {}


def test_clear_worktree_removes_only_its_records() -> None:
    tracked = aggregate_records(
        [
            [_record("shared.py", "wt-1"), _record("solo.py", "wt-1")],
            [_record("shared.py", "wt-2"), _record("other.py", "wt-2")],
        ]
    )

    remaining, affected = clear_worktree(tracked, "wt-1")

    assert affected == {"shared.py", "solo.py"}
    assert sorted(remaining) == ["other.py", "shared.py"]
    assert [r.worktree_name for r in remaining["shared.py"]] == ["wt-2"]
    assert len(tracked["shared.py"]) == 2


def test_clear_unknown_worktree_is_a_no_op() -> None:
    tracked = aggregate_records([[_record("a.py", "wt-1")]])

    remaining, affected = clear_worktree(tracked, "wt-9")

    assert affected == set()
    assert remaining == tracked


def test_records_equal_compares_flags_and_position() -> None:
    first = [_record("a.py", "wt-1"), _record("a.py", "wt-2")]
    reordered = [_record("a.py", "wt-2"), _record("a.py", "wt-1")]
    flagged = [_record("a.py", "wt-1", has_uncommitted_on_top=True), _record("a.py", "wt-2")]

    assert records_equal(first, [_record("a.py", "wt-1"), _record("a.py", "wt-2")])
    assert not records_equal(first, reordered)
    assert not records_equal(first, flagged)
    assert not records_equal(first, first[:1])


def test_records_equal_ignores_branch() -> None:
    a = [_record("a.py", "wt-1")]
    b = [ChangeRecord(relative_path="a.py", worktree_name="wt-1", branch="renamed", change_type="modified")]

    assert records_equal(a, b)


def test_changed_paths_covers_additions_removals_and_edits() -> None:
    old = {
        "kept.py": [_record("kept.py", "wt-1")],
        "removed.py": [_record("removed.py", "wt-1")],
        "edited.py": [_record("edited.py", "wt-1")],
    }
    new = {
        "kept.py": [_record("kept.py", "wt-1")],
        "edited.py": [_record("edited.py", "wt-1", "deleted")],
        "added.py": [_record("added.py", "wt-2", "added", uncommitted=True)],
    }

    assert changed_paths(old, new) == {"removed.py", "edited.py", "added.py"}
    assert changed_paths(new, new) == set()


def test_copy_tracked_is_independent() -> None:
    tracked = {"a.py": [_record("a.py", "wt-1")]}

    copied = copy_tracked(tracked)
    copied["a.py"].append(_record("a.py", "wt-2"))
    copied["b.py"] = []

    assert len(tracked["a.py"]) == 1
    assert "b.py" not in tracked
