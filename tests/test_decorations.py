from __future__ import annotations

import asyncio
from pathlib import Path

from worktree_trace.config import TraceSettings
from worktree_trace.context import TraceContext, build_context
from worktree_trace.git import FakeGitRunner
from worktree_trace.storage import StateStore

ROOT = "/repo"
WT1 = "/repo/worktree-agent-1"
WT2 = "/repo/worktree-agent-2"


def _responses(local_edits: str = "") -> dict:
    responses: dict = {
        ("worktree", "list", "--porcelain"): (
            "worktree /repo\nHEAD a\nbranch refs/heads/main\n\n"
            f"worktree {WT1}\nHEAD b\nbranch refs/heads/agent/one\n\n"
            f"worktree {WT2}\nHEAD c\nbranch refs/heads/agent/two\n"
        ),
        ("rev-parse", "--abbrev-ref", "HEAD"): "main\n",
        ("rev-parse", "--verify", "main"): "a\n",
        (ROOT, "diff", "--name-only", "HEAD"): local_edits,
    }
    for path in (WT1, WT2):
        responses[(path, "diff", "--name-status", "HEAD")] = ""
        responses[(path, "diff", "--name-status", "--cached")] = ""
        responses[(path, "ls-files", "--others", "--exclude-standard")] = ""
    responses[(WT1, "diff", "--name-status", "main...HEAD")] = "M\tshared.py\nM\tsolo.py\n"
    responses[(WT2, "diff", "--name-status", "main...HEAD")] = "M\tshared.py\n"
    responses[(WT2, "ls-files", "--others", "--exclude-standard")] = "draft.md\n"
    return responses


def _context(tmp_path: Path, runner: FakeGitRunner, **overrides) -> TraceContext:
    settings = TraceSettings(repo_root=Path(ROOT), **overrides)
    return build_context(settings, runner=runner, store=StateStore(tmp_path / "state.json"))


def test_badges_for_tracked_files(tmp_path: Path) -> None:
    context = _context(tmp_path, FakeGitRunner(_responses()))
    asyncio.run(context.tracker.refresh())

    shared = context.decorations.decoration_for("shared.py")
    solo = context.decorations.decoration_for(Path(ROOT) / "solo.py")
    draft = context.decorations.decoration_for("draft.md")

    assert shared is not None and shared.code == "W2"
    assert shared.tooltip == "Changed by: worktree-agent-1, worktree-agent-2"
    assert solo is not None and solo.code == "W"
    assert draft is not None and draft.code == "W*"


def test_untracked_and_outside_paths_have_no_badge(tmp_path: Path) -> None:
    context = _context(tmp_path, FakeGitRunner(_responses()))
    asyncio.run(context.tracker.refresh())

    assert context.decorations.decoration_for("README.md") is None
    assert context.decorations.decoration_for("/elsewhere/shared.py") is None
    assert context.decorations.decoration_for(ROOT) is None


def test_local_edits_raise_conflict_badge(tmp_path: Path) -> None:
    context = _context(tmp_path, FakeGitRunner(_responses(local_edits="solo.py\n")))
    asyncio.run(context.tracker.refresh())

    badge = context.decorations.decoration_for("solo.py")

    assert badge is not None
    assert badge.code == "!W"
    assert badge.tooltip.startswith("[!local changes] ")
    assert context.decorations.user_modified == {"solo.py"}


def test_local_edit_warning_can_be_disabled(tmp_path: Path) -> None:
    context = _context(
        tmp_path,
        FakeGitRunner(_responses(local_edits="solo.py\n")),
        show_local_edit_warning=False,
    )
    asyncio.run(context.tracker.refresh())

    assert context.decorations.decoration_for("solo.py").code == "W"


def test_decorations_disabled_hide_badges(tmp_path: Path) -> None:
    context = _context(tmp_path, FakeGitRunner(_responses()))
    asyncio.run(context.tracker.refresh())

    context.decorations.settings = context.settings.model_copy(update={"enable_file_decorations": False})

    assert context.decorations.decoration_for("shared.py") is None


def test_tracker_changes_are_forwarded_with_local_flips(tmp_path: Path) -> None:
    runner = FakeGitRunner(_responses(local_edits="README.md\n"))
    context = _context(tmp_path, runner)
    fired: list[set[str] | None] = []
    context.decorations.subscribe(fired.append)

    asyncio.run(context.tracker.refresh())

    assert fired == [{"shared.py", "solo.py", "draft.md", "README.md"}]


def test_refresh_user_modified_fires_flipped_paths_only(tmp_path: Path) -> None:
    runner = FakeGitRunner(_responses(local_edits="solo.py\n"))
    context = _context(tmp_path, runner)
    asyncio.run(context.decorations.refresh_user_modified())
    fired: list[set[str] | None] = []
    context.decorations.subscribe(fired.append)

    runner.set_response((ROOT, "diff", "--name-only", "HEAD"), "shared.py\n")
    flipped = asyncio.run(context.decorations.refresh_user_modified())
    unchanged = asyncio.run(context.decorations.refresh_user_modified())

    assert flipped == {"solo.py", "shared.py"}
    assert unchanged is None
    assert fired == [{"solo.py", "shared.py"}, None]


def test_refresh_asks_for_full_repaint(tmp_path: Path) -> None:
    context = _context(tmp_path, FakeGitRunner(_responses()))
    fired: list[set[str] | None] = []
    context.decorations.subscribe(fired.append)

    asyncio.run(context.decorations.refresh())

    assert fired == [None]


def test_close_detaches_from_tracker(tmp_path: Path) -> None:
    context = _context(tmp_path, FakeGitRunner(_responses()))
    fired: list[set[str] | None] = []
    context.decorations.subscribe(fired.append)

    context.decorations.close()
    asyncio.run(context.tracker.refresh())

    assert fired == []
    assert context.decorations.user_modified == set()
