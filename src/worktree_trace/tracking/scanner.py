"""Per-worktree change scanning."""

from __future__ import annotations

import logging
from typing import Iterable

from ..config import TraceSettings
from ..git import GitRunner, GitRunnerError
from .branch import ComparisonBranchResolver
from .models import ChangeRecord, Worktree
from .parsing import parse_diff_output, parse_untracked_output

logger = logging.getLogger(__name__)


def merge_uncommitted(
    committed: list[ChangeRecord],
    *sources: Iterable[ChangeRecord],
) -> list[ChangeRecord]:
    """Layer uncommitted records over committed ones.

    Sources are consumed in priority order and only the first occurrence of a
    path counts. A path that already has a committed record is flagged with
    ``has_uncommitted_on_top`` instead of gaining a second record.
    """

    merged = list(committed)
    committed_index = {record.relative_path: index for index, record in enumerate(merged)}
    seen: set[str] = set()

    for source in sources:
        for record in source:
            if record.relative_path in seen:
                continue
            seen.add(record.relative_path)

            index = committed_index.get(record.relative_path)
            if index is None:
                merged.append(record)
            else:
                merged[index] = merged[index].model_copy(update={"has_uncommitted_on_top": True})

    return merged


class WorktreeScanner:
    """Collects the change records of one worktree against the comparison branch."""

    def __init__(
        self,
        runner: GitRunner,
        resolver: ComparisonBranchResolver,
        settings: TraceSettings,
    ) -> None:
        self._runner = runner
        self._resolver = resolver
        self.settings = settings

    async def scan_worktree(
        self,
        worktree: Worktree,
        comparison_branch: str | None = None,
    ) -> list[ChangeRecord]:
        """Return the de-duplicated change records for *worktree*.

        When *comparison_branch* is omitted it is resolved from settings; an
        unresolvable branch yields no records. A failing git command ends the
        scan early and whatever was assembled so far is returned.
        """

        if comparison_branch is None:
            comparison_branch = await self._resolver.resolve(self.settings.comparison_branch)
            if comparison_branch is None:
                return []

        name = worktree.name
        records: list[ChangeRecord] = []
        try:
            committed_output = await self._runner.check(
                "diff", "--name-status", f"{comparison_branch}...HEAD", cwd=worktree.path
            )
            records = parse_diff_output(committed_output, name, worktree.branch, uncommitted=False)

            if self.settings.track_uncommitted_changes:
                unstaged_output = await self._runner.check(
                    "diff", "--name-status", "HEAD", cwd=worktree.path
                )
                staged_output = await self._runner.check(
                    "diff", "--name-status", "--cached", cwd=worktree.path
                )
                untracked_output = await self._runner.check(
                    "ls-files", "--others", "--exclude-standard", cwd=worktree.path
                )
                records = merge_uncommitted(
                    records,
                    parse_diff_output(unstaged_output, name, worktree.branch, uncommitted=True),
                    parse_diff_output(staged_output, name, worktree.branch, uncommitted=True),
                    parse_untracked_output(untracked_output, name, worktree.branch),
                )
        except GitRunnerError as exc:
            logger.warning("Failed to scan worktree %s: %s", name, exc, extra={"worktree": worktree.path})

        return records


__all__ = ["WorktreeScanner", "merge_uncommitted"]
