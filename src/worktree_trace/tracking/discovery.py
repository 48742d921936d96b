"""Worktree discovery."""

from __future__ import annotations

import logging
from pathlib import Path

from ..git import GitRunner, GitRunnerError
from .models import Worktree
from .parsing import filter_worktrees_by_pattern, parse_worktree_list

logger = logging.getLogger(__name__)


class WorktreeDiscovery:
    """Lists the repository's worktrees and keeps those matching a name pattern."""

    def __init__(self, runner: GitRunner, workspace_root: Path | str) -> None:
        self._runner = runner
        self._workspace_root = str(workspace_root)

    @property
    def workspace_root(self) -> str:
        return self._workspace_root

    async def list_worktrees(self) -> list[Worktree]:
        """Every worktree of the repository, main included."""

        output = await self._runner.check("worktree", "list", "--porcelain", cwd=self._workspace_root)
        return parse_worktree_list(output, self._workspace_root)

    async def discover(self, pattern: str) -> list[Worktree]:
        """Non-main worktrees whose directory name matches *pattern*; ``[]`` on failure."""

        try:
            worktrees = await self.list_worktrees()
        except GitRunnerError as exc:
            logger.error("Failed to discover worktrees: %s", exc)
            return []
        return filter_worktrees_by_pattern(worktrees, pattern)


__all__ = ["WorktreeDiscovery"]
