"""Resolution of the branch that worktree changes are compared against."""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import Callable

from ..git import GitRunner

logger = logging.getLogger(__name__)

CURRENT_BRANCH = "current"
MAIN_BRANCH = "main"


class ResolutionState(str, Enum):
    RESOLVING = "resolving"
    VALID = "valid"
    PAUSED = "paused"


class ComparisonBranchResolver:
    """Turns the configured comparison target into an existing branch name.

    ``"current"`` (or empty) means the branch checked out in the primary
    worktree, ``"main"`` means the repository's default branch, and anything
    else is taken literally. A name that does not exist pauses scanning until
    :meth:`reset` is called; the warning callback fires once per distinct
    invalid name.
    """

    def __init__(
        self,
        runner: GitRunner,
        workspace_root: Path | str,
        *,
        on_invalid_branch: Callable[[str], None] | None = None,
    ) -> None:
        self._runner = runner
        self._workspace_root = str(workspace_root)
        self._on_invalid_branch = on_invalid_branch
        self._state = ResolutionState.RESOLVING
        self._branch: str | None = None
        self._invalid_branch_warned: str | None = None

    @property
    def state(self) -> ResolutionState:
        return self._state

    @property
    def is_paused(self) -> bool:
        return self._state is ResolutionState.PAUSED

    @property
    def branch(self) -> str | None:
        """The last successfully validated branch, if the resolver is valid."""

        return self._branch if self._state is ResolutionState.VALID else None

    @property
    def paused_reason(self) -> str | None:
        return self._invalid_branch_warned if self.is_paused else None

    def reset(self) -> None:
        """Forget any paused state; the next resolution starts fresh."""

        self._state = ResolutionState.RESOLVING
        self._branch = None
        self._invalid_branch_warned = None

    async def resolve(self, target: str) -> str | None:
        """Resolve *target* to a branch name, or ``None`` if it does not exist."""

        target = (target or "").strip()
        if target in {CURRENT_BRANCH, ""}:
            resolved = await self._current_branch()
        elif target == MAIN_BRANCH:
            resolved = await self._main_branch()
        else:
            resolved = target

        if not await self._branch_exists(resolved):
            self._state = ResolutionState.PAUSED
            self._branch = None
            if self._invalid_branch_warned != resolved:
                self._invalid_branch_warned = resolved
                logger.warning(
                    'Comparison branch "%s" not found; scanning paused until the setting changes',
                    resolved,
                )
                if self._on_invalid_branch is not None:
                    self._on_invalid_branch(resolved)
            return None

        self._state = ResolutionState.VALID
        self._branch = resolved
        self._invalid_branch_warned = None
        return resolved

    async def _main_branch(self) -> str:
        result = await self._runner.run("symbolic-ref", "refs/remotes/origin/HEAD", cwd=self._workspace_root)
        if result.ok:
            branch = result.stdout.strip().removeprefix("refs/remotes/origin/")
            if branch:
                return branch

        result = await self._runner.run("rev-parse", "--verify", "main", cwd=self._workspace_root)
        return "main" if result.ok else "master"

    async def _current_branch(self) -> str:
        result = await self._runner.run("rev-parse", "--abbrev-ref", "HEAD", cwd=self._workspace_root)
        branch = result.stdout.strip()
        if result.ok and branch:
            return branch
        return await self._main_branch()

    async def _branch_exists(self, branch: str) -> bool:
        result = await self._runner.run("rev-parse", "--verify", branch, cwd=self._workspace_root)
        return result.ok


__all__ = ["CURRENT_BRANCH", "MAIN_BRANCH", "ComparisonBranchResolver", "ResolutionState"]
