"""Async runner for the git CLI."""

from __future__ import annotations

import asyncio
import logging
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from .utils import sanitize_environment

logger = logging.getLogger(__name__)


class GitRunnerError(RuntimeError):
    """Base class for git runner errors."""


class GitNotFoundError(GitRunnerError):
    """Raised when the git executable cannot be located."""


class GitCommandError(GitRunnerError):
    """Raised when a git command exits with a non-zero status."""

    def __init__(self, result: GitExecutionResult) -> None:
        detail = result.stderr.strip() or f"exit code {result.returncode}"
        super().__init__(f"git {' '.join(result.args[1:])} failed in {result.cwd}: {detail}")
        self.result = result


@dataclass(slots=True)
class GitExecutionResult:
    """Holds the outcome of a git invocation."""

    args: tuple[str, ...]
    cwd: str
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class GitRunner:
    """Execute git commands asynchronously in a given working directory."""

    def __init__(self, executable: Path | None = None) -> None:
        self._executable_path = self._resolve_executable(executable)

    @staticmethod
    def _resolve_executable(explicit: Path | None) -> Path:
        if explicit is not None:
            candidate = Path(explicit)
            if candidate.exists() and candidate.is_file():
                return candidate
            raise GitNotFoundError(f"git executable not found at {candidate}")

        binary = shutil.which("git")
        if binary is None:
            raise GitNotFoundError("git executable not found on PATH")
        return Path(binary)

    @property
    def executable(self) -> Path:
        return self._executable_path

    async def run(self, *args: str, cwd: Path | str) -> GitExecutionResult:
        """Run ``git <args>`` in *cwd* and return the result regardless of exit status."""

        return await self._invoke(*args, cwd=str(cwd))

    async def check(self, *args: str, cwd: Path | str) -> str:
        """Run ``git <args>`` in *cwd* and return stdout, raising on failure."""

        result = await self._invoke(*args, cwd=str(cwd))
        if not result.ok:
            raise GitCommandError(result)
        return result.stdout

    async def _invoke(self, *args: str, cwd: str) -> GitExecutionResult:
        cmd = [str(self._executable_path), *args]
        logger.debug("Running git", extra={"git_args": args, "cwd": cwd})
        try:
            process = await asyncio.create_subprocess_exec(
                *cmd,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=cwd,
                env=sanitize_environment(),
            )
        except OSError as exc:
            # A worktree directory removed between discovery and scan lands here.
            return GitExecutionResult(args=tuple(cmd), cwd=cwd, returncode=-1, stdout="", stderr=str(exc))
        stdout_bytes, stderr_bytes = await process.communicate()
        stdout = stdout_bytes.decode("utf-8", errors="replace")
        stderr = stderr_bytes.decode("utf-8", errors="replace")
        return GitExecutionResult(
            args=tuple(cmd),
            cwd=cwd,
            returncode=process.returncode if process.returncode is not None else -1,
            stdout=stdout,
            stderr=stderr,
        )


class FakeGitRunner(GitRunner):
    """Test double that answers git invocations from a scripted table.

    Keys are argument tuples, optionally prefixed with the working directory
    (``("/repo/wt-1", "diff", "--cached")``); cwd-specific keys win. Values are
    either stdout strings or full :class:`GitExecutionResult` objects. Unknown
    invocations fail with exit code 128, like git does for a bad revision.
    """

    def __init__(
        self,
        responses: Mapping[tuple[str, ...], str | GitExecutionResult] | None = None,
    ) -> None:  # type: ignore[override]
        self._responses: dict[tuple[str, ...], str | GitExecutionResult] = dict(responses or {})
        self._invocations: list[tuple[str, tuple[str, ...]]] = []
        self._executable_path = Path("/usr/bin/git")

    def set_response(self, key: tuple[str, ...], response: str | GitExecutionResult) -> None:
        self._responses[key] = response

    def remove_response(self, key: tuple[str, ...]) -> None:
        self._responses.pop(key, None)

    async def _invoke(self, *args: str, cwd: str) -> GitExecutionResult:  # type: ignore[override]
        self._invocations.append((cwd, tuple(args)))
        response = self._responses.get((cwd, *args), self._responses.get(tuple(args)))
        if response is None:
            return GitExecutionResult(
                args=("git", *args),
                cwd=cwd,
                returncode=128,
                stdout="",
                stderr=f"fatal: no scripted response for {' '.join(args)}",
            )
        if isinstance(response, GitExecutionResult):
            return response
        return GitExecutionResult(args=("git", *args), cwd=cwd, returncode=0, stdout=response, stderr="")

    @property
    def invocations(self) -> list[tuple[str, tuple[str, ...]]]:
        return self._invocations


__all__ = [
    "FakeGitRunner",
    "GitCommandError",
    "GitExecutionResult",
    "GitNotFoundError",
    "GitRunner",
    "GitRunnerError",
]
