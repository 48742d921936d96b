"""Parsers for git's worktree, diff and untracked-file listings."""

from __future__ import annotations

import os
import re

from .models import ChangeRecord, ChangeType, Worktree

_BLOCK_SEPARATOR = re.compile(r"\r?\n\r?\n")
# Status letter, optional rename/copy similarity score, tab, path.
_DIFF_LINE = re.compile(r"^([A-Z])(\d*)\t(.+)$")
_CHANGE_TYPES: dict[str, ChangeType] = {"A": "added", "D": "deleted"}
_OCTAL_ESCAPE = re.compile(r"[0-7]{3}")
_C_ESCAPES = {"a": 7, "b": 8, "t": 9, "n": 10, "v": 11, "f": 12, "r": 13, '"': 34, "\\": 92}


def _normalize(path: str) -> str:
    return os.path.normcase(os.path.abspath(path))


def unquote_path(path: str) -> str:
    """Undo git's C-style path quoting.

    git wraps paths containing control characters, quotes, backslashes or
    (unless ``core.quotePath`` is off) non-ASCII bytes in double quotes, with
    backslash escapes and octal UTF-8 bytes: ``"caf\\303\\251.txt"`` is
    ``café.txt``. Unquoted paths are returned unchanged.
    """

    if len(path) < 2 or not (path.startswith('"') and path.endswith('"')):
        return path

    body = path[1:-1]
    decoded = bytearray()
    index = 0
    while index < len(body):
        char = body[index]
        if char == "\\" and index + 1 < len(body):
            escape = body[index + 1]
            if escape in _C_ESCAPES:
                decoded.append(_C_ESCAPES[escape])
                index += 2
                continue
            octal = body[index + 1:index + 4]
            if _OCTAL_ESCAPE.fullmatch(octal):
                decoded.append(int(octal, 8))
                index += 4
                continue
        decoded.extend(char.encode("utf-8"))
        index += 1
    return decoded.decode("utf-8", errors="replace")


def parse_worktree_list(output: str, workspace_root: str) -> list[Worktree]:
    """Parse ``git worktree list --porcelain`` output.

    Blocks without a ``worktree`` line are skipped. A block with no branch
    (detached HEAD) gets the branch name ``"HEAD"``. The block whose path is
    the workspace root, or a ``bare`` block, is the main worktree.
    """

    worktrees: list[Worktree] = []
    root = _normalize(workspace_root)

    for block in _BLOCK_SEPARATOR.split(output.strip()):
        if not block.strip():
            continue

        path = ""
        branch = ""
        is_main = False
        for line in block.splitlines():
            if line.startswith("worktree "):
                path = line[len("worktree "):]
            elif line.startswith("branch "):
                branch = line[len("branch "):].removeprefix("refs/heads/")
            elif line == "bare":
                is_main = True

        if not path:
            continue
        if _normalize(path) == root:
            is_main = True

        worktrees.append(Worktree(path=path, branch=branch or "HEAD", is_main_worktree=is_main))

    return worktrees


def glob_to_regex(pattern: str) -> re.Pattern[str]:
    """Compile a shell-style pattern where ``*`` is any run and ``?`` one character.

    Other characters are passed through unescaped.
    """

    return re.compile("^" + pattern.replace("*", ".*").replace("?", ".") + "$")


def filter_worktrees_by_pattern(worktrees: list[Worktree], pattern: str) -> list[Worktree]:
    """Keep non-main worktrees whose directory name matches *pattern*."""

    regex = glob_to_regex(pattern)
    return [wt for wt in worktrees if not wt.is_main_worktree and regex.match(wt.name)]


def parse_diff_output(
    output: str,
    worktree_name: str,
    branch: str,
    uncommitted: bool = False,
) -> list[ChangeRecord]:
    """Convert ``git diff --name-status`` lines into change records."""

    records: list[ChangeRecord] = []
    for line in output.splitlines():
        if not line:
            continue
        match = _DIFF_LINE.match(line)
        if match is None:
            continue
        status, _score, path = match.groups()
        if status in {"R", "C"} and "\t" in path:
            # "R100\told\tnew": the change lands on the destination path.
            path = path.rsplit("\t", 1)[1]
        records.append(
            ChangeRecord(
                relative_path=unquote_path(path),
                worktree_name=worktree_name,
                branch=branch,
                change_type=_CHANGE_TYPES.get(status, "modified"),
                uncommitted=True if uncommitted else None,
            )
        )
    return records


def parse_untracked_output(output: str, worktree_name: str, branch: str) -> list[ChangeRecord]:
    """Convert ``git ls-files --others`` output into uncommitted ``added`` records."""

    return [
        ChangeRecord(
            relative_path=unquote_path(path),
            worktree_name=worktree_name,
            branch=branch,
            change_type="added",
            uncommitted=True,
        )
        for path in output.splitlines()
        if path.strip()
    ]


__all__ = [
    "filter_worktrees_by_pattern",
    "glob_to_regex",
    "parse_diff_output",
    "parse_untracked_output",
    "parse_worktree_list",
    "unquote_path",
]
