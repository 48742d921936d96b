"""Utility helpers for the git runner."""

from __future__ import annotations

import os
from typing import Mapping

# Repository-locating variables inherited from a parent git process (hooks,
# editors) would pin every invocation to one worktree regardless of cwd.
_SANITIZED_VARS = {
    "GIT_DIR",
    "GIT_WORK_TREE",
    "GIT_INDEX_FILE",
    "GIT_COMMON_DIR",
    "GIT_PREFIX",
    "GIT_OBJECT_DIRECTORY",
}

_FIXED_VARS = {
    # Read-only scans must not take the index lock while agents are committing.
    "GIT_OPTIONAL_LOCKS": "0",
    "GIT_TERMINAL_PROMPT": "0",
    "LC_ALL": "C",
}

# Non-ASCII paths come back as raw UTF-8 instead of octal escapes.
_QUOTE_PATH_OFF = "'core.quotepath=false'"


def sanitize_environment(additional: Mapping[str, str] | None = None) -> dict[str, str]:
    """Return an environment suitable for running git against arbitrary worktrees."""

    env = dict(os.environ)
    for key in _SANITIZED_VARS:
        env.pop(key, None)
    env.update(_FIXED_VARS)
    inherited = env.get("GIT_CONFIG_PARAMETERS", "").strip()
    env["GIT_CONFIG_PARAMETERS"] = f"{inherited} {_QUOTE_PATH_OFF}" if inherited else _QUOTE_PATH_OFF
    if additional:
        env.update(additional)
    return env
