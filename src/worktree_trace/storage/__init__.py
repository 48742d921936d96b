"""Storage abstractions for Worktree Trace."""

from .models import STATE_VERSION, TrackedFilesSnapshot
from .snapshot import StateStore

__all__ = [
    "STATE_VERSION",
    "StateStore",
    "TrackedFilesSnapshot",
]
