"""Track which files agents have touched across the git worktrees of a repository."""

__version__ = "0.1.0"

__all__ = ["__version__"]
