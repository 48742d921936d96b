"""Worktree change tracking engine."""

from .models import ChangeRecord, ChangeType, TrackedFiles, Worktree
from .aggregation import aggregate_records, changed_paths, clear_worktree, copy_tracked, records_equal
from .badges import Badge, derive_badge, generate_badge, generate_tooltip, should_decorate
from .branch import ComparisonBranchResolver, ResolutionState
from .parsing import (
    filter_worktrees_by_pattern,
    glob_to_regex,
    parse_diff_output,
    parse_untracked_output,
    parse_worktree_list,
    unquote_path,
)
from .discovery import WorktreeDiscovery
from .scanner import WorktreeScanner, merge_uncommitted
from .tracker import WorktreeFileTracker
from .decorations import DecorationProvider
from .scheduler import PeriodicScanner

__all__ = [
    "Badge",
    "ChangeRecord",
    "ChangeType",
    "ComparisonBranchResolver",
    "DecorationProvider",
    "PeriodicScanner",
    "ResolutionState",
    "TrackedFiles",
    "Worktree",
    "WorktreeDiscovery",
    "WorktreeFileTracker",
    "WorktreeScanner",
    "aggregate_records",
    "changed_paths",
    "clear_worktree",
    "copy_tracked",
    "derive_badge",
    "filter_worktrees_by_pattern",
    "generate_badge",
    "generate_tooltip",
    "glob_to_regex",
    "merge_uncommitted",
    "parse_diff_output",
    "parse_untracked_output",
    "parse_worktree_list",
    "records_equal",
    "should_decorate",
    "unquote_path",
]
