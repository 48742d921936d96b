"""Worktree Trace diagnostics CLI."""

from __future__ import annotations

import argparse
import asyncio
import json
from pathlib import Path

from worktree_trace.config import SettingsLoadError, TraceSettings, load_settings
from worktree_trace.git import GitNotFoundError, GitRunner
from worktree_trace.storage import StateStore
from worktree_trace.tracking import WorktreeDiscovery
from worktree_trace.tracking.report import format_touched_files, touched_files_by_worktree


def load_config(args: argparse.Namespace) -> TraceSettings:
    config_file = getattr(args, "config", None)
    try:
        return load_settings(Path(config_file) if config_file else None)
    except SettingsLoadError as exc:
        print(f"Invalid settings: {exc}")
        raise SystemExit(1)


def load_store(settings: TraceSettings) -> StateStore:
    return StateStore(settings.state_file)


def cmd_files(args: argparse.Namespace) -> None:
    settings = load_config(args)
    tracked = load_store(settings).load()
    if args.json:
        payload = {
            path: [record.model_dump(mode="json", by_alias=True, exclude_none=True) for record in records]
            for path, records in sorted(tracked.items())
        }
        print(json.dumps(payload, indent=2))
    else:
        print(format_touched_files(tracked))


def cmd_status(args: argparse.Namespace) -> None:
    settings = load_config(args)
    store = load_store(settings)
    tracked = store.load()
    grouped = touched_files_by_worktree(tracked)
    payload = {
        "repo_root": str(settings.repo_root),
        "state_file": str(store.path),
        "state_file_exists": store.path.exists(),
        "tracked_files": len(tracked),
        "active_worktrees": len(grouped),
        "files_per_worktree": {name: len(paths) for name, paths in sorted(grouped.items())},
        "worktree_pattern": settings.worktree_pattern,
        "comparison_branch": settings.comparison_branch,
        "decorations_enabled": settings.enable_file_decorations,
    }
    print(json.dumps(payload, indent=2))


def cmd_worktrees(args: argparse.Namespace) -> None:
    settings = load_config(args)
    try:
        runner = GitRunner(Path(settings.git_path) if settings.git_path else None)
    except GitNotFoundError as exc:
        print(f"git unavailable: {exc}")
        raise SystemExit(1)
    discovery = WorktreeDiscovery(runner, settings.repo_root)
    worktrees = asyncio.run(discovery.discover(settings.worktree_pattern))
    print(
        json.dumps(
            [{"name": wt.name, "path": wt.path, "branch": wt.branch} for wt in worktrees],
            indent=2,
        )
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Worktree Trace diagnostics")
    parser.add_argument("--config", help="YAML settings file")
    sub = parser.add_subparsers(dest="command", required=True)

    files = sub.add_parser("files", help="List touched files from the persisted snapshot")
    files.add_argument("--json", action="store_true", help="Emit the raw tracked-files map")
    files.set_defaults(func=cmd_files)

    status = sub.add_parser("status", help="Summarize the persisted snapshot")
    status.set_defaults(func=cmd_status)

    worktrees = sub.add_parser("worktrees", help="List worktrees matching the configured pattern")
    worktrees.set_defaults(func=cmd_worktrees)

    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    args.func(args)


if __name__ == "__main__":
    main()
