"""Tool registration for the Worktree Trace MCP server."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Literal

from fastmcp import FastMCP

from ..context import TraceContext
from ..tracking.report import format_touched_files, status_bar_label, status_message, touched_files_by_worktree

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ToolHandles:
    refresh_tracking: Any
    file_badge: Any
    list_touched_files: Any
    tracking_status: Any
    clear_tracking: Any
    clear_worktree_tracking: Any
    set_comparison_branch: Any
    toggle_tracking: Any


def _sorted_paths(paths: set[str] | None) -> list[str] | None:
    return sorted(paths) if paths is not None else None


def tracking_summary(context: TraceContext) -> dict[str, Any]:
    """Snapshot of the engine state, shared by the status tool and resource."""

    tracker = context.tracker
    settings = context.settings
    file_count = tracker.tracked_file_count()
    worktree_count = tracker.active_worktree_count()
    return {
        "enabled": settings.enable_file_decorations,
        "message": status_message(file_count, worktree_count, settings),
        "status_bar": status_bar_label(settings),
        "tracked_files": file_count,
        "active_worktrees": worktree_count,
        "worktree_pattern": settings.worktree_pattern,
        "comparison_branch": {
            "configured": settings.comparison_branch,
            "resolved": context.resolver.branch,
            "state": context.resolver.state.value,
            "paused_on": context.resolver.paused_reason,
        },
        "scan_interval_seconds": settings.scan_interval_seconds,
        "scanning": tracker.is_scanning,
        "scheduler_running": context.scheduler.running,
        "state_file": str(context.store.path),
    }


def register_tools(server: FastMCP, *, context: TraceContext) -> ToolHandles:
    """Register Worktree Trace's MCP tools on the server."""

    async def _refresh_tracking(force: bool = False) -> dict[str, Any]:
        changed = await context.tracker.refresh(force=force)
        logger.info("Manual refresh", extra={"forced": force, "skipped": changed is None})
        return {
            "skipped": changed is None,
            "changed_paths": _sorted_paths(changed),
            "paused_on": context.resolver.paused_reason,
        }

    async def _file_badge(path: str) -> dict[str, Any]:
        decoration = context.decorations.decoration_for(path)
        if decoration is None:
            return {"path": path, "badge": None, "tooltip": None}
        return {"path": path, "badge": decoration.code, "tooltip": decoration.tooltip}

    async def _list_touched_files(
        output_format: Literal["json", "text"] = "json",
    ) -> dict[str, Any] | str:
        tracked = context.tracker.all_tracked()
        if output_format == "text":
            return format_touched_files(tracked)
        if output_format != "json":
            raise ValueError("output_format must be 'json' or 'text'")
        return {
            "files": {
                path: [record.model_dump(mode="json", by_alias=True, exclude_none=True) for record in records]
                for path, records in sorted(tracked.items())
            },
            "by_worktree": touched_files_by_worktree(tracked),
        }

    async def _tracking_status() -> dict[str, Any]:
        return tracking_summary(context)

    async def _clear_tracking() -> dict[str, Any]:
        cleared = await context.tracker.clear_all()
        logger.info("Cleared all tracked files", extra={"cleared": len(cleared)})
        return {"cleared_paths": sorted(cleared)}

    async def _clear_worktree_tracking(worktree_name: str) -> dict[str, Any]:
        name = worktree_name.strip()
        if not name:
            raise ValueError("worktree_name must not be empty")
        cleared = await context.tracker.clear_worktree(name)
        return {"worktree": name, "cleared_paths": sorted(cleared)}

    async def _set_comparison_branch(branch: str) -> dict[str, Any]:
        await context.apply_settings(context.settings.model_copy(update={"comparison_branch": branch.strip()}))
        return tracking_summary(context)["comparison_branch"]

    async def _toggle_tracking(enabled: bool | None = None) -> dict[str, Any]:
        target = not context.settings.enable_file_decorations if enabled is None else enabled
        await context.apply_settings(context.settings.model_copy(update={"enable_file_decorations": target}))
        logger.info("Tracking %s", "enabled" if target else "disabled")
        return tracking_summary(context)

    tool_refresh = server.tool(
        name="refresh_tracking",
        description=(
            "Scan agent worktrees now. Set force=true to re-check a comparison branch "
            "that previously paused scanning."
        ),
    )(_refresh_tracking)

    tool_badge = server.tool(
        name="file_badge",
        description="Return the worktree badge (W, W*, W3, !W) and tooltip for a workspace file.",
    )(_file_badge)

    tool_list = server.tool(
        name="list_touched_files",
        description="List files touched by agent worktrees, as JSON or a grouped text report.",
    )(_list_touched_files)

    tool_status = server.tool(
        name="tracking_status",
        description="Summarize tracking state: counts, pattern, comparison branch and scheduler.",
    )(_tracking_status)

    tool_clear = server.tool(
        name="clear_tracking",
        description="Remove all tracked file data.",
    )(_clear_tracking)

    tool_clear_worktree = server.tool(
        name="clear_worktree_tracking",
        description="Remove tracked file data for a single worktree directory name.",
    )(_clear_worktree_tracking)

    tool_branch = server.tool(
        name="set_comparison_branch",
        description="Change the comparison branch ('current', 'main', or a branch name) and rescan.",
    )(_set_comparison_branch)

    tool_toggle = server.tool(
        name="toggle_tracking",
        description=(
            "Enable or disable worktree tracking; omit enabled to flip the current state. "
            "Disabling stops periodic scans and hides badges."
        ),
    )(_toggle_tracking)

    return ToolHandles(
        refresh_tracking=tool_refresh,
        file_badge=tool_badge,
        list_touched_files=tool_list,
        tracking_status=tool_status,
        clear_tracking=tool_clear,
        clear_worktree_tracking=tool_clear_worktree,
        set_comparison_branch=tool_branch,
        toggle_tracking=tool_toggle,
    )


__all__ = ["ToolHandles", "register_tools", "tracking_summary"]
