"""FastMCP server bootstrap for Worktree Trace."""

import json
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from fastmcp import FastMCP

from . import __version__
from .config import SettingsLoadError, TraceSettings, load_settings
from .context import TraceContext, build_context
from .git import GitNotFoundError
from .tools import register_tools, tracking_summary


def configure_logging(level: str) -> None:
    """Configure root logging for the Worktree Trace server."""

    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="[%(asctime)s] [%(levelname)s] %(name)s: %(message)s",
    )


def create_server(
    settings: Optional[TraceSettings] = None,
    context: TraceContext | None = None,
) -> FastMCP:
    """Instantiate the FastMCP server around a tracking context."""

    if context is None:
        context = build_context(settings or load_settings())

    @asynccontextmanager
    async def lifespan(_server: FastMCP):
        await context.startup()
        try:
            yield {"context": context}
        finally:
            await context.shutdown()

    server = FastMCP(
        name="Worktree Trace",
        instructions=(
            "Worktree Trace reports which workspace files are being changed by agents "
            "working in sibling git worktrees. Query file_badge before editing a file "
            "to see whether another worktree has touched it."
        ),
        lifespan=lifespan,
    )

    handles = register_tools(server, context=context)

    @server.resource(
        "resource://worktree-trace/status",
        name="worktree_trace_status",
        description="Current tracking state for the Worktree Trace server.",
        mime_type="application/json",
        tags={"status", "health"},
    )
    def status_resource() -> str:
        """Return a JSON string summarizing tracking state."""

        payload = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "server_version": __version__,
            "log_level": context.settings.log_level,
            "repo_root": str(context.settings.repo_root),
            "tracking": tracking_summary(context),
        }
        return json.dumps(payload)

    setattr(server, "trace_context", context)
    setattr(server, "tool_handles", handles)
    return server


def main() -> None:
    """Entry point for running the Worktree Trace MCP server via CLI."""

    config_file = Path(".worktree-trace.yaml")
    try:
        settings = load_settings(config_file if config_file.exists() else None)
    except SettingsLoadError as exc:
        print(f"Invalid settings: {exc}")
        raise SystemExit(1)
    configure_logging(settings.log_level)

    try:
        server = create_server(settings)
    except GitNotFoundError as exc:
        print(f"git unavailable: {exc}")
        raise SystemExit(1)
    logging.getLogger(__name__).info(
        "Launching Worktree Trace MCP server",
        extra={
            "version": __version__,
            "log_level": settings.log_level,
            "repo_root": str(settings.repo_root),
            "comparison_branch": settings.comparison_branch,
        },
    )
    server.run()


if __name__ == "__main__":
    main()
