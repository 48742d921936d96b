"""Configuration management for Worktree Trace."""

from __future__ import annotations

import hashlib
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

STATE_FILE_NAME = "changed-files.json"


class SettingsLoadError(RuntimeError):
    """Raised when a settings file cannot be parsed or validated."""


class TraceSettings(BaseSettings):
    """Runtime configuration sourced from environment variables and optional .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    repo_root: Path = Field(default=Path("."), validation_alias="WORKTREE_TRACE_REPO_ROOT")
    state_dir: Path = Field(
        default=Path("~/.local/state/worktree-trace"), validation_alias="WORKTREE_TRACE_STATE_DIR"
    )
    enable_file_decorations: bool = Field(
        default=True, validation_alias="WORKTREE_TRACE_ENABLE_DECORATIONS"
    )
    track_uncommitted_changes: bool = Field(
        default=True, validation_alias="WORKTREE_TRACE_TRACK_UNCOMMITTED"
    )
    show_local_edit_warning: bool = Field(
        default=True, validation_alias="WORKTREE_TRACE_SHOW_LOCAL_EDIT_WARNING"
    )
    scan_interval_seconds: int = Field(default=60, validation_alias="WORKTREE_TRACE_SCAN_INTERVAL")
    worktree_pattern: str = Field(default="worktree-agent-*", validation_alias="WORKTREE_TRACE_PATTERN")
    comparison_branch: str = Field(
        default="current", validation_alias="WORKTREE_TRACE_COMPARISON_BRANCH"
    )
    git_path: str | None = Field(default=None, validation_alias="WORKTREE_TRACE_GIT_PATH")
    log_level: str = Field(default="INFO", validation_alias="WORKTREE_TRACE_LOG_LEVEL")

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        normalized = value.strip().upper()
        if normalized not in {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}:
            raise ValueError(
                "WORKTREE_TRACE_LOG_LEVEL must be one of CRITICAL, ERROR, WARNING, INFO, DEBUG"
            )
        return normalized

    @field_validator("scan_interval_seconds")
    @classmethod
    def _validate_scan_interval(cls, value: int) -> int:
        if value < 1:
            raise ValueError("WORKTREE_TRACE_SCAN_INTERVAL must be >= 1")
        return value

    @field_validator("comparison_branch", "worktree_pattern", mode="before")
    @classmethod
    def _strip(cls, value: Any):
        if value is None:
            return ""
        return str(value).strip()

    @property
    def state_file(self) -> Path:
        """Snapshot location for this repository, unique per workspace root."""

        digest = hashlib.sha1(str(self.repo_root).encode("utf-8")).hexdigest()[:12]
        return self.state_dir / digest / STATE_FILE_NAME


def load_settings(config_file: Path | None = None, **overrides: Any) -> TraceSettings:
    """Build settings from the environment, a YAML file, and explicit overrides.

    Values from *config_file* take precedence over the environment; keyword
    overrides take precedence over both.
    """

    values: dict[str, Any] = {}
    if config_file is not None:
        path = Path(config_file)
        try:
            document = yaml.safe_load(path.read_text(encoding="utf-8"))
        except OSError as exc:
            raise SettingsLoadError(f"Failed to read settings file {path}: {exc}") from exc
        except yaml.YAMLError as exc:
            raise SettingsLoadError(f"Failed to parse YAML in {path}: {exc}") from exc
        if document is not None:
            if not isinstance(document, dict):
                raise SettingsLoadError(f"Settings file {path} must contain a mapping")
            values.update(document)
    values.update(overrides)

    try:
        settings = TraceSettings(**values)
    except ValidationError as exc:
        raise SettingsLoadError(f"Settings validation error: {exc}") from exc

    settings.repo_root = settings.repo_root.expanduser().resolve()
    settings.state_dir = settings.state_dir.expanduser().resolve()
    return settings


__all__ = ["STATE_FILE_NAME", "SettingsLoadError", "TraceSettings", "load_settings"]
