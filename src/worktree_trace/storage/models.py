"""Data models for persistent tracking."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..tracking.models import ChangeRecord

STATE_VERSION = "1.0"


class TrackedFilesSnapshot(BaseModel):
    """On-disk form of the aggregated map, stamped with a schema version."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    version: str
    last_updated: datetime
    files: dict[str, list[ChangeRecord]] = Field(...)


__all__ = ["STATE_VERSION", "TrackedFilesSnapshot"]
