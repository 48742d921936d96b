"""JSON snapshot persistence for the aggregated tracked-files map."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable

from pydantic import ValidationError

from ..tracking.models import TrackedFiles
from .models import STATE_VERSION, TrackedFilesSnapshot

logger = logging.getLogger(__name__)


class StateStore:
    """Loads and saves versioned snapshots of the tracked-files map.

    Neither direction raises: unreadable or foreign-version snapshots load as
    an empty map, and failed writes are logged while the caller's in-memory
    map stays authoritative.
    """

    def __init__(
        self,
        path: Path,
        *,
        version: str = STATE_VERSION,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._path = Path(path)
        self._version = version
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> TrackedFiles:
        try:
            payload = json.loads(self._path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as exc:
            logger.warning("Failed to load state from %s: %s", self._path, exc)
            return {}

        if not isinstance(payload, dict) or payload.get("version") != self._version or "files" not in payload:
            logger.info(
                "Discarding state snapshot with unsupported version",
                extra={"path": str(self._path), "expected_version": self._version},
            )
            return {}

        try:
            snapshot = TrackedFilesSnapshot.model_validate(payload)
        except ValidationError as exc:
            logger.warning("Failed to load state from %s: %s", self._path, exc)
            return {}

        logger.info("Loaded %d tracked file entries from state", len(snapshot.files))
        return snapshot.files

    def save(self, files: TrackedFiles) -> bool:
        """Overwrite the snapshot with *files*; returns ``False`` if the write failed."""

        snapshot = TrackedFilesSnapshot(version=self._version, last_updated=self._clock(), files=files)
        document = snapshot.model_dump(mode="json", by_alias=True, exclude_none=True)
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(json.dumps(document, indent=2) + "\n", encoding="utf-8")
        except OSError as exc:
            logger.error("Failed to save state to %s: %s", self._path, exc)
            return False
        return True


__all__ = ["StateStore"]
