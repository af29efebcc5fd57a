"""
Level state store -- persists the project's current level.

One JSON record per project: {"currentLevel": int, "updatedAt": iso8601}.
A missing file means level 0. Writes replace the whole record through a
temp file and an atomic rename, so readers never see a partial write.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable, Optional

from pydantic import ValidationError

from evolution_framework.config import STATE_FILENAME
from evolution_framework.engine.levels import validate_level
from evolution_framework.errors import StorageError
from evolution_framework.schemas import ProjectState

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class LevelStateStore:
    """
    Reads and writes the single ProjectState of one project.

    Timestamps handed out by write() strictly increase within a store,
    even when the clock has not advanced.
    """

    def __init__(
        self,
        state_path: Path | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._path = Path(state_path) if state_path is not None else Path.cwd() / STATE_FILENAME
        self._clock = clock or _utc_now
        self._last_seen: Optional[datetime] = None

    @classmethod
    def for_project(cls, root: Path, **kwargs) -> "LevelStateStore":
        return cls(state_path=Path(root) / STATE_FILENAME, **kwargs)

    @property
    def path(self) -> Path:
        return self._path

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def read(self) -> ProjectState:
        """
        Load the persisted state.

        Returns:
            The stored ProjectState, or level 0 with no timestamp if no
            state has been written yet.

        Raises:
            StorageError: The file exists but cannot be read or decoded.
        """
        if not self._path.exists():
            logger.debug("No level state at %s; defaulting to level 0.", self._path)
            return ProjectState()

        try:
            raw = self._path.read_bytes()
        except OSError as exc:
            raise StorageError(f"Cannot read level state {self._path}: {exc}") from exc

        try:
            state = ProjectState.model_validate(json.loads(raw.decode("utf-8")))
        except (UnicodeDecodeError, json.JSONDecodeError, ValidationError) as exc:
            raise StorageError(f"Corrupt level state {self._path}: {exc}") from exc

        self._remember(state.updated_at)
        return state

    def write(self, level: int) -> ProjectState:
        """
        Replace the persisted state with `level`, stamped now.

        Raises:
            InvalidLevelError: `level` is outside the defined range.
            StorageError: The state file could not be written.
        """
        state = ProjectState(current_level=validate_level(level), updated_at=self._next_timestamp())
        payload = json.dumps(state.model_dump(mode="json", by_alias=True), indent=2) + "\n"

        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f"{self._path.name}.",
                suffix=".tmp",
                dir=self._path.parent,
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(payload)
                    f.flush()
                    os.fsync(f.fileno())
                os.replace(tmp_name, self._path)
            except OSError:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise StorageError(f"Cannot write level state {self._path}: {exc}") from exc

        self._remember(state.updated_at)
        logger.info("Level state written: level=%d path=%s", state.current_level, self._path)
        return state

    # ------------------------------------------------------------------
    # Timestamps
    # ------------------------------------------------------------------

    def _next_timestamp(self) -> datetime:
        now = self._clock()
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        if self._last_seen is not None and now <= self._last_seen:
            now = self._last_seen + timedelta(microseconds=1)
        return now

    def _remember(self, timestamp: Optional[datetime]) -> None:
        if timestamp is not None and (self._last_seen is None or timestamp > self._last_seen):
            self._last_seen = timestamp
