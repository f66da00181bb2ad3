"""Runtime settings for the undo subsystem."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from kuse_undo.core.constants import (
    ENV_BASE_DIR,
    ENV_HISTORY_LIMIT,
    ENV_MAX_BACKUP_BYTES,
    MAX_BACKUP_BYTES,
    MAX_HISTORY_PER_CONVERSATION,
)
from kuse_undo.core.errors import IOFailure

__all__ = ["UndoSettings", "current_dir"]


def current_dir() -> Path:
    """Return the live working directory.

    Raises:
        IOFailure: If the working directory no longer exists
    """
    try:
        return Path.cwd()
    except OSError as e:
        raise IOFailure("resolve working directory", ".", e) from e


@dataclass(frozen=True)
class UndoSettings:
    """Settings shared by the action log, backup store and trash store.

    Attributes:
        max_backup_bytes: Files at or above this size are not snapshotted
        history_limit: Records retained per conversation
        base_dir: Directory holding ``.kuse``; None means the working
            directory at the moment of each call
    """

    max_backup_bytes: int = MAX_BACKUP_BYTES
    history_limit: int = MAX_HISTORY_PER_CONVERSATION
    base_dir: Path | None = None

    def __post_init__(self) -> None:
        if self.max_backup_bytes <= 0:
            raise ValueError("max_backup_bytes must be positive")
        if self.history_limit <= 0:
            raise ValueError("history_limit must be positive")

    def resolve_base_dir(self) -> Path:
        """Return the directory that holds ``.kuse`` for this call.

        Returns:
            ``base_dir`` when pinned, else the live working directory

        Raises:
            IOFailure: If the working directory no longer exists
        """
        if self.base_dir is not None:
            return Path(self.base_dir).expanduser()
        return current_dir()

    @classmethod
    def from_env(cls) -> UndoSettings:
        """Create settings from environment variables, falling back to defaults."""
        max_bytes = _int_from_env(ENV_MAX_BACKUP_BYTES, MAX_BACKUP_BYTES)
        limit = _int_from_env(ENV_HISTORY_LIMIT, MAX_HISTORY_PER_CONVERSATION)
        base_dir_raw = os.getenv(ENV_BASE_DIR)
        base_dir = Path(base_dir_raw) if base_dir_raw else None
        return cls(max_backup_bytes=max_bytes, history_limit=limit, base_dir=base_dir)


def _int_from_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc
