"""Content snapshots taken before a file is overwritten.

Snapshots live under ``.kuse/backups/<conversation>/<ts>/<file_name>`` and
are never cleaned up, even after the undo record that points at them has
been consumed or evicted.
"""

from pathlib import Path
from typing import Any

import structlog

from kuse_undo.core.actions import ContentRestore
from kuse_undo.core.errors import IOFailure
from kuse_undo.core.settings import UndoSettings
from kuse_undo.fs.fs_ops import copy_bytes
from kuse_undo.fs.paths import (
    backup_slot,
    backups_root,
    file_name_of,
    get_file_stats,
    release_slot,
    unix_timestamp,
    validate_conversation_id,
)


class BackupStore:
    """Creates byte-for-byte copies of files about to be overwritten."""

    def __init__(self, settings: UndoSettings | None = None, logger: Any = None) -> None:
        """Initialize backup store.

        Args:
            settings: Size ceiling and base directory; defaults if omitted
            logger: Optional structlog logger instance
        """
        self.settings = settings or UndoSettings()
        self._logger = logger or structlog.get_logger()

    def create_backup(self, conversation_id: str, path: Path) -> ContentRestore | None:
        """Copy ``path`` into the backup area.

        Args:
            conversation_id: Conversation that owns the snapshot
            path: File about to be overwritten

        Returns:
            The ContentRestore record describing the snapshot, or None when
            the file does not exist or is at or above the size ceiling

        Raises:
            IOFailure: If stat, mkdir or copy fails
            InvalidInput: If the path has no usable file name or the
                conversation id would escape the backups root
        """
        path = Path(path)
        if not path.exists():
            return None

        try:
            size = path.stat().st_size
        except OSError as e:
            raise IOFailure("read metadata of", path, e) from e

        if size >= self.settings.max_backup_bytes:
            self._logger.warning(
                "undo.snapshot.skipped",
                conversation_id=conversation_id,
                path=str(path),
                size=size,
                limit=self.settings.max_backup_bytes,
            )
            return None

        file_name = file_name_of(path)
        timestamp = unix_timestamp()
        backup_path = backup_slot(
            self.settings.resolve_base_dir(), conversation_id, timestamp, file_name
        )
        try:
            copy_bytes(path, backup_path, operation="back up")
        except IOFailure:
            release_slot(backup_path)
            raise

        self._logger.info(
            "undo.snapshot",
            conversation_id=conversation_id,
            path=str(path),
            backup_path=str(backup_path),
            size=size,
        )
        return ContentRestore(
            target_path=str(path),
            backup_path=str(backup_path),
            timestamp=timestamp,
        )

    def list_snapshots(self, conversation_id: str | None = None) -> list[dict[str, Any]]:
        """List snapshot files on disk, oldest first.

        Args:
            conversation_id: Restrict to one conversation; all when None

        Returns:
            One dict per snapshot with conversation_id, slot, path, size, mtime

        Raises:
            InvalidInput: If ``conversation_id`` would escape the backups root
        """
        if conversation_id is not None:
            validate_conversation_id(conversation_id)
        root = backups_root(self.settings.resolve_base_dir())
        if not root.is_dir():
            return []

        if conversation_id is not None:
            conversation_dirs = [root / conversation_id]
        else:
            conversation_dirs = sorted(p for p in root.iterdir() if p.is_dir())

        snapshots: list[dict[str, Any]] = []
        for conversation_dir in conversation_dirs:
            if not conversation_dir.is_dir():
                continue
            for slot_dir in sorted(conversation_dir.iterdir(), key=_slot_sort_key):
                if not slot_dir.is_dir():
                    continue
                for file_path in sorted(slot_dir.iterdir()):
                    snapshots.append(
                        {
                            "conversation_id": conversation_dir.name,
                            "slot": slot_dir.name,
                            "path": str(file_path),
                            **get_file_stats(file_path),
                        }
                    )
        return snapshots


def _slot_sort_key(slot_dir: Path) -> tuple[int, int, str]:
    # "<ts>" or "<ts>-<n>"
    head, _, tail = slot_dir.name.partition("-")
    if head.isdigit() and (not tail or tail.isdigit()):
        return int(head), int(tail or 0), slot_dir.name
    return 0, 0, slot_dir.name
