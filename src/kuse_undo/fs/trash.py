"""Delete-as-relocate: deleted files are moved into ``.kuse/trash``.

The trash is flat and shared by all conversations. Entries are named
``<unix_ts>_<file_name>`` and are never purged. A slot is claimed on disk
before the rename, so concurrent deletes never share an entry.
"""

from pathlib import Path
from typing import Any

import structlog

from kuse_undo.core.errors import IOFailure, NotFound
from kuse_undo.core.settings import UndoSettings
from kuse_undo.fs.fs_ops import relocate
from kuse_undo.fs.paths import (
    file_name_of,
    get_file_stats,
    release_slot,
    trash_root,
    trash_slot,
    unix_timestamp,
)


class TrashStore:
    """Holding area for relocated deletions."""

    def __init__(self, settings: UndoSettings | None = None, logger: Any = None) -> None:
        self.settings = settings or UndoSettings()
        self._logger = logger or structlog.get_logger()

    @property
    def root(self) -> Path:
        return trash_root(self.settings.resolve_base_dir())

    def move_to_trash(self, path: Path) -> Path:
        """Relocate a file or directory into the trash.

        Args:
            path: Existing file or directory to delete

        Returns:
            Location of the entry inside the trash

        Raises:
            NotFound: If ``path`` does not exist
            InvalidInput: If ``path`` has no usable file name
            IOFailure: If the trash cannot be created or the move fails
        """
        path = Path(path)
        if not path.exists() and not path.is_symlink():
            raise NotFound(f"File not found: {path}")

        file_name = file_name_of(path)
        trash_path = trash_slot(
            self.settings.resolve_base_dir(),
            unix_timestamp(),
            file_name,
            is_dir=path.is_dir() and not path.is_symlink(),
        )
        try:
            relocate(path, trash_path, operation="move to trash")
        except IOFailure:
            release_slot(trash_path)
            raise

        self._logger.info("trash.moved", path=str(path), trash_path=str(trash_path))
        return trash_path

    def list_entries(self) -> list[dict[str, Any]]:
        """List trash entries on disk, oldest first.

        Returns:
            One dict per entry with name, path, deleted_at (unix seconds or
            None when the name carries no timestamp), size and mtime
        """
        root = self.root
        if not root.is_dir():
            return []

        entries: list[dict[str, Any]] = []
        for entry in root.iterdir():
            prefix, _, _ = entry.name.partition("_")
            entries.append(
                {
                    "name": entry.name,
                    "path": str(entry),
                    "deleted_at": int(prefix) if prefix.isdigit() else None,
                    "is_dir": entry.is_dir(),
                    **get_file_stats(entry),
                }
            )
        entries.sort(key=lambda item: (item["deleted_at"] or 0, item["name"]))
        return entries
