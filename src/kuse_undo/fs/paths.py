"""Path utilities for the ``.kuse`` staging area.

This module resolves tool paths and lays out the on-disk backup and trash
locations. Staging locations hang off the working directory at call time
(or a pinned base directory), independent of the project root the tools
operate on.
"""

import os
import time
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from kuse_undo.core.constants import BACKUPS_DIR_NAME, KUSE_DIR_NAME, TRASH_DIR_NAME
from kuse_undo.core.errors import InvalidInput, IOFailure
from kuse_undo.core.settings import current_dir
from kuse_undo.utils.debug import debug


def unix_timestamp() -> int:
    """Current time in whole unix seconds."""
    return int(time.time())


def resolve_tool_path(path_str: str, project_path: str | Path | None = None) -> Path:
    """Resolve a path supplied by a tool call.

    Absolute paths are returned unchanged. Relative paths are joined onto
    the project root when one is set, otherwise onto the working directory.
    Symlinks are not resolved so that moving a link moves the link itself.

    Args:
        path_str: Path as given by the agent
        project_path: Optional project root

    Returns:
        Absolute path
    """
    path = Path(path_str).expanduser()
    if path.is_absolute():
        return path
    if project_path is not None:
        return Path(project_path) / path
    return current_dir() / path


def file_name_of(path: Path) -> str:
    """Return the final path component.

    Raises:
        InvalidInput: If the path has no file name (e.g. ``/`` or ``..``)
    """
    name = path.name
    if not name or name in (".", ".."):
        raise InvalidInput("path", f"Invalid file name: {path}")
    return name


def kuse_root(base_dir: Path) -> Path:
    return base_dir / KUSE_DIR_NAME


def backups_root(base_dir: Path) -> Path:
    return kuse_root(base_dir) / BACKUPS_DIR_NAME


def trash_root(base_dir: Path) -> Path:
    return kuse_root(base_dir) / TRASH_DIR_NAME


def validate_conversation_id(conversation_id: str) -> str:
    """Return ``conversation_id`` if it names a single directory under the backups root.

    Raises:
        InvalidInput: If the id is empty, ``.``/``..`` or contains a separator
    """
    if (
        not conversation_id
        or conversation_id in (".", "..")
        or "/" in conversation_id
        or (os.altsep is not None and os.altsep in conversation_id)
    ):
        raise InvalidInput("conversation_id", f"Invalid conversation id: {conversation_id!r}")
    return conversation_id


def _claim_file(path: Path) -> None:
    os.close(os.open(path, os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o600))


def backup_slot(base_dir: Path, conversation_id: str, timestamp: int, file_name: str) -> Path:
    """Reserve a backup location for a snapshot.

    The canonical slot is ``backups/<conversation>/<ts>/<file_name>``.
    When that file is already taken the timestamp directory is suffixed
    (``<ts>-1``, ``<ts>-2``...). The returned file is created empty with
    ``O_EXCL`` so concurrent snapshots can never be handed the same path;
    the caller copies the pristine bytes over it.

    Args:
        base_dir: Directory holding ``.kuse``
        conversation_id: Conversation that owns the snapshot
        timestamp: Unix seconds
        file_name: Name of the file being snapshotted

    Returns:
        Path of a freshly created, empty backup file

    Raises:
        InvalidInput: If the conversation id would escape the backups root
        IOFailure: If a slot directory or file cannot be created
    """
    conversation_dir = backups_root(base_dir) / validate_conversation_id(conversation_id)
    slot_name = str(timestamp)
    counter = 1
    while True:
        slot_dir = conversation_dir / slot_name
        try:
            slot_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise IOFailure("create directory", slot_dir, e) from e
        candidate = slot_dir / file_name
        try:
            _claim_file(candidate)
            return candidate
        except FileExistsError:
            slot_name = f"{timestamp}-{counter}"
            counter += 1
        except OSError as e:
            raise IOFailure("back up", candidate, e) from e


def trash_slot(base_dir: Path, timestamp: int, file_name: str, *, is_dir: bool = False) -> Path:
    """Reserve a trash location: ``trash/<ts>_<file_name>``.

    Same-second collisions become ``<ts>_<n>_<file_name>`` so an existing
    trash entry is never overwritten. The slot is claimed atomically with a
    placeholder of the same kind as the entry (an empty file, or an empty
    directory when ``is_dir``) that the subsequent rename replaces.

    Raises:
        IOFailure: If the trash directory or the placeholder cannot be created
    """
    root = trash_root(base_dir)
    candidate = root / f"{timestamp}_{file_name}"
    ensure_parent_dir(candidate)
    counter = 1
    while True:
        try:
            if is_dir:
                candidate.mkdir()
            else:
                _claim_file(candidate)
            return candidate
        except FileExistsError:
            candidate = root / f"{timestamp}_{counter}_{file_name}"
            counter += 1
        except OSError as e:
            raise IOFailure("move to trash", candidate, e) from e


def release_slot(path: Path) -> None:
    """Remove an unused placeholder left by ``backup_slot`` or ``trash_slot``."""
    try:
        if path.is_dir() and not path.is_symlink():
            path.rmdir()
        else:
            path.unlink()
    except OSError as e:
        debug(f"Could not release slot {path}: {e}")


def get_file_stats(path: Path) -> dict[str, Any]:
    """Get file statistics for logging and listings.

    Args:
        path: File path to get stats for

    Returns:
        Dictionary with size and mtime, or an empty dict if unavailable
    """
    try:
        stat = path.stat()
        return {
            "size": stat.st_size,
            "mtime": datetime.fromtimestamp(stat.st_mtime, tz=UTC).isoformat(),
        }
    except OSError:
        return {}


def ensure_parent_dir(path: Path) -> None:
    """Ensure parent directory exists for a path.

    Args:
        path: Path whose parent directory should exist

    Raises:
        IOFailure: If parent directory cannot be created
    """
    parent = path.parent
    if parent.is_dir():
        return
    try:
        parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise IOFailure("create directory", parent, e) from e
