"""Undo manager: the process-owned context object for reversible tools.

The manager ties together the action log, the backup store and the trash
store. It is created once by whoever owns the tool dispatcher and passed
to it by reference; there is no module-level instance.

Contract with the tool dispatcher:
- before a content overwrite (write/edit): ``snapshot`` (best effort)
- after a successful move: ``register_move``
- after a successful delete-to-trash: ``register_delete``
- on an undo request: ``undo_last``, relaying its message or error
- on conversation teardown: ``clear``
"""

from pathlib import Path
from typing import Any, assert_never

import structlog

from kuse_undo.core.action_log import ActionLog
from kuse_undo.core.actions import (
    ContentRestore,
    DeleteRestore,
    MoveReverse,
    UndoAction,
)
from kuse_undo.core.errors import ArtifactMissing, KuseError
from kuse_undo.core.settings import UndoSettings
from kuse_undo.fs.backup import BackupStore
from kuse_undo.fs.fs_ops import copy_bytes, relocate
from kuse_undo.fs.paths import unix_timestamp
from kuse_undo.fs.trash import TrashStore

__all__ = ["UndoManager", "revert"]


class UndoManager:
    """Records reversible file mutations and reverses the latest on demand."""

    def __init__(
        self,
        settings: UndoSettings | None = None,
        *,
        log: ActionLog | None = None,
        backups: BackupStore | None = None,
        trash: TrashStore | None = None,
        logger: Any = None,
    ) -> None:
        """Initialize undo manager.

        Args:
            settings: Shared settings; defaults if omitted
            log: Optional pre-built action log
            backups: Optional pre-built backup store
            trash: Optional pre-built trash store
            logger: Optional structlog logger instance
        """
        self.settings = settings or UndoSettings()
        self._logger = logger or structlog.get_logger()
        self.log = log or ActionLog(self.settings.history_limit, logger=self._logger)
        self.backups = backups or BackupStore(self.settings, logger=self._logger)
        self.trash = trash or TrashStore(self.settings, logger=self._logger)

    def snapshot(self, conversation_id: str, path: str | Path) -> Path | None:
        """Back up a file that is about to be overwritten.

        Args:
            conversation_id: Conversation issuing the overwrite
            path: File about to be overwritten

        Returns:
            Path of the backup, or None if no backup was needed or allowed
            (missing file, or file at or above the size ceiling)

        Raises:
            IOFailure: If the snapshot could not be written
            InvalidInput: If the path has no usable file name
        """
        action = self.backups.create_backup(conversation_id, Path(path))
        if action is None:
            return None
        self.log.record(conversation_id, action)
        return Path(action.backup_path)

    def register_move(self, conversation_id: str, source: str | Path, destination: str | Path) -> None:
        """Remember a completed move so it can be moved back."""
        self.log.record(
            conversation_id,
            MoveReverse(
                from_path=str(destination),
                to_path=str(source),
                timestamp=unix_timestamp(),
            ),
        )

    def register_delete(
        self, conversation_id: str, original_path: str | Path, trash_path: str | Path
    ) -> None:
        """Remember a completed delete-to-trash so it can be restored."""
        self.log.record(
            conversation_id,
            DeleteRestore(
                trash_path=str(trash_path),
                original_path=str(original_path),
                timestamp=unix_timestamp(),
            ),
        )

    def undo_last(self, conversation_id: str) -> str:
        """Pop the newest record for a conversation and reverse it.

        The record is consumed even if the reversal fails; it is never
        pushed back onto the stack.

        Args:
            conversation_id: Conversation requesting the undo

        Returns:
            Human-readable description of what was restored

        Raises:
            NoHistory: Unknown conversation
            NothingToUndo: Known conversation with an empty stack
            ArtifactMissing: Backup, trash entry or moved file is gone
            IOFailure: The restoring copy, mkdir or rename failed
        """
        action = self.log.pop_latest(conversation_id)
        bound_logger = self._logger.bind(conversation_id=conversation_id, kind=action.kind)
        try:
            message = revert(action)
        except KuseError as exc:
            bound_logger.warning("undo.revert_failed", error=str(exc))
            raise
        bound_logger.info("undo.reverted", message=message)
        return message

    def clear(self, conversation_id: str) -> None:
        """Drop a conversation's in-memory history; disk artifacts stay."""
        self.log.clear(conversation_id)
        self._logger.debug("undo.cleared", conversation_id=conversation_id)

    def history(self, conversation_id: str) -> tuple[UndoAction, ...]:
        return self.log.history(conversation_id)


def revert(action: UndoAction) -> str:
    """Apply the inverse of a single undo record.

    Returns:
        Human-readable description of what was restored
    """
    match action:
        case ContentRestore():
            return _restore_content(action)
        case MoveReverse():
            return _reverse_move(action)
        case DeleteRestore():
            return _restore_deleted(action)
        case _:
            assert_never(action)


def _restore_content(action: ContentRestore) -> str:
    backup = Path(action.backup_path)
    if not backup.exists():
        raise ArtifactMissing(backup, f"Backup file missing: {action.backup_path}")
    copy_bytes(backup, Path(action.target_path), operation="restore file from")
    return f"Restored content of {action.target_path}"


def _reverse_move(action: MoveReverse) -> str:
    current = Path(action.from_path)
    if not current.exists() and not current.is_symlink():
        raise ArtifactMissing(
            current, f"File not found at {action.from_path}. Cannot move back."
        )
    relocate(current, Path(action.to_path), operation="move file back from")
    return f"Moved {action.from_path} back to {action.to_path}"


def _restore_deleted(action: DeleteRestore) -> str:
    trashed = Path(action.trash_path)
    if not trashed.exists() and not trashed.is_symlink():
        raise ArtifactMissing(trashed, f"Trash file missing: {action.trash_path}")
    relocate(trashed, Path(action.original_path), operation="restore from trash")
    return f"Restored {action.original_path} from trash"
