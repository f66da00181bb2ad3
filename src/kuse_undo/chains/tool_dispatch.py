"""Tool dispatch for reversible file tools.

This module provides the ToolDispatch class that executes file tools on
behalf of an agent and keeps the undo manager informed: snapshots before
content overwrites, registrations after successful moves and deletes,
and undo requests relayed verbatim.
"""

import time
from collections.abc import Callable
from pathlib import Path
from typing import Any

import structlog

from kuse_undo.chains.schemas import (
    DeleteFileInput,
    EditFileInput,
    MoveFileInput,
    ToolResult,
    ToolUse,
    WriteFileInput,
    parse_tool_input,
)
from kuse_undo.core.constants import UNDO_TOOL
from kuse_undo.core.errors import InvalidInput, KuseError, NotFound
from kuse_undo.core.undo_manager import UndoManager
from kuse_undo.fs.fs_ops import edit_text_file, relocate, write_text_file
from kuse_undo.fs.paths import resolve_tool_path
from kuse_undo.fs.trash import TrashStore


class ToolDispatch:
    """Executes file tools and records their undo information.

    Without an undo manager or a conversation id the tools still run, but
    nothing is recorded and ``undo_last`` reports that undo is unavailable.
    """

    def __init__(self, project_path: str | Path | None = None, logger: Any = None) -> None:
        """Initialize tool dispatch.

        Args:
            project_path: Root that relative tool paths resolve against
            logger: Optional structlog logger instance
        """
        self.project_path = Path(project_path) if project_path is not None else None
        self._logger = logger or structlog.get_logger()
        self._undo: UndoManager | None = None
        self._conversation_id: str | None = None
        self._handlers: dict[str, Callable[[dict[str, Any]], str]] = {
            "write_file": self._write_file,
            "edit_file": self._edit_file,
            "move_file": self._move_file,
            "delete_file": self._delete_file,
            UNDO_TOOL: self._undo_last,
        }

    def with_undo_manager(self, undo_manager: UndoManager) -> "ToolDispatch":
        self._undo = undo_manager
        return self

    def with_conversation_id(self, conversation_id: str) -> "ToolDispatch":
        self._conversation_id = conversation_id
        return self

    @property
    def tool_names(self) -> tuple[str, ...]:
        return tuple(self._handlers)

    def execute(self, tool_use: ToolUse) -> ToolResult:
        """Run a single tool call.

        Args:
            tool_use: Tool invocation from the model

        Returns:
            ToolResult carrying the tool's message or its error text
        """
        start_time = time.time()
        bound_logger = self._logger.bind(
            tool=tool_use.name,
            tool_use_id=tool_use.id,
            conversation_id=self._conversation_id,
        )

        handler = self._handlers.get(tool_use.name)
        if handler is None:
            bound_logger.warning("tool.unknown")
            return ToolResult.error(tool_use.id, f"Unknown tool: {tool_use.name}")

        try:
            message = handler(tool_use.input)
        except (KuseError, ValueError) as exc:
            bound_logger.info(
                "tool.execute",
                status="error",
                error=str(exc),
                elapsed_ms=int((time.time() - start_time) * 1000),
            )
            return ToolResult.error(tool_use.id, str(exc))

        bound_logger.info(
            "tool.execute",
            status="ok",
            elapsed_ms=int((time.time() - start_time) * 1000),
        )
        return ToolResult.success(tool_use.id, message)

    def close(self) -> None:
        """Tear down the conversation: forget its in-memory undo history."""
        if self._undo is not None and self._conversation_id is not None:
            self._undo.clear(self._conversation_id)

    def _resolve(self, path_str: str) -> Path:
        return resolve_tool_path(path_str, self.project_path)

    def _snapshot(self, path: Path) -> None:
        # Best effort: a failed snapshot never blocks the overwrite.
        if self._undo is None or self._conversation_id is None:
            return
        try:
            self._undo.snapshot(self._conversation_id, path)
        except KuseError as exc:
            self._logger.warning(
                "tool.snapshot_failed",
                conversation_id=self._conversation_id,
                path=str(path),
                error=str(exc),
            )

    def _write_file(self, args: dict[str, Any]) -> str:
        params = parse_tool_input(WriteFileInput, args)
        path = self._resolve(params.path)
        self._snapshot(path)
        written = write_text_file(path, params.content)
        return f"Successfully wrote {written} bytes to {path}"

    def _edit_file(self, args: dict[str, Any]) -> str:
        params = parse_tool_input(EditFileInput, args)
        path = self._resolve(params.path)
        if not path.is_file():
            raise NotFound(f"File not found: {params.path}")
        self._snapshot(path)
        replaced = edit_text_file(
            path,
            params.old_string,
            params.new_string,
            replace_all=params.replace_all,
        )
        return f"Successfully edited {path} ({replaced} replacement(s))"

    def _move_file(self, args: dict[str, Any]) -> str:
        params = parse_tool_input(MoveFileInput, args)
        source = self._resolve(params.source)
        destination = self._resolve(params.destination)

        if not source.exists() and not source.is_symlink():
            raise NotFound(f"Source file not found: {params.source}")
        if destination.exists() or destination.is_symlink():
            raise InvalidInput(
                "destination",
                f"Destination already exists: {params.destination}. Move skipped.",
            )

        relocate(source, destination)

        if self._undo is not None and self._conversation_id is not None:
            self._undo.register_move(self._conversation_id, source, destination)
        return f"Successfully moved {source} to {destination}"

    def _delete_file(self, args: dict[str, Any]) -> str:
        params = parse_tool_input(DeleteFileInput, args)
        path = self._resolve(params.path)
        if not path.exists() and not path.is_symlink():
            raise NotFound(f"File not found: {params.path}")

        trash = self._undo.trash if self._undo is not None else TrashStore(logger=self._logger)
        trash_path = trash.move_to_trash(path)

        if self._undo is not None and self._conversation_id is not None:
            self._undo.register_delete(self._conversation_id, path, trash_path)
        return f"Successfully moved {path} to trash (recoverable)"

    def _undo_last(self, args: dict[str, Any]) -> str:
        if self._undo is None or self._conversation_id is None:
            raise KuseError("Undo is not available for this session")
        return self._undo.undo_last(self._conversation_id)
