"""Per-conversation bounded undo history.

Each conversation owns a fixed-capacity ring buffer of undo records,
ordered oldest to newest. Pushing onto a full buffer evicts the oldest
record permanently; undo always consumes the newest.

A single lock guards the whole table. It is held only while the in-memory
buffers change, never across filesystem I/O.
"""

import threading
from collections import deque
from typing import Any

import structlog

from kuse_undo.core.actions import UndoAction
from kuse_undo.core.constants import MAX_HISTORY_PER_CONVERSATION
from kuse_undo.core.errors import NoHistory, NothingToUndo

__all__ = ["ActionLog"]


class ActionLog:
    """Bounded LIFO stacks of undo records keyed by conversation id."""

    def __init__(
        self,
        limit: int = MAX_HISTORY_PER_CONVERSATION,
        logger: Any = None,
    ) -> None:
        """Initialize an empty log.

        Args:
            limit: Maximum records kept per conversation
            logger: Optional structlog logger instance
        """
        if limit <= 0:
            raise ValueError("limit must be positive")
        self.limit = limit
        self._logger = logger or structlog.get_logger()
        self._lock = threading.Lock()
        self._history: dict[str, deque[UndoAction]] = {}

    def record(self, conversation_id: str, action: UndoAction) -> None:
        """Push an action, evicting the oldest one when the stack is full.

        Args:
            conversation_id: Opaque conversation identifier
            action: Undo record to push
        """
        evicted: UndoAction | None = None
        with self._lock:
            stack = self._history.get(conversation_id)
            if stack is None:
                stack = deque(maxlen=self.limit)
                self._history[conversation_id] = stack
            if len(stack) == self.limit:
                evicted = stack[0]
            stack.append(action)
            size = len(stack)

        self._logger.debug(
            "undo.record",
            conversation_id=conversation_id,
            kind=action.kind,
            size=size,
        )
        if evicted is not None:
            self._logger.debug(
                "undo.evicted",
                conversation_id=conversation_id,
                kind=evicted.kind,
                timestamp=evicted.timestamp,
            )

    def pop_latest(self, conversation_id: str) -> UndoAction:
        """Remove and return the newest action for a conversation.

        Args:
            conversation_id: Opaque conversation identifier

        Returns:
            The most recently recorded action

        Raises:
            NoHistory: If the conversation never recorded anything (or was cleared)
            NothingToUndo: If the conversation is known but its stack is empty
        """
        with self._lock:
            stack = self._history.get(conversation_id)
            if stack is None:
                raise NoHistory(conversation_id)
            if not stack:
                raise NothingToUndo(conversation_id)
            return stack.pop()

    def clear(self, conversation_id: str) -> None:
        """Forget a conversation's in-memory history. Idempotent."""
        with self._lock:
            self._history.pop(conversation_id, None)

    def history(self, conversation_id: str) -> tuple[UndoAction, ...]:
        """Return a snapshot of a conversation's records, oldest first."""
        with self._lock:
            return tuple(self._history.get(conversation_id, ()))

    def size(self, conversation_id: str) -> int:
        with self._lock:
            stack = self._history.get(conversation_id)
            return len(stack) if stack is not None else 0

    def __contains__(self, conversation_id: object) -> bool:
        with self._lock:
            return conversation_id in self._history

    def __len__(self) -> int:
        """Number of conversations currently tracked."""
        with self._lock:
            return len(self._history)
