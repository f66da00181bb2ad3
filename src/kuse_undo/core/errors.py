"""Custom exceptions for kuse-undo.

This module defines typed exceptions used by the undo subsystem. Every
exception's ``str()`` is a complete, user-facing message: the tool
dispatcher relays it verbatim to the agent and never retries.
"""

from pathlib import Path
from typing import Any


class KuseError(Exception):
    """Base exception for all kuse-undo errors.

    All custom exceptions should inherit from this base class to allow
    for broad exception handling when needed.
    """

    pass


class NotFound(KuseError):
    """Raised when something an undo depends on does not exist.

    Attributes:
        kind: Machine-readable discriminator for the missing thing
    """

    kind: str = "not_found"

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for tool responses.

        Returns:
            Dictionary representation suitable for JSON responses
        """
        return {"error": self.kind, "message": str(self)}


class NoHistory(NotFound):
    """Raised when a conversation has never recorded an action.

    Attributes:
        conversation_id: The unknown conversation
    """

    kind = "no_history"

    def __init__(self, conversation_id: str) -> None:
        self.conversation_id = conversation_id
        super().__init__("No history for this conversation")

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["conversation_id"] = self.conversation_id
        return result

    def __repr__(self) -> str:
        return f"NoHistory(conversation_id={self.conversation_id!r})"


class NothingToUndo(NotFound):
    """Raised when a known conversation's history is empty.

    Attributes:
        conversation_id: The conversation whose stack is exhausted
    """

    kind = "nothing_to_undo"

    def __init__(self, conversation_id: str) -> None:
        self.conversation_id = conversation_id
        super().__init__("Nothing to undo")

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["conversation_id"] = self.conversation_id
        return result

    def __repr__(self) -> str:
        return f"NothingToUndo(conversation_id={self.conversation_id!r})"


class ArtifactMissing(NotFound):
    """Raised when a reversal's source file disappeared before undo.

    The record has already been popped when this is raised; it is not
    restored to the stack.

    Attributes:
        path: The backup, trash entry, or moved file that is gone
        message: Human-readable description
    """

    kind = "artifact_missing"

    def __init__(self, path: str | Path, message: str) -> None:
        self.path = str(path)
        self.message = message
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["path"] = self.path
        return result

    def __repr__(self) -> str:
        return f"ArtifactMissing(path={self.path!r})"


class IOFailure(KuseError):
    """Raised when a filesystem call fails during snapshot, relocation or undo.

    Attributes:
        operation: Short label of the failed step (stat, mkdir, copy, rename, ...)
        path: Path the operation was acting on
        cause: The underlying OS error message
    """

    def __init__(self, operation: str, path: str | Path, cause: BaseException | str) -> None:
        """Initialize IOFailure exception.

        Args:
            operation: Label of the failed filesystem step
            path: Path involved in the failure
            cause: Original exception or message
        """
        self.operation = operation
        self.path = str(path)
        self.cause = str(cause)

        super().__init__(f"Failed to {operation} {self.path}: {self.cause}")

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for tool responses.

        Returns:
            Dictionary representation suitable for JSON responses
        """
        return {
            "error": "io_failure",
            "operation": self.operation,
            "path": self.path,
            "cause": self.cause,
        }

    def __repr__(self) -> str:
        return (
            f"IOFailure(operation={self.operation!r}, "
            f"path={self.path!r}, "
            f"cause={self.cause!r})"
        )


class InvalidInput(KuseError):
    """Raised when a required field is missing or unusable.

    Attributes:
        field: Name of the offending field
        reason: Human-readable reason
    """

    def __init__(self, field: str, reason: str | None = None) -> None:
        self.field = field
        self.reason = reason or f"Missing '{field}' parameter"
        super().__init__(self.reason)

    def to_dict(self) -> dict[str, Any]:
        return {"error": "invalid_input", "field": self.field, "reason": self.reason}

    def __repr__(self) -> str:
        return f"InvalidInput(field={self.field!r}, reason={self.reason!r})"
