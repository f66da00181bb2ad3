"""Pydantic schemas for undo records.

A record is a closed tagged union over three variants:
- ContentRestore: content was overwritten; a backup holds the pristine bytes
- MoveReverse: a file was moved; it can be moved back
- DeleteRestore: a file was relocated to the trash; it can be put back

All schemas use Pydantic v2 and are frozen once created.
"""

import time
from typing import Annotated, Literal

from pydantic import BaseModel, Field, TypeAdapter


def _now() -> int:
    return int(time.time())


class ContentRestore(BaseModel):
    """Overwrite ``target_path`` with the bytes stored at ``backup_path``.

    Attributes:
        target_path: File whose content was overwritten
        backup_path: Snapshot taken before the overwrite
        timestamp: Unix seconds at snapshot time
    """

    kind: Literal["content_restore"] = "content_restore"
    target_path: str
    backup_path: str
    timestamp: int = Field(default_factory=_now)

    model_config = {"frozen": True}


class MoveReverse(BaseModel):
    """Move a file from its post-move location back to where it was.

    Attributes:
        from_path: Where the file is now (the original move's destination)
        to_path: Where the file goes back to (the original move's source)
        timestamp: Unix seconds at registration time
    """

    kind: Literal["move_reverse"] = "move_reverse"
    from_path: str
    to_path: str
    timestamp: int = Field(default_factory=_now)

    model_config = {"frozen": True}


class DeleteRestore(BaseModel):
    """Relocate a trashed file back to its original location.

    Attributes:
        trash_path: Where the file is now (inside the trash)
        original_path: Where the file lived before deletion
        timestamp: Unix seconds at registration time
    """

    kind: Literal["delete_restore"] = "delete_restore"
    trash_path: str
    original_path: str
    timestamp: int = Field(default_factory=_now)

    model_config = {"frozen": True}


UndoAction = Annotated[
    ContentRestore | MoveReverse | DeleteRestore,
    Field(discriminator="kind"),
]

#: Validates/serializes any UndoAction variant by its ``kind`` tag
undo_action_adapter: TypeAdapter[UndoAction] = TypeAdapter(UndoAction)
