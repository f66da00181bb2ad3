"""kuse-undo: reversible file mutations for autonomous agents.

Usage:
    from kuse_undo import ToolDispatch, ToolUse, UndoManager

    undo = UndoManager()
    tools = (
        ToolDispatch(project_path="/work/project")
        .with_undo_manager(undo)
        .with_conversation_id("conv-1")
    )
    tools.execute(ToolUse(id="t1", name="write_file", input={"path": "a.txt", "content": "hi"}))
    tools.execute(ToolUse(id="t2", name="undo_last"))
"""

from kuse_undo.chains.schemas import ToolResult, ToolUse
from kuse_undo.chains.tool_dispatch import ToolDispatch
from kuse_undo.core.action_log import ActionLog
from kuse_undo.core.actions import ContentRestore, DeleteRestore, MoveReverse, UndoAction
from kuse_undo.core.settings import UndoSettings
from kuse_undo.core.undo_manager import UndoManager

__version__ = "0.1.0"

__all__ = [
    "ActionLog",
    "ContentRestore",
    "DeleteRestore",
    "MoveReverse",
    "ToolDispatch",
    "ToolResult",
    "ToolUse",
    "UndoAction",
    "UndoManager",
    "UndoSettings",
]
