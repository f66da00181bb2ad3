"""Pydantic schemas for tool calls handled by the dispatcher.

These schemas define the data exchanged between the agent and the tools:
- ToolUse: A tool invocation requested by the model
- ToolResult: The text returned to the model
- *Input: Validated arguments for each file tool

All schemas use Pydantic v2 for validation and serialization.
"""

from typing import Any, TypeVar

from pydantic import BaseModel, Field, ValidationError

from kuse_undo.core.errors import InvalidInput


class ToolUse(BaseModel):
    """A tool invocation requested by the model.

    Attributes:
        id: Provider-assigned tool call id
        name: Tool name (write_file, edit_file, move_file, delete_file, undo_last)
        input: Raw JSON arguments
    """

    id: str
    name: str
    input: dict[str, Any] = Field(default_factory=dict)


class ToolResult(BaseModel):
    """Text returned to the model for a tool call."""

    tool_use_id: str
    content: str
    is_error: bool = False

    @classmethod
    def success(cls, tool_use_id: str, content: str) -> "ToolResult":
        return cls(tool_use_id=tool_use_id, content=content)

    @classmethod
    def error(cls, tool_use_id: str, content: str) -> "ToolResult":
        return cls(tool_use_id=tool_use_id, content=content, is_error=True)


class WriteFileInput(BaseModel):
    path: str
    content: str


class EditFileInput(BaseModel):
    path: str
    old_string: str
    new_string: str
    replace_all: bool = False


class MoveFileInput(BaseModel):
    source: str
    destination: str


class DeleteFileInput(BaseModel):
    path: str


ModelT = TypeVar("ModelT", bound=BaseModel)


def parse_tool_input(model: type[ModelT], data: dict[str, Any]) -> ModelT:
    """Validate raw tool arguments against an input schema.

    Args:
        model: Input schema class
        data: Raw JSON arguments from the model

    Returns:
        Validated input instance

    Raises:
        InvalidInput: Naming the first missing or mistyped field
    """
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        first = exc.errors()[0]
        field = ".".join(str(part) for part in first.get("loc", ())) or "input"
        if first.get("type") == "missing":
            raise InvalidInput(field) from exc
        raise InvalidInput(field, f"Invalid '{field}' parameter: {first.get('msg')}") from exc
