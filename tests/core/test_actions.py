"""Tests for undo record schemas."""

import pytest
from pydantic import ValidationError

from kuse_undo.core.actions import (
    ContentRestore,
    DeleteRestore,
    MoveReverse,
    undo_action_adapter,
)


def test_variants_carry_distinct_kinds() -> None:
    kinds = {
        ContentRestore(target_path="/a", backup_path="/b").kind,
        MoveReverse(from_path="/b", to_path="/a").kind,
        DeleteRestore(trash_path="/t", original_path="/a").kind,
    }

    assert kinds == {"content_restore", "move_reverse", "delete_restore"}


def test_timestamp_defaults_to_now() -> None:
    action = MoveReverse(from_path="/b", to_path="/a")

    assert isinstance(action.timestamp, int)
    assert action.timestamp > 1_600_000_000


def test_records_are_frozen() -> None:
    action = ContentRestore(target_path="/a", backup_path="/b", timestamp=1)

    with pytest.raises(ValidationError):
        action.target_path = "/elsewhere"  # type: ignore[misc]


def test_adapter_selects_variant_by_kind() -> None:
    """The discriminated union resolves each JSON payload to its variant."""
    action = undo_action_adapter.validate_python(
        {
            "kind": "delete_restore",
            "trash_path": "/w/.kuse/trash/10_a.txt",
            "original_path": "/w/a.txt",
            "timestamp": 10,
        }
    )

    assert isinstance(action, DeleteRestore)
    assert action.original_path == "/w/a.txt"


def test_adapter_rejects_unknown_kind() -> None:
    with pytest.raises(ValidationError):
        undo_action_adapter.validate_python(
            {"kind": "chmod_restore", "path": "/a", "timestamp": 1}
        )


def test_adapter_json_dump_includes_kind() -> None:
    action = MoveReverse(from_path="/b", to_path="/a", timestamp=5)

    payload = undo_action_adapter.dump_python(action, mode="json")

    assert payload == {"kind": "move_reverse", "from_path": "/b", "to_path": "/a", "timestamp": 5}
