"""Tests for the undo manager: snapshot, registration and reversal."""

from pathlib import Path
from unittest.mock import Mock, patch

import pytest

from kuse_undo.core.actions import ContentRestore, DeleteRestore, MoveReverse
from kuse_undo.core.errors import ArtifactMissing, IOFailure, NoHistory, NothingToUndo
from kuse_undo.core.settings import UndoSettings
from kuse_undo.core.undo_manager import UndoManager, revert


class TestContentRestore:
    """Snapshot before overwrite, then undo."""

    def test_round_trip_restores_exact_bytes(
        self, workdir: Path, undo_manager: UndoManager
    ) -> None:
        target = workdir / "notes.bin"
        original = b"\x00\x01line one\r\nline two\xff"
        target.write_bytes(original)

        backup = undo_manager.snapshot("c1", target)
        target.write_bytes(b"overwritten")
        message = undo_manager.undo_last("c1")

        assert backup is not None
        assert target.read_bytes() == original
        assert message == f"Restored content of {target}"

    def test_backup_lands_under_working_directory(
        self, workdir: Path, undo_manager: UndoManager
    ) -> None:
        target = workdir / "src" / "app.py"
        target.parent.mkdir()
        target.write_text("print('hi')")

        with patch("kuse_undo.fs.backup.unix_timestamp", return_value=1_700_000_000):
            backup = undo_manager.snapshot("conv-a", target)

        assert backup == workdir / ".kuse" / "backups" / "conv-a" / "1700000000" / "app.py"
        assert backup.read_text() == "print('hi')"

    def test_missing_file_needs_no_backup(
        self, workdir: Path, undo_manager: UndoManager
    ) -> None:
        assert undo_manager.snapshot("c1", workdir / "new.txt") is None
        assert undo_manager.history("c1") == ()

    def test_oversize_file_is_skipped_without_record(self, workdir: Path) -> None:
        manager = UndoManager(UndoSettings(max_backup_bytes=16))
        at_limit = workdir / "big.txt"
        at_limit.write_bytes(b"x" * 16)

        assert manager.snapshot("c1", at_limit) is None
        assert manager.history("c1") == ()
        assert not (workdir / ".kuse" / "backups").exists()

        # the overwrite itself still goes ahead
        at_limit.write_bytes(b"y" * 32)
        assert at_limit.read_bytes() == b"y" * 32

    def test_just_below_limit_is_backed_up(self, workdir: Path) -> None:
        manager = UndoManager(UndoSettings(max_backup_bytes=16))
        small = workdir / "small.txt"
        small.write_bytes(b"x" * 15)

        assert manager.snapshot("c1", small) is not None
        assert len(manager.history("c1")) == 1

    def test_backup_paths_unique_across_conversations(
        self, workdir: Path, undo_manager: UndoManager
    ) -> None:
        target = workdir / "a.txt"
        target.write_text("v1")

        with patch("kuse_undo.fs.backup.unix_timestamp", return_value=42):
            first = undo_manager.snapshot("c1", target)
            second = undo_manager.snapshot("c2", target)
            third = undo_manager.snapshot("c1", target)

        assert len({first, second, third}) == 3

    def test_copy_failure_surfaces_io_failure(
        self, workdir: Path, undo_manager: UndoManager
    ) -> None:
        target = workdir / "a.txt"
        target.write_text("v1")

        with patch("kuse_undo.fs.fs_ops.shutil.copyfile", side_effect=OSError("disk full")):
            with pytest.raises(IOFailure, match="disk full"):
                undo_manager.snapshot("c1", target)

        assert undo_manager.history("c1") == ()


class TestMoveReverse:
    """Register a completed move, then undo."""

    def test_round_trip_then_nothing_to_undo(
        self, workdir: Path, undo_manager: UndoManager
    ) -> None:
        source = workdir / "a.txt"
        destination = workdir / "moved" / "b.txt"
        source.write_text("payload")
        destination.parent.mkdir()
        source.rename(destination)

        undo_manager.register_move("c1", source, destination)
        message = undo_manager.undo_last("c1")

        assert source.read_text() == "payload"
        assert not destination.exists()
        assert message == f"Moved {destination} back to {source}"
        with pytest.raises(NothingToUndo):
            undo_manager.undo_last("c1")

    def test_recreates_missing_parent_of_original(
        self, workdir: Path, undo_manager: UndoManager
    ) -> None:
        destination = workdir / "b.txt"
        destination.write_text("payload")
        source = workdir / "gone" / "deeper" / "a.txt"

        undo_manager.register_move("c1", source, destination)
        undo_manager.undo_last("c1")

        assert source.read_text() == "payload"

    def test_registration_records_inverse_direction(self, undo_manager: UndoManager) -> None:
        undo_manager.register_move("c1", "/w/src.txt", "/w/dst.txt")

        (action,) = undo_manager.history("c1")
        assert isinstance(action, MoveReverse)
        assert action.from_path == "/w/dst.txt"
        assert action.to_path == "/w/src.txt"


class TestDeleteRestore:
    """Delete-to-trash, register, then undo."""

    def test_round_trip_restores_and_empties_trash_entry(
        self, workdir: Path, undo_manager: UndoManager
    ) -> None:
        victim = workdir / "docs" / "report.md"
        victim.parent.mkdir()
        victim.write_bytes(b"# Report\n")

        trash_path = undo_manager.trash.move_to_trash(victim)
        undo_manager.register_delete("c1", victim, trash_path)

        assert not victim.exists()
        assert trash_path.parent == workdir / ".kuse" / "trash"

        message = undo_manager.undo_last("c1")

        assert victim.read_bytes() == b"# Report\n"
        assert not trash_path.exists()
        assert message == f"Restored {victim} from trash"

    def test_restores_directory(self, workdir: Path, undo_manager: UndoManager) -> None:
        folder = workdir / "pkg"
        (folder / "sub").mkdir(parents=True)
        (folder / "sub" / "x.txt").write_text("x")

        trash_path = undo_manager.trash.move_to_trash(folder)
        undo_manager.register_delete("c1", folder, trash_path)
        undo_manager.undo_last("c1")

        assert (folder / "sub" / "x.txt").read_text() == "x"


class TestFailedReversal:
    """A popped record is gone even if its reversal fails."""

    def test_missing_backup_consumes_record(
        self, workdir: Path, undo_manager: UndoManager
    ) -> None:
        target = workdir / "a.txt"
        target.write_text("v1")
        backup = undo_manager.snapshot("c1", target)
        assert backup is not None
        backup.unlink()

        with pytest.raises(ArtifactMissing, match="Backup file missing"):
            undo_manager.undo_last("c1")
        with pytest.raises(NothingToUndo):
            undo_manager.undo_last("c1")

    def test_missing_moved_file(self, undo_manager: UndoManager, workdir: Path) -> None:
        undo_manager.register_move("c1", workdir / "a.txt", workdir / "b.txt")

        with pytest.raises(ArtifactMissing, match="Cannot move back"):
            undo_manager.undo_last("c1")

    def test_missing_trash_entry(self, undo_manager: UndoManager, workdir: Path) -> None:
        undo_manager.register_delete("c1", workdir / "a.txt", workdir / ".kuse" / "trash" / "1_a.txt")

        with pytest.raises(ArtifactMissing, match="Trash file missing"):
            undo_manager.undo_last("c1")

    def test_older_records_survive_a_failed_reversal(
        self, workdir: Path, undo_manager: UndoManager
    ) -> None:
        kept = workdir / "kept.txt"
        kept.write_text("original")
        undo_manager.snapshot("c1", kept)
        kept.write_text("changed")
        undo_manager.register_move("c1", workdir / "x.txt", workdir / "y.txt")

        with pytest.raises(ArtifactMissing):
            undo_manager.undo_last("c1")
        undo_manager.undo_last("c1")

        assert kept.read_text() == "original"

    def test_failure_is_logged(self, workdir: Path) -> None:
        logger = Mock()
        bound = Mock()
        logger.bind.return_value = bound
        manager = UndoManager(logger=logger)
        manager.register_move("c1", workdir / "a.txt", workdir / "b.txt")

        with pytest.raises(ArtifactMissing):
            manager.undo_last("c1")

        logger.bind.assert_called_once_with(conversation_id="c1", kind="move_reverse")
        assert bound.warning.call_args.args[0] == "undo.revert_failed"


class TestErrorsAndClear:
    """Distinct error kinds and history clearing."""

    def test_unknown_vs_empty_conversation(self, undo_manager: UndoManager) -> None:
        with pytest.raises(NoHistory):
            undo_manager.undo_last("unknown")

        undo_manager.register_move("known", "/a", "/b")
        undo_manager.log.pop_latest("known")

        with pytest.raises(NothingToUndo):
            undo_manager.undo_last("known")

    def test_clear_keeps_disk_artifacts(
        self, workdir: Path, undo_manager: UndoManager
    ) -> None:
        target = workdir / "a.txt"
        target.write_text("v1")
        backup = undo_manager.snapshot("c1", target)
        victim = workdir / "b.txt"
        victim.write_text("v2")
        trash_path = undo_manager.trash.move_to_trash(victim)
        undo_manager.register_delete("c1", victim, trash_path)

        undo_manager.clear("c1")

        with pytest.raises(NoHistory):
            undo_manager.undo_last("c1")
        assert backup is not None and backup.read_text() == "v1"
        assert trash_path.read_text() == "v2"

    def test_cap_applies_through_manager(self, workdir: Path) -> None:
        manager = UndoManager(UndoSettings(history_limit=3))
        for i in range(5):
            manager.register_move("c1", f"/src/{i}", f"/dst/{i}")

        assert [a.to_path for a in manager.history("c1")] == ["/src/2", "/src/3", "/src/4"]


def test_revert_dispatches_each_variant(tmp_path: Path) -> None:
    """revert() handles every record kind without a manager."""
    target = tmp_path / "t.txt"
    backup = tmp_path / "b.txt"
    target.write_text("new")
    backup.write_text("old")
    moved = tmp_path / "moved.txt"
    moved.write_text("m")
    trashed = tmp_path / "trashed.txt"
    trashed.write_text("d")

    revert(ContentRestore(target_path=str(target), backup_path=str(backup)))
    revert(MoveReverse(from_path=str(moved), to_path=str(tmp_path / "orig.txt")))
    revert(DeleteRestore(trash_path=str(trashed), original_path=str(tmp_path / "back.txt")))

    assert target.read_text() == "old"
    assert (tmp_path / "orig.txt").read_text() == "m"
    assert (tmp_path / "back.txt").read_text() == "d"
