"""Pytest configuration and fixtures for kuse-undo tests."""

from pathlib import Path

import pytest

from kuse_undo.core.settings import UndoSettings
from kuse_undo.core.undo_manager import UndoManager


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep developer KUSE_* overrides out of the tests."""
    for name in ("KUSE_MAX_BACKUP_BYTES", "KUSE_HISTORY_LIMIT", "KUSE_BASE_DIR"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def workdir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run the test with the working directory set to a fresh tmp dir."""
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def undo_manager(workdir: Path) -> UndoManager:
    """Undo manager staging into ``<workdir>/.kuse`` with default limits."""
    return UndoManager(UndoSettings())
