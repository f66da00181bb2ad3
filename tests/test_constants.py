"""Tests for core constants module."""

from kuse_undo.core import constants


def test_limits() -> None:
    """Test the default backup ceiling and history cap."""
    assert constants.MAX_BACKUP_BYTES == 100 * 1024 * 1024
    assert constants.MAX_HISTORY_PER_CONVERSATION == 10


def test_layout_names() -> None:
    """Test the on-disk staging layout names."""
    assert constants.KUSE_DIR_NAME == ".kuse"
    assert constants.BACKUPS_DIR_NAME == "backups"
    assert constants.TRASH_DIR_NAME == "trash"


def test_env_names_are_prefixed() -> None:
    for name in (
        constants.ENV_MAX_BACKUP_BYTES,
        constants.ENV_HISTORY_LIMIT,
        constants.ENV_BASE_DIR,
    ):
        assert name.startswith("KUSE_")
