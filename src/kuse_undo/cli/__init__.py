"""CLI entrypoints for kuse-undo."""

from kuse_undo.cli.storage import app as storage_app

__all__ = ["storage_app"]
