"""Filesystem side of undo: content snapshots, trash and relocation.

This module provides the on-disk half of the undo subsystem: byte-for-byte
backups before overwrites, delete-as-relocate into a trash area, and the
move/copy primitives used both by tools and by reversal.
"""

from kuse_undo.fs.backup import BackupStore
from kuse_undo.fs.fs_ops import copy_bytes, edit_text_file, relocate, write_text_file
from kuse_undo.fs.paths import resolve_tool_path
from kuse_undo.fs.trash import TrashStore

__all__ = [
    "BackupStore",
    "TrashStore",
    "copy_bytes",
    "edit_text_file",
    "relocate",
    "resolve_tool_path",
    "write_text_file",
]
