"""Filesystem primitives used by tools and by undo.

Every function here performs a single blocking operation on the calling
thread and converts OS errors into IOFailure with the step that failed.
Nothing is retried.
"""

import errno
import os
import shutil
from pathlib import Path

from kuse_undo.core.errors import IOFailure, NotFound
from kuse_undo.fs.paths import ensure_parent_dir
from kuse_undo.utils.debug import debug


def relocate(src: Path, dst: Path, *, operation: str = "move") -> None:
    """Move ``src`` to ``dst``, creating ``dst``'s parent directories.

    A plain rename is tried first; across devices the move falls back to
    copy-and-remove.

    Args:
        src: Existing file or directory
        dst: Target location
        operation: Label used in the error message on failure

    Raises:
        IOFailure: If the parent directory or the move fails
    """
    ensure_parent_dir(dst)
    try:
        os.rename(src, dst)
        debug(f"Direct rename: {src} -> {dst}")
    except OSError as e:
        if e.errno != errno.EXDEV:
            raise IOFailure(operation, src, e) from e
        try:
            if dst.is_dir() and not dst.is_symlink() and not any(dst.iterdir()):
                # rename replaces an empty directory; shutil.move would nest inside it
                dst.rmdir()
            shutil.move(str(src), str(dst))
            debug(f"Cross-device move: {src} -> {dst}")
        except OSError as move_e:
            raise IOFailure(operation, src, move_e) from move_e


def copy_bytes(src: Path, dst: Path, *, operation: str = "copy") -> None:
    """Copy ``src``'s bytes over ``dst`` (no metadata).

    Raises:
        IOFailure: If the copy fails
    """
    try:
        shutil.copyfile(src, dst)
        debug(f"Copied bytes: {src} -> {dst}")
    except OSError as e:
        raise IOFailure(operation, src, e) from e


def write_text_file(path: Path, content: str) -> int:
    """Write ``content`` to ``path``, creating parent directories.

    Returns:
        Number of bytes written
    """
    ensure_parent_dir(path)
    data = content.encode("utf-8")
    try:
        path.write_bytes(data)
    except OSError as e:
        raise IOFailure("write", path, e) from e
    return len(data)


def edit_text_file(
    path: Path,
    old_string: str,
    new_string: str,
    *,
    replace_all: bool = False,
) -> int:
    """Replace ``old_string`` with ``new_string`` inside a text file.

    Line endings are left untouched: the file is read and written without
    newline translation, so CRLF content stays CRLF.

    Args:
        path: File to edit
        old_string: Exact text to find
        new_string: Replacement text
        replace_all: Replace every occurrence instead of requiring a unique one

    Returns:
        Number of replacements made

    Raises:
        NotFound: If the file or ``old_string`` does not exist
        ValueError: If ``old_string`` is ambiguous and ``replace_all`` is False
        IOFailure: If reading or writing fails
    """
    if not path.is_file():
        raise NotFound(f"File not found: {path}")
    try:
        with open(path, encoding="utf-8", newline="") as f:
            text = f.read()
    except OSError as e:
        raise IOFailure("read", path, e) from e

    count = text.count(old_string) if old_string else 0
    if count == 0:
        raise NotFound(f"String not found in {path}")
    if count > 1 and not replace_all:
        raise ValueError(
            f"Found {count} occurrences of the string in {path}; "
            "provide more context or set replace_all"
        )

    updated = text.replace(old_string, new_string, -1 if replace_all else 1)
    try:
        path.write_text(updated, encoding="utf-8", newline="")
    except OSError as e:
        raise IOFailure("write", path, e) from e
    return count if replace_all else 1
