"""File helpers for the JSON stores kept in the user's home directory.

atomic_write_text() replaces a file in one step so a crashed write never
leaves a truncated store behind. read_locked_text() takes a shared lock
while reading so a concurrent writer on the same host is not observed
half-way.
"""
from __future__ import annotations

import logging
import os
import sys
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import TextIO

logger = logging.getLogger(__name__)


@contextmanager
def shared_file_lock(file_handle: TextIO) -> Iterator[None]:
    """Hold an advisory shared lock on `file_handle` while the block runs.

    Uses fcntl.flock on POSIX and msvcrt.locking on Windows. When the
    platform refuses the lock the block still runs unlocked.
    """
    unlock = None

    if sys.platform == "win32":
        import msvcrt

        try:
            msvcrt.locking(file_handle.fileno(), msvcrt.LK_NBLCK, 1)
            unlock = lambda: msvcrt.locking(file_handle.fileno(), msvcrt.LK_UNLCK, 1)  # noqa: E731
        except OSError as e:
            logger.debug(f"Could not lock {file_handle.name}: {e}")
    else:
        import fcntl

        try:
            fcntl.flock(file_handle, fcntl.LOCK_SH)
            unlock = lambda: fcntl.flock(file_handle, fcntl.LOCK_UN)  # noqa: E731
        except OSError as e:
            logger.debug(f"Could not lock {file_handle.name}: {e}")

    try:
        yield
    finally:
        if unlock is not None:
            try:
                unlock()
            except OSError as e:
                logger.debug(f"Could not unlock {file_handle.name}: {e}")


def read_locked_text(path: str | Path) -> str:
    """Read a text file under a shared lock."""
    with open(path, encoding="utf-8") as f:
        with shared_file_lock(f):
            return f.read()


def atomic_write_text(path: str | Path, data: str, perms: int = 0o600) -> None:
    """Atomically write text content to path with restrictive permissions.

    The content goes to a temporary file in the destination directory,
    is fsynced, then moved over the destination with os.replace(). The
    temporary file is removed if the replace does not happen.
    """
    dest = Path(path)
    dest.parent.mkdir(parents=True, exist_ok=True)

    tmp_name: str | None = None
    try:
        with tempfile.NamedTemporaryFile(
            "w",
            dir=str(dest.parent),
            prefix=f".{dest.name}.",
            delete=False,
            encoding="utf-8",
        ) as tmp:
            tmp_name = tmp.name
            tmp.write(data)
            tmp.flush()
            os.fsync(tmp.fileno())

        os.replace(tmp_name, dest)
        tmp_name = None
    finally:
        if tmp_name is not None:
            try:
                os.unlink(tmp_name)
            except OSError:
                logger.debug(f"Could not remove temporary file {tmp_name}")

    try:
        os.chmod(dest, perms)
    except PermissionError:
        logger.warning(f"Could not set permissions {oct(perms)} on {dest}")
