"""
envgate — filesystem utilities

Purpose
- Provision directories for the file permission check and probe their writability.
- Write report files atomically.

Non-functional requirements
- Standard library only and cross-platform behavior where feasible.
"""

from __future__ import annotations

import contextlib
import os
import tempfile
from pathlib import Path

PathLike = str | os.PathLike[str]

__all__ = [
    "DirectoryCreationError",
    "atomic_write",
    "create_directory_recursively",
    "is_writable",
]


class DirectoryCreationError(OSError):
    """Raised when a directory (or one of its parents) cannot be created."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"unable to create directory {path!s}: {reason}")


def create_directory_recursively(path: PathLike) -> None:
    """Create ``path`` and any missing parents; existing directories are fine."""

    target = Path(path)
    try:
        target.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise DirectoryCreationError(target, exc.strerror or str(exc)) from exc
    if not target.is_dir():
        raise DirectoryCreationError(target, "path exists but is not a directory")


def is_writable(path: PathLike) -> bool:
    """Return ``True`` when the current process may write to ``path``."""

    return os.access(Path(path), os.W_OK)


def atomic_write(path: PathLike, data: bytes | str, *, encoding: str = "utf-8") -> None:
    """
    Atomically write ``data`` to ``path``.

    The write strategy is:
    1. create temp file in the same directory,
    2. write + flush + fsync file data,
    3. replace target via ``os.replace``.
    """

    target = Path(path)
    target_parent = target.parent.resolve(strict=True)
    if not target_parent.is_dir():
        raise NotADirectoryError(f"{target_parent!s} is not a directory")

    fd, temp_name = tempfile.mkstemp(
        prefix=f".{target.name}.",
        suffix=".tmp",
        dir=str(target_parent),
    )
    temp_path = Path(temp_name)

    try:
        payload = data if isinstance(data, bytes) else data.encode(encoding)
        with os.fdopen(fd, "wb") as file_handle:
            file_handle.write(payload)
            file_handle.flush()
            os.fsync(file_handle.fileno())
        os.replace(temp_path, target)
    except Exception:
        with contextlib.suppress(OSError):
            temp_path.unlink(missing_ok=True)
        raise
