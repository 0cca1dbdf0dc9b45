"""Writable directory checks below the application root."""

from __future__ import annotations

import os
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any

import structlog

from envgate.constants import FILE_PERMISSIONS_HINT
from envgate.preflight.catalogs import REQUIRED_WRITABLE_DIRECTORIES
from envgate.preflight.errors import ErrorCode, ValidationError
from envgate.utils.fs import create_directory_recursively, is_writable

DirectoryCreator = Callable[[Path], None]
WritableProbe = Callable[[Path], bool]


class FilePermissionChecker:
    """Ensure every required directory exists and is writable."""

    def __init__(
        self,
        app_root: Path | str,
        *,
        directories: Sequence[str] = REQUIRED_WRITABLE_DIRECTORIES,
        create_directory: DirectoryCreator = create_directory_recursively,
        writable_probe: WritableProbe = is_writable,
        logger: Any | None = None,
    ) -> None:
        self._app_root = Path(app_root)
        self._directories = tuple(directories)
        self._create_directory = create_directory
        self._writable_probe = writable_probe
        self._logger = logger if logger is not None else structlog.get_logger(__name__)

    def resolve(self, directory: str) -> Path:
        return self._app_root / directory

    def check_file_permissions(self) -> ValidationError | None:
        for directory in self._directories:
            path = self.resolve(directory)
            try:
                # stat fails with EACCES when a parent cannot be searched.
                present = path.is_dir() or path.is_symlink()
                if not present:
                    self._create_directory(path)
            except OSError as exc:
                self._logger.info("directory_create_failed", path=str(path), error=str(exc))
                return _create_failed(path)
            if not present:
                self._logger.info("directory_created", path=str(path))
            if not self._writable_probe(path):
                return ValidationError(
                    f'The folder "%s" is not writable. {FILE_PERMISSIONS_HINT}',
                    ErrorCode.DIRECTORY_NOT_WRITABLE,
                    (os.fspath(path),),
                )
        return None


def _create_failed(path: Path) -> ValidationError:
    return ValidationError(
        f'Unable to create folder "%s". {FILE_PERMISSIONS_HINT}',
        ErrorCode.DIRECTORY_CREATE_FAILED,
        (os.fspath(path),),
    )


__all__ = ["DirectoryCreator", "FilePermissionChecker", "WritableProbe"]
