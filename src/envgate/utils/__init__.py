"""Utility exports for byte-size parsing and filesystem helpers."""

from envgate.utils.byte_size import parse_byte_size
from envgate.utils.fs import (
    DirectoryCreationError,
    atomic_write,
    create_directory_recursively,
    is_writable,
)

__all__ = [
    "DirectoryCreationError",
    "atomic_write",
    "create_directory_recursively",
    "is_writable",
    "parse_byte_size",
]
