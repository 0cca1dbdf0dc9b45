"""Stable constants shared across the preflight checks and the config layer."""

from __future__ import annotations

from typing import Final

# Schema version for persisted config.
CONFIG_SCHEMA_VERSION: Final[int] = 1

# Interpreter requirements.
MINIMUM_PYTHON_VERSION: Final[str] = "3.11"
MINIMUM_WINDOWS_MAJOR_VERSION: Final[int] = 6
MULTIBYTE_MODULE: Final[str] = "unicodedata"

# Memory thresholds, in the notation accepted by the byte-size parser.
MINIMUM_MEMORY_LIMIT: Final[str] = "128M"
RECOMMENDED_MEMORY_LIMIT: Final[str] = "256M"
MEMORY_PROBE_TIMEOUT_SECONDS: Final[float] = 10.0

# Error titles applied by ``BasicRequirements.find_error``.
ENVIRONMENT_ERROR_TITLE: Final[str] = "Environment requirements not fulfilled"
FILE_PERMISSIONS_ERROR_TITLE: Final[str] = "Error with file system permissions"

# Remediation hint appended to file permission errors.
FILE_PERMISSIONS_HINT: Final[str] = (
    "Check your file permissions (the application user needs write access)."
)

__all__ = [
    "CONFIG_SCHEMA_VERSION",
    "ENVIRONMENT_ERROR_TITLE",
    "FILE_PERMISSIONS_ERROR_TITLE",
    "FILE_PERMISSIONS_HINT",
    "MEMORY_PROBE_TIMEOUT_SECONDS",
    "MINIMUM_MEMORY_LIMIT",
    "MINIMUM_PYTHON_VERSION",
    "MINIMUM_WINDOWS_MAJOR_VERSION",
    "MULTIBYTE_MODULE",
    "RECOMMENDED_MEMORY_LIMIT",
]
