"""
envgate preflight package public API.

Purpose
- Export the requirement checkers, the error value they produce, and the
  ``find_error`` entry point.

Functional requirements
- Report at most one unmet requirement per run, in a fixed evaluation order.
- Never fix anything; detect and report only.
"""

from envgate.preflight.catalogs import (
    REQUIRED_CALLABLES,
    REQUIRED_MODULES,
    REQUIRED_WRITABLE_DIRECTORIES,
    RequirementEntry,
)
from envgate.preflight.environment import EnvironmentChecker
from envgate.preflight.errors import ErrorCode, ValidationError
from envgate.preflight.memory import (
    CommandExecutionResult,
    CommandRunner,
    MemoryCheckResult,
    MemoryLimit,
    MemoryLimitChecker,
    MemoryOutcome,
    MemoryProbeError,
    SubprocessCommandRunner,
)
from envgate.preflight.permissions import FilePermissionChecker
from envgate.preflight.requirements import BasicRequirements, find_error
from envgate.preflight.runtime import RuntimeProbe, SystemRuntimeProbe
from envgate.utils.byte_size import parse_byte_size

__all__ = [
    "BasicRequirements",
    "CommandExecutionResult",
    "CommandRunner",
    "EnvironmentChecker",
    "ErrorCode",
    "FilePermissionChecker",
    "MemoryCheckResult",
    "MemoryLimit",
    "MemoryLimitChecker",
    "MemoryOutcome",
    "MemoryProbeError",
    "REQUIRED_CALLABLES",
    "REQUIRED_MODULES",
    "REQUIRED_WRITABLE_DIRECTORIES",
    "RequirementEntry",
    "RuntimeProbe",
    "SubprocessCommandRunner",
    "SystemRuntimeProbe",
    "ValidationError",
    "find_error",
    "parse_byte_size",
]
