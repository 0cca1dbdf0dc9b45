"""Interpreter and runtime requirement checks."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import structlog
from packaging.version import InvalidVersion, Version

from envgate.constants import (
    MINIMUM_PYTHON_VERSION,
    MINIMUM_WINDOWS_MAJOR_VERSION,
    MULTIBYTE_MODULE,
)
from envgate.preflight.catalogs import REQUIRED_CALLABLES, REQUIRED_MODULES, RequirementEntry
from envgate.preflight.errors import ErrorCode, ValidationError
from envgate.preflight.memory import MemoryLimitChecker, MemoryOutcome
from envgate.preflight.runtime import RuntimeProbe, SystemRuntimeProbe


class EnvironmentChecker:
    """Run the interpreter-level checks in a fixed order, stopping at the first failure."""

    def __init__(
        self,
        *,
        runtime_probe: RuntimeProbe | None = None,
        memory_checker: MemoryLimitChecker | None = None,
        minimum_python_version: str = MINIMUM_PYTHON_VERSION,
        required_modules: Sequence[RequirementEntry] = REQUIRED_MODULES,
        required_callables: Sequence[RequirementEntry] = REQUIRED_CALLABLES,
        logger: Any | None = None,
    ) -> None:
        self._probe = runtime_probe if runtime_probe is not None else SystemRuntimeProbe()
        self._memory_checker = (
            memory_checker
            if memory_checker is not None
            else MemoryLimitChecker(runtime_probe=self._probe)
        )
        self._minimum_python_version = minimum_python_version
        self._required_modules = tuple(required_modules)
        self._required_callables = tuple(required_callables)
        self._logger = logger if logger is not None else structlog.get_logger(__name__)

    def ensure_required_environment(self) -> ValidationError | None:
        """Check the Python version and other parameters of the environment.

        This docstring doubles as the reflection probe: if it cannot be read
        back at runtime, docstrings are being stripped.
        """

        actual_version = self._probe.python_version()
        if _older_than(actual_version, self._minimum_python_version):
            return ValidationError(
                "The application requires Python version %s or higher "
                "but your installed version is currently %s.",
                ErrorCode.VERSION_MISMATCH,
                (self._minimum_python_version, actual_version),
            )

        if not self._probe.module_available(MULTIBYTE_MODULE):
            return ValidationError(
                f'The application requires the Python module "{MULTIBYTE_MODULE}" '
                "to be available for multibyte string handling.",
                ErrorCode.MULTIBYTE_MISSING,
            )

        if (
            not self._probe.uses_posix_separator()
            and self._probe.windows_major_version() < MINIMUM_WINDOWS_MAJOR_VERSION
        ):
            return ValidationError(
                "The application does not support Windows versions older than Windows Vista "
                "or Windows Server 2008, because they lack proper support for symbolic links.",
                ErrorCode.PLATFORM_UNSUPPORTED,
            )

        for entry in self._required_modules:
            if not self._probe.module_available(entry.name):
                return ValidationError(
                    'The application requires the Python module "%s" to be available.',
                    entry.code,
                    (entry.name,),
                )

        for entry in self._required_callables:
            if not self._probe.callable_available(entry.name):
                return ValidationError(
                    'The application requires the Python function "%s" to be available.',
                    entry.code,
                    (entry.name,),
                )

        if not self._probe.docstring_of(EnvironmentChecker.ensure_required_environment):
            return ValidationError(
                "Reflection of docstrings is not supported by your Python setup. "
                "Please check that the interpreter does not run with -OO or "
                "PYTHONOPTIMIZE=2, which removes docstrings.",
                ErrorCode.REFLECTION_UNSUPPORTED,
            )

        self._probe.disable_time_limit()

        if self._probe.interactive_session_autostart():
            return ValidationError(
                'The application requires the interpreter setting "PYTHONINSPECT" '
                "(option -i) set to off.",
                ErrorCode.SESSION_AUTO_START,
            )

        memory = self._memory_checker.check_memory_limit()
        if memory.outcome is MemoryOutcome.INSUFFICIENT:
            return ValidationError(memory.message or "Insufficient memory limit.")
        if memory.outcome is MemoryOutcome.UNVERIFIABLE:
            self._logger.warning("memory_limit_unverifiable", reason=memory.message)

        return None


def _older_than(actual: str, minimum: str) -> bool:
    # Development builds report a bare "+" suffix, e.g. "3.13.0a1+".
    try:
        return Version(actual.split("+")[0]) < Version(minimum)
    except InvalidVersion:
        return True


__all__ = ["EnvironmentChecker"]
