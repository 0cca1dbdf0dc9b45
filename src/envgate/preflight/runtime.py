"""Process-boundary probes consulted by the environment checks.

Everything the checkers learn about the interpreter goes through
:class:`RuntimeProbe`, so tests can swap in a simulated environment.
"""

from __future__ import annotations

import importlib
import inspect
import os
import platform
import signal
import sys
from collections.abc import Callable
from typing import Protocol

try:  # pragma: no cover - resource limits are POSIX only.
    import resource as _resource
except ModuleNotFoundError:  # pragma: no cover - exercised on Windows.
    _resource = None

UNLIMITED_MEMORY_TEXT = "-1"


class RuntimeProbe(Protocol):
    """Read (and, for the time limit, write) interpreter-level settings."""

    def python_version(self) -> str: ...

    def uses_posix_separator(self) -> bool: ...

    def windows_major_version(self) -> int: ...

    def module_available(self, name: str) -> bool: ...

    def callable_available(self, dotted_path: str) -> bool: ...

    def docstring_of(self, target: Callable[..., object]) -> str | None: ...

    def disable_time_limit(self) -> None: ...

    def interactive_session_autostart(self) -> bool: ...

    def service_memory_limit(self) -> str: ...


class SystemRuntimeProbe:
    """Probe the running interpreter."""

    def python_version(self) -> str:
        return platform.python_version()

    def uses_posix_separator(self) -> bool:
        return os.sep == "/"

    def windows_major_version(self) -> int:
        getter = getattr(sys, "getwindowsversion", None)
        if getter is None:
            return 0
        return int(getter().major)

    def module_available(self, name: str) -> bool:
        try:
            importlib.import_module(name)
        except ImportError:
            return False
        return True

    def callable_available(self, dotted_path: str) -> bool:
        module_name, _, attribute = dotted_path.rpartition(".")
        if not module_name or not attribute:
            return False
        try:
            module = importlib.import_module(module_name)
        except ImportError:
            return False
        return callable(getattr(module, attribute, None))

    def docstring_of(self, target: Callable[..., object]) -> str | None:
        return inspect.getdoc(target)

    def disable_time_limit(self) -> None:
        if hasattr(signal, "alarm"):
            signal.alarm(0)
        if _resource is None or not hasattr(_resource, "RLIMIT_CPU"):
            return
        try:
            _soft, hard = _resource.getrlimit(_resource.RLIMIT_CPU)
            _resource.setrlimit(_resource.RLIMIT_CPU, (hard, hard))
        except (OSError, ValueError):
            return

    def interactive_session_autostart(self) -> bool:
        if sys.flags.inspect:
            return True
        return bool(os.environ.get("PYTHONINSPECT", "").strip())

    def service_memory_limit(self) -> str:
        return current_memory_limit_text()


def current_memory_limit_text() -> str:
    """Return this process's soft address-space limit as text.

    ``"-1"`` means unlimited; ``""`` means the platform has no such limit.
    """

    if _resource is None or not hasattr(_resource, "RLIMIT_AS"):
        return ""
    soft, _hard = _resource.getrlimit(_resource.RLIMIT_AS)
    if soft == _resource.RLIM_INFINITY:
        return UNLIMITED_MEMORY_TEXT
    return str(soft)


__all__ = [
    "UNLIMITED_MEMORY_TEXT",
    "RuntimeProbe",
    "SystemRuntimeProbe",
    "current_memory_limit_text",
]
