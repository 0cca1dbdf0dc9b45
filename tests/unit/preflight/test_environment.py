"""
envgate — unit tests for the interpreter environment checks

Purpose
- Validate the fixed evaluation order and the first-failure-wins contract
  against a simulated interpreter.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field

import pytest

from envgate.preflight.catalogs import REQUIRED_CALLABLES, REQUIRED_MODULES
from envgate.preflight.environment import EnvironmentChecker
from envgate.preflight.errors import ErrorCode
from envgate.preflight.memory import MemoryCheckResult


@dataclass
class _FakeProbe:
    version: str = "3.12.4"
    posix: bool = True
    windows_major: int = 0
    missing_modules: set[str] = field(default_factory=set)
    missing_callables: set[str] = field(default_factory=set)
    docstrings: bool = True
    autostart: bool = False
    time_limit_disabled: int = 0

    def python_version(self) -> str:
        return self.version

    def uses_posix_separator(self) -> bool:
        return self.posix

    def windows_major_version(self) -> int:
        return self.windows_major

    def module_available(self, name: str) -> bool:
        return name not in self.missing_modules

    def callable_available(self, dotted_path: str) -> bool:
        return dotted_path not in self.missing_callables

    def docstring_of(self, target: Callable[..., object]) -> str | None:
        return target.__doc__ if self.docstrings else None

    def disable_time_limit(self) -> None:
        self.time_limit_disabled += 1

    def interactive_session_autostart(self) -> bool:
        return self.autostart

    def service_memory_limit(self) -> str:
        return "-1"


@dataclass
class _StubMemoryChecker:
    result: MemoryCheckResult = field(default_factory=MemoryCheckResult.sufficient)
    calls: int = 0

    def check_memory_limit(self) -> MemoryCheckResult:
        self.calls += 1
        return self.result


@dataclass
class _RecordingLogger:
    events: list[tuple[str, str, dict[str, object]]] = field(default_factory=list)

    def info(self, event: str, **kwargs: object) -> None:
        self.events.append(("info", event, kwargs))

    def warning(self, event: str, **kwargs: object) -> None:
        self.events.append(("warning", event, kwargs))


def _checker(
    probe: _FakeProbe,
    memory: _StubMemoryChecker | None = None,
    logger: _RecordingLogger | None = None,
) -> EnvironmentChecker:
    return EnvironmentChecker(
        runtime_probe=probe,
        memory_checker=memory if memory is not None else _StubMemoryChecker(),  # type: ignore[arg-type]
        logger=logger if logger is not None else _RecordingLogger(),
    )


@pytest.mark.unit
def test_fulfilled_environment_returns_none_and_disables_time_limit() -> None:
    probe = _FakeProbe()
    memory = _StubMemoryChecker()

    assert _checker(probe, memory).ensure_required_environment() is None
    assert probe.time_limit_disabled == 1
    assert memory.calls == 1


@pytest.mark.unit
def test_old_python_version_is_reported_with_both_versions() -> None:
    error = _checker(_FakeProbe(version="3.10.4")).ensure_required_environment()

    assert error is not None
    assert error.code == ErrorCode.VERSION_MISMATCH
    assert error.arguments == ("3.11", "3.10.4")
    assert "3.11" in error.render()
    assert "3.10.4" in error.render()


@pytest.mark.unit
@pytest.mark.parametrize("version", ["3.11.0", "3.12.0+", "3.13.1", "4.0"])
def test_supported_versions_pass(version: str) -> None:
    assert _checker(_FakeProbe(version=version)).ensure_required_environment() is None


@pytest.mark.unit
@pytest.mark.parametrize("version", ["3.11.0rc1", "3.11.0a7", "not-a-version"])
def test_prereleases_of_the_minimum_and_unparseable_versions_fail(version: str) -> None:
    error = _checker(_FakeProbe(version=version)).ensure_required_environment()

    assert error is not None
    assert error.code == ErrorCode.VERSION_MISMATCH
    assert error.arguments == ("3.11", version)


@pytest.mark.unit
def test_version_failure_wins_over_every_later_check() -> None:
    probe = _FakeProbe(
        version="2.7.18",
        missing_modules={"unicodedata", "json"},
        missing_callables={"os.system"},
        docstrings=False,
        autostart=True,
    )
    memory = _StubMemoryChecker(MemoryCheckResult.insufficient("too little"))

    error = _checker(probe, memory).ensure_required_environment()

    assert error is not None
    assert error.code == ErrorCode.VERSION_MISMATCH
    assert probe.time_limit_disabled == 0
    assert memory.calls == 0


@pytest.mark.unit
def test_missing_multibyte_module_is_reported() -> None:
    error = _checker(_FakeProbe(missing_modules={"unicodedata"})).ensure_required_environment()

    assert error is not None
    assert error.code == ErrorCode.MULTIBYTE_MISSING


@pytest.mark.unit
def test_old_windows_is_unsupported() -> None:
    error = _checker(_FakeProbe(posix=False, windows_major=5)).ensure_required_environment()

    assert error is not None
    assert error.code == ErrorCode.PLATFORM_UNSUPPORTED


@pytest.mark.unit
def test_supported_windows_passes() -> None:
    assert _checker(_FakeProbe(posix=False, windows_major=10)).ensure_required_environment() is None


@pytest.mark.unit
def test_first_missing_module_in_catalog_order_is_reported() -> None:
    error = _checker(_FakeProbe(missing_modules={"ssl", "json"})).ensure_required_environment()

    assert error is not None
    assert error.code == 1329403181
    assert error.arguments == ("json",)
    assert error.render() == 'The application requires the Python module "json" to be available.'


@pytest.mark.unit
def test_missing_module_suppresses_callable_checks() -> None:
    probe = _FakeProbe(missing_modules={"hashlib"}, missing_callables={"os.system"})

    error = _checker(probe).ensure_required_environment()

    assert error is not None
    assert error.code == 1329403198


@pytest.mark.unit
def test_missing_callable_is_reported() -> None:
    error = _checker(_FakeProbe(missing_callables={"shlex.quote"})).ensure_required_environment()

    assert error is not None
    assert error.code == 1330707177
    assert error.render() == (
        'The application requires the Python function "shlex.quote" to be available.'
    )


@pytest.mark.unit
def test_stripped_docstrings_are_reported_before_time_limit_is_touched() -> None:
    probe = _FakeProbe(docstrings=False)

    error = _checker(probe).ensure_required_environment()

    assert error is not None
    assert error.code == ErrorCode.REFLECTION_UNSUPPORTED
    assert probe.time_limit_disabled == 0


@pytest.mark.unit
def test_interactive_autostart_is_reported_after_time_limit_is_disabled() -> None:
    probe = _FakeProbe(autostart=True)
    memory = _StubMemoryChecker()

    error = _checker(probe, memory).ensure_required_environment()

    assert error is not None
    assert error.code == ErrorCode.SESSION_AUTO_START
    assert probe.time_limit_disabled == 1
    assert memory.calls == 0


@pytest.mark.unit
def test_insufficient_memory_has_no_code() -> None:
    memory = _StubMemoryChecker(MemoryCheckResult.insufficient("You have too little memory!"))

    error = _checker(_FakeProbe(), memory).ensure_required_environment()

    assert error is not None
    assert error.code is None
    assert error.render() == "You have too little memory!"


@pytest.mark.unit
def test_unverifiable_memory_is_logged_but_not_reported() -> None:
    logger = _RecordingLogger()
    memory = _StubMemoryChecker(MemoryCheckResult.unverifiable("timed out"))

    error = _checker(_FakeProbe(), memory, logger).ensure_required_environment()

    assert error is None
    assert logger.events == [("warning", "memory_limit_unverifiable", {"reason": "timed out"})]


@pytest.mark.unit
def test_catalog_ids_are_unique_and_ordered() -> None:
    codes = [entry.code for entry in (*REQUIRED_MODULES, *REQUIRED_CALLABLES)]

    assert len(codes) == len(set(codes))
    assert codes == sorted(codes)
