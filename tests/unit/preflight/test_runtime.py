from __future__ import annotations

import os
import platform
import sys

import pytest

from envgate.preflight.runtime import (
    UNLIMITED_MEMORY_TEXT,
    SystemRuntimeProbe,
    current_memory_limit_text,
)


def _documented() -> None:
    """Present."""


@pytest.mark.unit
def test_system_probe_reports_interpreter_facts() -> None:
    probe = SystemRuntimeProbe()

    assert probe.python_version() == platform.python_version()
    assert probe.uses_posix_separator() is (os.sep == "/")
    if not hasattr(sys, "getwindowsversion"):
        assert probe.windows_major_version() == 0


@pytest.mark.unit
def test_system_probe_module_and_callable_lookup() -> None:
    probe = SystemRuntimeProbe()

    assert probe.module_available("json") is True
    assert probe.module_available("envgate_no_such_module_xyz") is False
    assert probe.callable_available("os.path.join") is True
    assert probe.callable_available("os.no_such_function_xyz") is False
    assert probe.callable_available("envgate_no_such_module_xyz.run") is False
    assert probe.callable_available("os") is False
    assert probe.callable_available("os.sep") is False


@pytest.mark.unit
def test_system_probe_reads_docstrings() -> None:
    if sys.flags.optimize >= 2:
        pytest.skip("docstrings are stripped in this interpreter")

    assert SystemRuntimeProbe().docstring_of(_documented) == "Present."


@pytest.mark.unit
def test_interactive_autostart_follows_pythoninspect(monkeypatch: pytest.MonkeyPatch) -> None:
    probe = SystemRuntimeProbe()

    monkeypatch.setenv("PYTHONINSPECT", "1")
    assert probe.interactive_session_autostart() is True

    monkeypatch.delenv("PYTHONINSPECT")
    assert probe.interactive_session_autostart() is bool(sys.flags.inspect)


@pytest.mark.unit
@pytest.mark.skipif(sys.platform == "win32", reason="RLIMIT_AS is POSIX only")
def test_current_memory_limit_text_is_unlimited_or_numeric() -> None:
    text = current_memory_limit_text()

    assert text == UNLIMITED_MEMORY_TEXT or text.isdigit()
    assert SystemRuntimeProbe().service_memory_limit() == text
