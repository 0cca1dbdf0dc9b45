"""Process entrypoint for ``envgate``: runs the CLI and maps outcomes to exit codes."""

from __future__ import annotations

import sys
import traceback
from enum import IntEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence


class ExitCode(IntEnum):
    """Exit statuses reported by the ``envgate`` command."""

    SUCCESS = 0
    REQUIREMENTS_UNMET = 1
    CONFIG_ERROR = 2
    INTERNAL_ERROR = 4


_KNOWN_CODES = frozenset(int(code) for code in ExitCode)


def cli_entrypoint(argv: Sequence[str] | None = None) -> int:
    """Run the CLI; never raises, always returns an ``ExitCode`` value."""

    try:
        from envgate.ui.cli import run_cli

        return _as_exit_code(run_cli(argv))
    except SystemExit as exc:
        return _as_exit_code(exc.code)
    except BaseException as exc:  # noqa: BLE001
        exit_code = _classify(exc)
        _report_failure(exc, exit_code)
        return int(exit_code)


def _as_exit_code(value: object) -> int:
    if value is None:
        return int(ExitCode.SUCCESS)
    if isinstance(value, int) and value in _KNOWN_CODES:
        return value
    if isinstance(value, str) and value.strip():
        _stderr_line(value.strip())
    return int(ExitCode.INTERNAL_ERROR)


def _classify(exc: BaseException) -> ExitCode:
    from envgate.config.loader import ConfigLoadError
    from envgate.config.schema import ConfigValidationError

    user_errors = (
        ConfigLoadError,
        ConfigValidationError,
        FileNotFoundError,
        NotADirectoryError,
        PermissionError,
        ValueError,
    )
    if any(isinstance(item, user_errors) for item in _causes(exc)):
        return ExitCode.CONFIG_ERROR
    return ExitCode.INTERNAL_ERROR


def _causes(exc: BaseException) -> Iterator[BaseException]:
    """Yield ``exc`` followed by its explicit or implicit causes, once each."""

    visited: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in visited:
        visited.add(id(current))
        yield current
        if current.__cause__ is not None:
            current = current.__cause__
        elif not current.__suppress_context__:
            current = current.__context__
        else:
            current = None


def _report_failure(exc: BaseException, exit_code: ExitCode) -> None:
    if exit_code is ExitCode.INTERNAL_ERROR:
        traceback.print_exception(type(exc), exc, exc.__traceback__, file=sys.stderr)
    else:
        _stderr_line(str(exc).strip() or type(exc).__name__)


def _stderr_line(text: str) -> None:
    sys.stderr.write(text.rstrip("\n") + "\n")


__all__ = ["ExitCode", "cli_entrypoint"]
