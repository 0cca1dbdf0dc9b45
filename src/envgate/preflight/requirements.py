"""Entry point that runs the environment and file permission checks in order."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

import structlog

from envgate.config.schema import default_config, merge_config
from envgate.constants import (
    ENVIRONMENT_ERROR_TITLE,
    FILE_PERMISSIONS_ERROR_TITLE,
    MEMORY_PROBE_TIMEOUT_SECONDS,
    MINIMUM_MEMORY_LIMIT,
    RECOMMENDED_MEMORY_LIMIT,
)
from envgate.preflight.environment import EnvironmentChecker
from envgate.preflight.errors import ValidationError
from envgate.preflight.memory import CommandRunner, MemoryLimitChecker
from envgate.preflight.permissions import FilePermissionChecker
from envgate.preflight.runtime import RuntimeProbe, SystemRuntimeProbe

_LIBRARY_LOGGER_NAME = "envgate"


class BasicRequirements:
    """Check the basic requirements and report the first one that is missing.

    ``find_error`` returns ``None`` when everything is fulfilled. Environment
    failures suppress the file permission checks entirely.
    """

    def __init__(
        self,
        *,
        environment_checker: EnvironmentChecker,
        permission_checker: FilePermissionChecker,
        logger: Any | None = None,
    ) -> None:
        self._environment_checker = environment_checker
        self._permission_checker = permission_checker
        self._logger = logger if logger is not None else structlog.get_logger(__name__)

    @classmethod
    def from_config(
        cls,
        config: Mapping[str, Any],
        *,
        runtime_probe: RuntimeProbe | None = None,
        command_runner: CommandRunner | None = None,
        logger: Any | None = None,
    ) -> BasicRequirements:
        """Wire the checkers from an effective config mapping.

        ``logger`` is shared by every checker; ``None`` uses ``structlog.get_logger``.
        """

        probe = runtime_probe if runtime_probe is not None else SystemRuntimeProbe()
        paths = _section(config, "paths")
        memory = _section(config, "memory")

        cli_command = memory.get("cli_command")
        memory_checker = MemoryLimitChecker(
            runtime_probe=probe,
            command_runner=command_runner,
            minimum=str(memory.get("minimum", MINIMUM_MEMORY_LIMIT)),
            recommended=str(memory.get("recommended", RECOMMENDED_MEMORY_LIMIT)),
            service_limit=_optional_text(memory.get("service_limit")),
            cli_command=_command(cli_command),
            timeout_seconds=float(
                memory.get("probe_timeout_seconds", MEMORY_PROBE_TIMEOUT_SECONDS)
            ),
            logger=logger,
        )
        return cls(
            environment_checker=EnvironmentChecker(
                runtime_probe=probe,
                memory_checker=memory_checker,
                logger=logger,
            ),
            permission_checker=FilePermissionChecker(
                Path(str(paths.get("app_root", "."))), logger=logger
            ),
            logger=logger,
        )

    def find_error(self) -> ValidationError | None:
        """Ensure that the environment and file permission requirements are fulfilled."""

        environment_error = self._environment_checker.ensure_required_environment()
        if environment_error is not None:
            return self._report(environment_error.with_title(ENVIRONMENT_ERROR_TITLE))

        permissions_error = self._permission_checker.check_file_permissions()
        if permissions_error is not None:
            return self._report(permissions_error.with_title(FILE_PERMISSIONS_ERROR_TITLE))

        self._logger.info("requirements_fulfilled")
        return None

    def _report(self, error: ValidationError) -> ValidationError:
        self._logger.warning(
            "requirements_not_fulfilled",
            title=error.title,
            code=None if error.code is None else int(error.code),
            detail=error.render(),
        )
        return error


def find_error(
    config: Mapping[str, Any] | None = None,
    *,
    app_root: Path | str | None = None,
) -> ValidationError | None:
    """Run the preflight checks against the running interpreter.

    ``config`` defaults to the built-in defaults; ``app_root`` overrides
    ``paths.app_root``. When the host has not configured structlog, events are
    sent to the stdlib ``envgate`` logger and follow the host's logging setup.
    """

    effective = merge_config(default_config(), config or {})
    if app_root is not None:
        effective = merge_config(effective, {"paths": {"app_root": str(app_root)}})
    return BasicRequirements.from_config(effective, logger=_host_logger()).find_error()


def _host_logger() -> Any | None:
    if structlog.is_configured():
        return None
    return structlog.wrap_logger(
        logging.getLogger(_LIBRARY_LOGGER_NAME),
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.stdlib.render_to_log_kwargs,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
    )


def _section(config: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = config.get(key)
    if isinstance(value, Mapping):
        return value
    return {}


def _optional_text(value: object) -> str | None:
    if not isinstance(value, str):
        return None
    stripped = value.strip()
    return stripped or None


def _command(value: object) -> tuple[str, ...] | None:
    if isinstance(value, str) or not isinstance(value, Sequence):
        return None
    parts = tuple(str(item) for item in value)
    return parts or None


__all__ = ["BasicRequirements", "find_error"]
