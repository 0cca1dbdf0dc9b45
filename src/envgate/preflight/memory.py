"""Memory ceiling checks for the service process and CLI invocations."""

from __future__ import annotations

import subprocess
import sys
from collections.abc import Sequence
from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Final, Protocol

import structlog

from envgate.constants import (
    MEMORY_PROBE_TIMEOUT_SECONDS,
    MINIMUM_MEMORY_LIMIT,
    RECOMMENDED_MEMORY_LIMIT,
)
from envgate.preflight.runtime import UNLIMITED_MEMORY_TEXT, RuntimeProbe, SystemRuntimeProbe
from envgate.utils.byte_size import parse_byte_size

# Printed by a fresh interpreter: its own soft address-space limit.
CLI_PROBE_SNIPPET: Final[str] = (
    "import resource; "
    "soft = resource.getrlimit(resource.RLIMIT_AS)[0]; "
    "print(-1 if soft == resource.RLIM_INFINITY else soft)"
)

_RAISE_HINT: Final[str] = (
    "Raise the memory limit to at least {minimum}. More than {recommended} would be even better."
)


class MemoryProbeError(RuntimeError):
    """Raised when the CLI memory ceiling cannot be queried at all."""


@dataclass(frozen=True, slots=True)
class CommandExecutionResult:
    """Normalized subprocess result for the CLI memory probe."""

    command: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str


class CommandRunner(Protocol):
    """Injectable command runner used for deterministic testing."""

    def run(
        self,
        command: Sequence[str],
        *,
        timeout_seconds: float,
    ) -> CommandExecutionResult: ...


class SubprocessCommandRunner:
    """Default command runner backed by ``subprocess.run``."""

    def run(
        self,
        command: Sequence[str],
        *,
        timeout_seconds: float,
    ) -> CommandExecutionResult:
        try:
            completed = subprocess.run(
                list(command),
                check=False,
                capture_output=True,
                text=True,
                timeout=timeout_seconds,
            )
        except subprocess.TimeoutExpired as exc:
            raise MemoryProbeError(
                f"command timed out after {timeout_seconds} seconds: {' '.join(command)}"
            ) from exc
        except OSError as exc:
            raise MemoryProbeError(f"unable to run {' '.join(command)}: {exc}") from exc

        return CommandExecutionResult(
            command=tuple(command),
            returncode=completed.returncode,
            stdout=completed.stdout,
            stderr=completed.stderr,
        )


@dataclass(frozen=True, slots=True)
class MemoryLimit:
    """A configured memory ceiling; ``byte_count is None`` means unlimited."""

    raw: str
    byte_count: int | None

    @classmethod
    def parse(cls, raw: str) -> MemoryLimit:
        normalized = raw.strip()
        if not normalized or normalized == UNLIMITED_MEMORY_TEXT:
            return cls(raw=normalized, byte_count=None)
        return cls(raw=normalized, byte_count=parse_byte_size(normalized))

    @property
    def is_unlimited(self) -> bool:
        return self.byte_count is None

    def satisfies(self, minimum_bytes: int) -> bool:
        if self.byte_count is None:
            return True
        return self.byte_count >= minimum_bytes

    def __str__(self) -> str:
        return "unlimited" if self.byte_count is None else self.raw


class MemoryOutcome(StrEnum):
    SUFFICIENT = "sufficient"
    UNVERIFIABLE = "unverifiable"
    INSUFFICIENT = "insufficient"


@dataclass(frozen=True, slots=True)
class MemoryCheckResult:
    """Outcome of one memory check; ``message`` explains anything but success."""

    outcome: MemoryOutcome
    message: str | None = None

    @classmethod
    def sufficient(cls) -> MemoryCheckResult:
        return cls(MemoryOutcome.SUFFICIENT)

    @classmethod
    def unverifiable(cls, reason: str) -> MemoryCheckResult:
        return cls(MemoryOutcome.UNVERIFIABLE, reason)

    @classmethod
    def insufficient(cls, message: str) -> MemoryCheckResult:
        return cls(MemoryOutcome.INSUFFICIENT, message)


class MemoryLimitChecker:
    """Compare the service and CLI memory ceilings against the minimum.

    The two ceilings are configured independently, so a service that passes
    can still ship CLI commands that run out of memory, and vice versa.
    """

    def __init__(
        self,
        *,
        runtime_probe: RuntimeProbe | None = None,
        command_runner: CommandRunner | None = None,
        minimum: str = MINIMUM_MEMORY_LIMIT,
        recommended: str = RECOMMENDED_MEMORY_LIMIT,
        service_limit: str | None = None,
        cli_command: Sequence[str] | None = None,
        timeout_seconds: float = MEMORY_PROBE_TIMEOUT_SECONDS,
        logger: Any | None = None,
    ) -> None:
        if timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be > 0")
        self._runtime_probe = runtime_probe if runtime_probe is not None else SystemRuntimeProbe()
        self._command_runner = (
            command_runner if command_runner is not None else SubprocessCommandRunner()
        )
        self._minimum = minimum.strip()
        self._recommended = recommended.strip()
        self._minimum_bytes = parse_byte_size(self._minimum)
        self._service_limit = service_limit.strip() if service_limit else None
        self._cli_command = (
            tuple(cli_command) if cli_command else (sys.executable, "-c", CLI_PROBE_SNIPPET)
        )
        self._timeout_seconds = timeout_seconds
        self._logger = logger if logger is not None else structlog.get_logger(__name__)

    def read_service_limit(self) -> MemoryLimit:
        """Return the ceiling of the long-running service process."""

        if self._service_limit is not None:
            return MemoryLimit.parse(self._service_limit)
        return MemoryLimit.parse(self._runtime_probe.service_memory_limit())

    def read_cli_limit(self) -> MemoryLimit | None:
        """Return the ceiling reported by a CLI invocation, ``None`` when unknown.

        Raises ``MemoryProbeError`` when the command cannot be run at all.
        """

        result = self._command_runner.run(self._cli_command, timeout_seconds=self._timeout_seconds)
        if result.returncode != 0:
            self._logger.info(
                "memory_cli_probe_failed",
                command=list(result.command),
                returncode=result.returncode,
                stderr=result.stderr.strip()[:512],
            )
            return None
        lines = [line.strip() for line in result.stdout.splitlines() if line.strip()]
        if not lines:
            return None
        return MemoryLimit.parse(lines[0])

    def check_memory_limit(self) -> MemoryCheckResult:
        try:
            result = self._evaluate()
        except MemoryProbeError as exc:
            result = MemoryCheckResult.unverifiable(str(exc))
        except Exception as exc:  # noqa: BLE001
            result = MemoryCheckResult.unverifiable(f"{type(exc).__name__}: {exc}")
        self._logger.info(
            "memory_limit_checked",
            outcome=result.outcome.value,
            detail=result.message,
        )
        return result

    def _evaluate(self) -> MemoryCheckResult:
        service = self.read_service_limit()
        cli = self.read_cli_limit()

        if cli is None or service.byte_count == cli.byte_count:
            if service.satisfies(self._minimum_bytes):
                return MemoryCheckResult.sufficient()
            return MemoryCheckResult.insufficient(
                f"You have too little memory! With {service} you will encounter problems. "
                + self._raise_hint()
            )

        service_ok = service.satisfies(self._minimum_bytes)
        cli_ok = cli.satisfies(self._minimum_bytes)
        if service_ok and cli_ok:
            return MemoryCheckResult.sufficient()
        if not service_ok and not cli_ok:
            return MemoryCheckResult.insufficient(
                "You have too little memory for your service process and CLI! "
                f"With {service} (service) and {cli} (CLI) you will encounter problems. "
                + self._raise_hint()
            )
        if not service_ok:
            return MemoryCheckResult.insufficient(
                "You have too little memory for your service process! "
                f"With {service} you will encounter problems. " + self._raise_hint()
            )
        return MemoryCheckResult.insufficient(
            "You have too little memory for your CLI! "
            f"With {cli} you will encounter problems. " + self._raise_hint()
        )

    def _raise_hint(self) -> str:
        return _RAISE_HINT.format(minimum=self._minimum, recommended=self._recommended)


__all__ = [
    "CLI_PROBE_SNIPPET",
    "CommandExecutionResult",
    "CommandRunner",
    "MemoryCheckResult",
    "MemoryLimit",
    "MemoryLimitChecker",
    "MemoryOutcome",
    "MemoryProbeError",
    "SubprocessCommandRunner",
]
