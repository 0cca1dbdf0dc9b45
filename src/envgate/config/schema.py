"""
envgate — configuration schema and validation.

Defaults for every setting in ``envgate.toml`` live here, together with a
strict validator that reports each problem as a ``ConfigValidationIssue``
(dotted field path plus message) instead of stopping at the first one.

Sections and fields are described by ``_SCHEMA``: each field maps to a
checker that returns the normalized value or ``None`` after recording an
issue. Memory quantities are validated with the same byte-size parser the
preflight checks use, so a value accepted here is guaranteed to parse later.
"""

from __future__ import annotations

import copy
import math
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Final, Literal, TypedDict

from envgate.constants import (
    CONFIG_SCHEMA_VERSION,
    MEMORY_PROBE_TIMEOUT_SECONDS,
    MINIMUM_MEMORY_LIMIT,
    RECOMMENDED_MEMORY_LIMIT,
)
from envgate.utils.byte_size import parse_byte_size

ConfigSchemaVersion: Final[int] = CONFIG_SCHEMA_VERSION

# Resolved against the config file's directory by the loader.
PATH_FIELDS: Final[tuple[tuple[str, str], ...]] = (
    ("paths", "app_root"),
    ("observability", "log_dir"),
)

LOG_LEVELS: Final[tuple[str, ...]] = ("DEBUG", "INFO", "WARNING", "ERROR")


class MetaConfig(TypedDict):
    schema_version: int


class PathsConfig(TypedDict):
    app_root: str


class MemoryConfig(TypedDict):
    minimum: str
    recommended: str
    service_limit: str
    cli_command: list[str]
    probe_timeout_seconds: float


class ObservabilityConfig(TypedDict):
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"]
    log_dir: str
    log_to_stderr: bool


class EnvgateConfig(TypedDict):
    meta: MetaConfig
    paths: PathsConfig
    memory: MemoryConfig
    observability: ObservabilityConfig


DEFAULT_CONFIG: Final[EnvgateConfig] = {
    "meta": {"schema_version": ConfigSchemaVersion},
    "paths": {"app_root": "."},
    "memory": {
        "minimum": MINIMUM_MEMORY_LIMIT,
        "recommended": RECOMMENDED_MEMORY_LIMIT,
        "service_limit": "",
        "cli_command": [],
        "probe_timeout_seconds": MEMORY_PROBE_TIMEOUT_SECONDS,
    },
    "observability": {
        "log_level": "WARNING",
        "log_dir": "",
        "log_to_stderr": True,
    },
}


@dataclass(frozen=True, slots=True)
class ConfigValidationIssue:
    """Single structured validation failure."""

    path: str
    message: str


@dataclass(frozen=True, slots=True)
class ConfigValidationResult:
    """Validation result; ``config`` is the normalized payload when valid."""

    config: dict[str, Any] | None
    issues: tuple[ConfigValidationIssue, ...]

    @property
    def is_valid(self) -> bool:
        return self.config is not None and not self.issues


class ConfigValidationError(ValueError):
    """Raised when strict config validation fails."""

    def __init__(self, issues: Sequence[ConfigValidationIssue]) -> None:
        self.issues = tuple(issues)
        lines = [f"- {item.path}: {item.message}" for item in self.issues]
        super().__init__("invalid config:\n" + ("\n".join(lines) or "unknown validation failure"))


class _IssueCollector:
    __slots__ = ("_items",)

    def __init__(self) -> None:
        self._items: list[ConfigValidationIssue] = []

    def add(self, path: str, message: str) -> None:
        self._items.append(ConfigValidationIssue(path=path, message=message))

    def items(self) -> tuple[ConfigValidationIssue, ...]:
        return tuple(self._items)

    def __bool__(self) -> bool:
        return bool(self._items)


def default_config() -> EnvgateConfig:
    """Return a deep copy of the built-in defaults."""

    return copy.deepcopy(DEFAULT_CONFIG)


def migration_guidance(found_version: int) -> str:
    """Explain how to resolve a ``meta.schema_version`` mismatch."""

    if found_version < ConfigSchemaVersion:
        return (
            f"schema version {found_version} is older than supported {ConfigSchemaVersion}; "
            "upgrade envgate.toml to the current schema"
        )
    if found_version > ConfigSchemaVersion:
        return (
            f"schema version {found_version} is newer than supported {ConfigSchemaVersion}; "
            "upgrade the envgate runtime"
        )
    return "schema version is current"


def merge_config(base: Mapping[str, object], overlay: Mapping[str, object]) -> dict[str, Any]:
    """Deep-merge ``overlay`` onto a copy of ``base``; neither input is modified."""

    merged = copy.deepcopy(dict(base))
    for key in sorted(overlay):
        value = overlay[key]
        current = merged.get(key)
        if isinstance(value, Mapping) and isinstance(current, Mapping):
            merged[key] = merge_config(current, value)
        elif isinstance(value, Mapping):
            merged[key] = merge_config({}, value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def validate_config(config: Mapping[str, object] | object) -> ConfigValidationResult:
    """Validate ``config`` and collect every issue found."""

    issues = _IssueCollector()
    if not isinstance(config, Mapping):
        issues.add("<root>", f"expected object, got {type(config).__name__}")
        return ConfigValidationResult(config=None, issues=issues.items())

    normalized: dict[str, Any] = {}
    _check_keys(config, _SCHEMA, "", issues)
    for section_name, fields in _SCHEMA.items():
        section = config.get(section_name)
        if section is None:
            continue
        if not isinstance(section, Mapping):
            issues.add(section_name, f"expected object, got {type(section).__name__}")
            continue
        normalized[section_name] = _check_section(section, fields, section_name, issues)

    if "memory" in normalized:
        _check_memory_order(normalized["memory"], issues)

    if issues:
        return ConfigValidationResult(config=None, issues=issues.items())
    return ConfigValidationResult(config=normalized, issues=())


def assert_valid_config(config: Mapping[str, object] | object) -> dict[str, Any]:
    """Validate config and raise ``ConfigValidationError`` on failure."""

    result = validate_config(config)
    if result.config is None:
        raise ConfigValidationError(result.issues)
    return result.config


_Checker = Callable[[object, str, _IssueCollector], Any]


def _check_section(
    payload: Mapping[str, object],
    fields: Mapping[str, _Checker],
    path: str,
    issues: _IssueCollector,
) -> dict[str, Any]:
    _check_keys(payload, fields, path, issues)
    out: dict[str, Any] = {}
    for key, checker in fields.items():
        if key in payload:
            value = checker(payload[key], f"{path}.{key}", issues)
            if value is not None:
                out[key] = value
    return out


def _check_keys(
    payload: Mapping[str, object],
    expected: Mapping[str, object],
    path: str,
    issues: _IssueCollector,
) -> None:
    prefix = f"{path}." if path else ""
    for key in sorted(str(item) for item in payload):
        if key not in expected:
            issues.add(prefix + key, "unknown field")
    for key in sorted(expected):
        if key not in payload:
            issues.add(prefix + key, "missing required field")


def _check_memory_order(memory: Mapping[str, Any], issues: _IssueCollector) -> None:
    if "minimum" not in memory or "recommended" not in memory:
        return
    if parse_byte_size(memory["recommended"]) < parse_byte_size(memory["minimum"]):
        issues.add("memory.recommended", "must be >= memory.minimum")


def _text(value: object, path: str, issues: _IssueCollector) -> str | None:
    if not isinstance(value, str):
        issues.add(path, f"expected string, got {type(value).__name__}")
        return None
    text = value.strip()
    if not text:
        issues.add(path, "must not be empty")
        return None
    return text


def _path_text(value: object, path: str, issues: _IssueCollector) -> str | None:
    text = _text(value, path, issues)
    if text is not None and "\x00" in text:
        issues.add(path, "must not contain NUL bytes")
        return None
    return text


def _optional_path_text(value: object, path: str, issues: _IssueCollector) -> str | None:
    if isinstance(value, str) and not value.strip():
        return ""
    return _path_text(value, path, issues)


def _byte_size(value: object, path: str, issues: _IssueCollector) -> str | None:
    text = _text(value, path, issues)
    if text is None:
        return None
    try:
        size = parse_byte_size(text)
    except ValueError:
        issues.add(path, f"invalid memory size {text!r} (examples: 512K, 128M, 1G)")
        return None
    if size <= 0:
        issues.add(path, "must be > 0")
        return None
    return text


def _memory_limit(value: object, path: str, issues: _IssueCollector) -> str | None:
    if not isinstance(value, str):
        issues.add(path, f"expected string, got {type(value).__name__}")
        return None
    text = value.strip()
    if text in ("", "-1"):
        return text
    return _byte_size(text, path, issues)


def _argv(value: object, path: str, issues: _IssueCollector) -> list[str] | None:
    if isinstance(value, str) or not isinstance(value, Sequence):
        issues.add(path, f"expected list of strings, got {type(value).__name__}")
        return None
    parts = [_text(item, f"{path}[{index}]", issues) for index, item in enumerate(value)]
    if any(part is None for part in parts):
        return None
    return [part for part in parts if part is not None]


def _flag(value: object, path: str, issues: _IssueCollector) -> bool | None:
    if isinstance(value, bool):
        return value
    issues.add(path, f"expected boolean, got {type(value).__name__}")
    return None


def _positive_seconds(value: object, path: str, issues: _IssueCollector) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        issues.add(path, f"expected number, got {type(value).__name__}")
        return None
    seconds = float(value)
    if not math.isfinite(seconds) or seconds <= 0:
        issues.add(path, "must be a finite number > 0")
        return None
    return seconds


def _log_level(value: object, path: str, issues: _IssueCollector) -> str | None:
    text = _text(value, path, issues)
    if text is not None and text not in LOG_LEVELS:
        issues.add(path, f"invalid value {text!r}; expected one of: {', '.join(LOG_LEVELS)}")
        return None
    return text


def _schema_version(value: object, path: str, issues: _IssueCollector) -> int | None:
    if isinstance(value, bool) or not isinstance(value, int):
        issues.add(path, f"expected integer, got {type(value).__name__}")
        return None
    if value != ConfigSchemaVersion:
        issues.add(path, migration_guidance(value))
        return None
    return value


_SCHEMA: Final[dict[str, dict[str, _Checker]]] = {
    "meta": {"schema_version": _schema_version},
    "paths": {"app_root": _path_text},
    "memory": {
        "minimum": _byte_size,
        "recommended": _byte_size,
        "service_limit": _memory_limit,
        "cli_command": _argv,
        "probe_timeout_seconds": _positive_seconds,
    },
    "observability": {
        "log_level": _log_level,
        "log_dir": _optional_path_text,
        "log_to_stderr": _flag,
    },
}


__all__ = [
    "ConfigSchemaVersion",
    "ConfigValidationError",
    "ConfigValidationIssue",
    "ConfigValidationResult",
    "DEFAULT_CONFIG",
    "EnvgateConfig",
    "LOG_LEVELS",
    "PATH_FIELDS",
    "assert_valid_config",
    "default_config",
    "merge_config",
    "migration_guidance",
    "validate_config",
]
