"""
envgate — runtime config loader.

Purpose
- Resolve the effective config from built-in defaults, ``envgate.toml``,
  ``ENVGATE_*`` environment variables and CLI overrides, in increasing order
  of precedence.

Behavior
- The TOML file is optional unless a path was given explicitly.
- Environment values are coerced to the type of the setting they override;
  list settings are split shell-style.
- Relative paths resolve against the directory holding the config file.
- The merged result is validated before and after overrides are applied.
"""

from __future__ import annotations

import json
import os
import shlex
import tomllib
from collections.abc import Callable, Iterator, Mapping
from pathlib import Path
from typing import Any, Final

from envgate.config.schema import (
    PATH_FIELDS,
    assert_valid_config,
    default_config,
    merge_config,
)

DEFAULT_CONFIG_FILE: Final[str] = "envgate.toml"
ENV_PREFIX: Final[str] = "ENVGATE_"

_TRUTHY: Final[frozenset[str]] = frozenset({"1", "true", "t", "yes", "y", "on"})
_FALSY: Final[frozenset[str]] = frozenset({"0", "false", "f", "no", "n", "off"})

_KeyPath = tuple[str, ...]


class ConfigLoadError(ValueError):
    """Raised when config cannot be loaded or overrides cannot be coerced."""


def load_config(
    config_path: str | Path | None = None,
    *,
    cli_overrides: Mapping[str, object] | None = None,
    environ: Mapping[str, str] | None = None,
) -> dict[str, Any]:
    """Load effective config with precedence CLI > env > file > defaults."""

    source = _config_file_path(config_path)
    file_values = _read_toml(source, required=config_path is not None)

    config = assert_valid_config(merge_config(default_config(), file_values))
    env = os.environ if environ is None else environ
    config = merge_config(config, _env_overrides(config, env))
    config = merge_config(config, _dotted_overrides(cli_overrides or {}))
    config = assert_valid_config(config)

    return assert_valid_config(normalize_paths(config, base_dir=source.parent))


def normalize_paths(config: Mapping[str, object], *, base_dir: Path) -> dict[str, Any]:
    """Resolve configured path fields against ``base_dir``.

    Blank values stay blank; an empty ``observability.log_dir`` means
    "no log file".
    """

    result = merge_config({}, config)
    for field_path in PATH_FIELDS:
        section = result.get(field_path[0])
        if not isinstance(section, dict):
            continue
        raw = section.get(field_path[1])
        if isinstance(raw, str) and raw.strip():
            section[field_path[1]] = _absolute_posix(raw, base_dir)
    return result


def effective_config(config: Mapping[str, object]) -> dict[str, Any]:
    """Return a detached copy of the effective config suitable for logging."""

    return merge_config({}, config)


def dump_effective_config(config: Mapping[str, object]) -> str:
    """Return a compact JSON dump with sorted keys."""

    return json.dumps(
        effective_config(config), sort_keys=True, separators=(",", ":"), ensure_ascii=False
    )


def _config_file_path(config_path: str | Path | None) -> Path:
    if config_path is None:
        return (Path.cwd() / DEFAULT_CONFIG_FILE).resolve()
    return Path(config_path).expanduser().resolve()


def _read_toml(path: Path, *, required: bool) -> dict[str, Any]:
    if not path.exists():
        if required:
            raise ConfigLoadError(f"config file not found: {path}")
        return {}

    try:
        with path.open("rb") as handle:
            return tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigLoadError(f"invalid TOML in {path}: {exc}") from exc
    except OSError as exc:
        raise ConfigLoadError(f"unable to read config file {path}: {exc}") from exc


def _env_overrides(config: Mapping[str, object], environ: Mapping[str, str]) -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    for path, current in _leaves(config):
        env_name = ENV_PREFIX + "_".join(part.upper() for part in path)
        raw = environ.get(env_name)
        if raw is None:
            continue
        coerce = _coercer_for(current)
        if coerce is None:
            continue
        try:
            value = coerce(raw.strip())
        except ValueError as exc:
            raise ConfigLoadError(f"{env_name} -> {'.'.join(path)} {exc}") from exc
        _assign(overrides, path, value)
    return overrides


def _leaves(
    payload: Mapping[str, object], prefix: _KeyPath = ()
) -> Iterator[tuple[_KeyPath, object]]:
    for key in sorted(payload):
        value = payload[key]
        if isinstance(value, Mapping):
            yield from _leaves(value, (*prefix, key))
        else:
            yield (*prefix, key), value


def _coercer_for(current: object) -> Callable[[str], object] | None:
    # bool before int: bool is an int subclass.
    if isinstance(current, bool):
        return _to_bool
    if isinstance(current, int):
        return _to_int
    if isinstance(current, float):
        return _to_float
    if isinstance(current, str):
        return str
    if isinstance(current, list):
        return _to_argv
    return None


def _to_bool(text: str) -> bool:
    lowered = text.lower()
    if lowered in _TRUTHY:
        return True
    if lowered in _FALSY:
        return False
    raise ValueError("must be a boolean (true/false/1/0/yes/no/on/off)")


def _to_int(text: str) -> int:
    try:
        return int(text)
    except ValueError:
        raise ValueError("must be an integer") from None


def _to_float(text: str) -> float:
    try:
        return float(text)
    except ValueError:
        raise ValueError("must be a number") from None


def _to_argv(text: str) -> list[str]:
    try:
        return shlex.split(text)
    except ValueError as exc:
        raise ValueError(f"must be a shell-style command line: {exc}") from None


def _dotted_overrides(cli_overrides: Mapping[str, object]) -> dict[str, Any]:
    payload: dict[str, Any] = {}
    for key in sorted(cli_overrides):
        path = tuple(part for part in key.split(".") if part)
        if not path:
            raise ConfigLoadError(f"invalid CLI override key {key!r}")
        _assign(payload, path, cli_overrides[key])
    return payload


def _assign(target: dict[str, Any], path: _KeyPath, value: object) -> None:
    node = target
    for part in path[:-1]:
        node = node.setdefault(part, {})
    node[path[-1]] = value


def _absolute_posix(raw: str, base_dir: Path) -> str:
    candidate = Path(os.path.expandvars(raw)).expanduser()
    if not candidate.is_absolute():
        candidate = base_dir / candidate
    return Path(os.path.normpath(candidate)).as_posix()


__all__ = [
    "ConfigLoadError",
    "DEFAULT_CONFIG_FILE",
    "ENV_PREFIX",
    "dump_effective_config",
    "effective_config",
    "load_config",
    "normalize_paths",
]
