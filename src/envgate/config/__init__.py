"""
envgate config package public API.

Purpose
- Export config loading/validation entrypoints and public error types.

What should be included in this file
- Public schema constants and validation/report types.
- Loader APIs for effective runtime config and deterministic dumps.

Functional requirements
- Support loading from ``envgate.toml`` + ``ENVGATE_`` env overrides.
- Fail fast with clear structured validation/load errors.

Non-functional requirements
- Keep import-time surface small and deterministic.
"""

from envgate.config.loader import (
    DEFAULT_CONFIG_FILE,
    ENV_PREFIX,
    ConfigLoadError,
    dump_effective_config,
    effective_config,
    load_config,
    normalize_paths,
)
from envgate.config.schema import (
    DEFAULT_CONFIG,
    PATH_FIELDS,
    ConfigSchemaVersion,
    ConfigValidationError,
    ConfigValidationIssue,
    ConfigValidationResult,
    EnvgateConfig,
    assert_valid_config,
    default_config,
    merge_config,
    migration_guidance,
    validate_config,
)

__all__ = [
    "ConfigLoadError",
    "ConfigSchemaVersion",
    "ConfigValidationError",
    "ConfigValidationIssue",
    "ConfigValidationResult",
    "DEFAULT_CONFIG",
    "DEFAULT_CONFIG_FILE",
    "ENV_PREFIX",
    "EnvgateConfig",
    "PATH_FIELDS",
    "assert_valid_config",
    "default_config",
    "dump_effective_config",
    "effective_config",
    "load_config",
    "merge_config",
    "migration_guidance",
    "normalize_paths",
    "validate_config",
]
