"""Command-line interface router for envgate."""

from __future__ import annotations

import argparse
import json
import sys
import time
import uuid
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from envgate.config import (
    ConfigLoadError,
    ConfigValidationError,
    effective_config,
    load_config,
)
from envgate.observability import setup_logging, shutdown_logging
from envgate.preflight import BasicRequirements, ValidationError
from envgate.ui.render import CLIRenderer, create_renderer
from envgate.utils.fs import atomic_write


@dataclass(frozen=True, slots=True)
class CLIError(RuntimeError):
    """Typed CLI failure with an explicit process exit code."""

    message: str
    exit_code: int = 1

    def __str__(self) -> str:
        return self.message


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse command router for all supported CLI workflows."""

    parser = argparse.ArgumentParser(
        prog="envgate",
        description=(
            "envgate — environment requirements preflight validator.\n\n"
            "Common workflows:\n"
            "  envgate check               Report the first unmet requirement\n"
            "  envgate check --json        Same, as machine-readable JSON\n"
            "  envgate config              Show the effective configuration\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--config",
        dest="config_path",
        default=None,
        help="Path to envgate TOML config (default: ./envgate.toml if present).",
    )
    common.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        default=False,
        help="Show detailed output.",
    )
    common.add_argument(
        "--no-color",
        action="store_true",
        default=False,
        help="Disable colored output (also respects NO_COLOR env var).",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # check ---------------------------------------------------------------
    check_parser = subparsers.add_parser(
        "check",
        parents=[common],
        help="Check the environment and report the first unmet requirement",
        description=(
            "Run the environment checks, then the file permission checks.\n"
            "Only the first unmet requirement is reported.\n\n"
            "Examples:\n"
            "  envgate check\n"
            "  envgate check --root /srv/app --json\n"
            "  envgate check --report preflight.json\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    check_parser.add_argument(
        "--root",
        dest="app_root",
        default=None,
        help="Application root holding the writable directories (overrides paths.app_root).",
    )
    check_parser.add_argument("--json", action="store_true", help="Emit JSON output")
    check_parser.add_argument(
        "--report",
        default=None,
        help="Also write the JSON result to this file.",
    )
    check_parser.set_defaults(handler=_cmd_check)

    # config --------------------------------------------------------------
    config_parser = subparsers.add_parser(
        "config",
        parents=[common],
        help="Show effective configuration",
        description=(
            "Display the effective config after merging defaults, file, and env.\n\n"
            "Examples:\n"
            "  envgate config\n"
            "  envgate config --json\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    config_parser.add_argument("--json", action="store_true", help="Emit JSON output")
    config_parser.set_defaults(handler=_cmd_config)

    return parser


# ---------------------------------------------------------------------------
# Entrypoints
# ---------------------------------------------------------------------------


def run_cli(argv: Sequence[str] | None = None) -> int:
    """Parse argv, route to a command handler, and return process exit code."""

    parser = build_parser()
    namespace = parser.parse_args(list(argv) if argv is not None else None)
    handler = getattr(namespace, "handler", None)
    if not callable(handler):
        parser.print_help(sys.stderr)
        return 2

    try:
        result = handler(namespace)
    except CLIError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return exc.exit_code
    return int(result)


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------


def _cmd_check(args: argparse.Namespace) -> int:
    overrides: dict[str, object] = {}
    app_root = _optional_str(getattr(args, "app_root", None))
    if app_root is not None:
        overrides["paths.app_root"] = str(Path(app_root).expanduser().resolve())
    config = _load_effective_config(args, cli_overrides=overrides)

    run_id = _new_run_id()
    setup_logging(_mapping(config.get("observability")), run_id=run_id)
    try:
        started = time.monotonic()
        error = BasicRequirements.from_config(config).find_error()
        duration_ms = int((time.monotonic() - started) * 1000)
    finally:
        shutdown_logging()

    payload: dict[str, object] = {
        "command": "check",
        "run_id": run_id,
        "app_root": _mapping(config.get("paths")).get("app_root"),
        "fulfilled": error is None,
        "error": None if error is None else error.to_dict(),
        "duration_ms": duration_ms,
    }

    report = _optional_str(getattr(args, "report", None))
    if report is not None:
        _write_report(Path(report), payload)

    exit_code = 0 if error is None else 1
    if _flag(args, "json"):
        _emit_json(payload)
        return exit_code

    renderer = _get_renderer(args)
    _render_check(renderer, error, payload)
    return exit_code


def _cmd_config(args: argparse.Namespace) -> int:
    config = _load_effective_config(args)
    effective = effective_config(config)

    payload: dict[str, object] = {
        "command": "config",
        "config_path": _optional_str(getattr(args, "config_path", None)),
        "config": effective,
    }

    if _flag(args, "json"):
        _emit_json(payload)
        return 0

    renderer = _get_renderer(args)
    renderer.kv("Config file", payload["config_path"] or "(default lookup)")
    renderer.text(json.dumps(effective, indent=2, sort_keys=True, ensure_ascii=False))
    return 0


# ---------------------------------------------------------------------------
# Rendering helpers
# ---------------------------------------------------------------------------


def _emit_json(payload: Mapping[str, object]) -> None:
    """Emit a JSON payload to stdout with deterministic formatting."""

    print(json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False))


def _get_renderer(args: argparse.Namespace) -> CLIRenderer:
    """Retrieve or create a CLI renderer from the parsed namespace."""

    no_color = _flag(args, "no_color")
    verbose = _flag(args, "verbose")
    return create_renderer(no_color=no_color, verbose=verbose)


def _render_check(
    renderer: CLIRenderer,
    error: ValidationError | None,
    payload: Mapping[str, object],
) -> None:
    renderer.heading("envgate check")
    if renderer.verbose:
        renderer.kv("Run ID", payload["run_id"])
        renderer.kv("Application root", payload["app_root"])
        renderer.kv("Duration", f"{payload['duration_ms']} ms")

    if error is None:
        renderer.ok("All requirements fulfilled.")
        return

    renderer.fail(error.title or "Requirement not fulfilled")
    renderer.text(f"  {error.render()}")
    if error.code is not None:
        renderer.kv("  Error code", error.code)


def _write_report(path: Path, payload: Mapping[str, object]) -> None:
    body = json.dumps(payload, indent=2, sort_keys=True, ensure_ascii=False) + "\n"
    try:
        atomic_write(path, body)
    except OSError as exc:
        raise CLIError(f"unable to write report {path}: {exc}", exit_code=2) from exc


# ---------------------------------------------------------------------------
# Helpers: config, arguments
# ---------------------------------------------------------------------------


def _load_effective_config(
    args: argparse.Namespace,
    *,
    cli_overrides: Mapping[str, object] | None = None,
) -> dict[str, Any]:
    config_path = _optional_str(getattr(args, "config_path", None))

    try:
        return load_config(config_path, cli_overrides=cli_overrides)
    except (ConfigLoadError, ConfigValidationError) as exc:
        raise CLIError(str(exc), exit_code=2) from exc


def _new_run_id() -> str:
    stamp = time.strftime("%Y%m%dT%H%M%SZ", time.gmtime())
    return f"{stamp}-{uuid.uuid4().hex[:8]}"


def _mapping(value: object) -> Mapping[str, object]:
    if isinstance(value, Mapping):
        return value
    return {}


def _optional_str(value: object) -> str | None:
    if not isinstance(value, str):
        return None
    cleaned = value.strip()
    return cleaned or None


def _flag(args: argparse.Namespace, name: str) -> bool:
    value = getattr(args, name, False)
    return bool(value)


__all__ = [
    "CLIError",
    "build_parser",
    "run_cli",
]

