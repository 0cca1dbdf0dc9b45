from __future__ import annotations

import json
from pathlib import Path

import pytest

from envgate.config.loader import ConfigLoadError
from envgate.main import ExitCode, cli_entrypoint
from envgate.ui.cli import build_parser, run_cli
from envgate.ui.render import CLIRenderer


def _write_config(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("ENVGATE_MEMORY_MINIMUM", "ENVGATE_PATHS_APP_ROOT", "NO_COLOR"):
        monkeypatch.delenv(name, raising=False)


@pytest.mark.unit
def test_parser_exposes_check_and_config_commands() -> None:
    parser = build_parser()

    check = parser.parse_args(["check", "--root", "/srv/app", "--json", "--report", "r.json"])
    config = parser.parse_args(["config", "--config", "envgate.toml", "-v"])

    assert (check.command, check.app_root, check.json, check.report) == (
        "check",
        "/srv/app",
        True,
        "r.json",
    )
    assert (config.command, config.config_path, config.verbose) == (
        "config",
        "envgate.toml",
        True,
    )


@pytest.mark.unit
def test_config_json_reports_effective_config(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    config_path = _write_config(tmp_path / "envgate.toml", '[memory]\nminimum = "192M"\n')

    exit_code = run_cli(["config", "--config", str(config_path), "--json"])

    assert exit_code == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["command"] == "config"
    assert payload["config"]["memory"]["minimum"] == "192M"
    assert payload["config"]["paths"]["app_root"] == tmp_path.resolve().as_posix()


@pytest.mark.unit
def test_config_text_output(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    config_path = _write_config(tmp_path / "envgate.toml", "")

    assert run_cli(["config", "--config", str(config_path)]) == 0

    out = capsys.readouterr().out
    assert out.startswith(f"Config file: {config_path}")
    assert '"minimum": "128M"' in out


@pytest.mark.unit
def test_invalid_config_is_a_config_error(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    config_path = _write_config(tmp_path / "envgate.toml", '[memory]\nminimum = "lots"\n')

    exit_code = run_cli(["check", "--config", str(config_path)])

    assert exit_code == ExitCode.CONFIG_ERROR
    assert "memory.minimum" in capsys.readouterr().err


@pytest.mark.unit
def test_missing_config_file_is_a_config_error(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    exit_code = cli_entrypoint(["config", "--config", str(tmp_path / "missing.toml")])

    assert exit_code == ExitCode.CONFIG_ERROR
    assert "config file not found" in capsys.readouterr().err


@pytest.mark.unit
def test_usage_errors_exit_with_config_error_code(capsys: pytest.CaptureFixture[str]) -> None:
    assert cli_entrypoint([]) == 2
    assert cli_entrypoint(["frobnicate"]) == 2
    capsys.readouterr()


@pytest.mark.unit
def test_help_exits_successfully(capsys: pytest.CaptureFixture[str]) -> None:
    assert cli_entrypoint(["--help"]) == 0
    assert "envgate check" in capsys.readouterr().out


@pytest.mark.unit
def test_entrypoint_routes_escaped_exceptions(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    def raise_config_error(argv: object) -> int:
        raise ConfigLoadError("broken config")

    def raise_internal_error(argv: object) -> int:
        raise RuntimeError("unexpected")

    monkeypatch.setattr("envgate.ui.cli.run_cli", raise_config_error)
    assert cli_entrypoint(["config"]) == ExitCode.CONFIG_ERROR
    assert capsys.readouterr().err.strip() == "broken config"

    monkeypatch.setattr("envgate.ui.cli.run_cli", raise_internal_error)
    assert cli_entrypoint(["config"]) == ExitCode.INTERNAL_ERROR
    assert "Traceback" in capsys.readouterr().err


@pytest.mark.unit
def test_renderer_plain_output(capsys: pytest.CaptureFixture[str]) -> None:
    renderer = CLIRenderer(no_color=True)

    renderer.heading("envgate check")
    renderer.ok("All requirements fulfilled.")
    renderer.fail("Environment requirements not fulfilled")
    renderer.kv("Error code", 1172215790)
    renderer.text("  details")

    assert capsys.readouterr().out.splitlines() == [
        "envgate check",
        "  OK  All requirements fulfilled.",
        "  FAIL  Environment requirements not fulfilled",
        "Error code: 1172215790",
        "  details",
    ]
