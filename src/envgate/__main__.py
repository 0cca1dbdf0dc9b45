"""Module entrypoint for ``python -m envgate``."""

from __future__ import annotations

from envgate.main import cli_entrypoint

if __name__ == "__main__":
    raise SystemExit(cli_entrypoint())
