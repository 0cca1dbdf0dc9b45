from __future__ import annotations

from pathlib import Path

import pytest

from envgate.utils.fs import (
    DirectoryCreationError,
    atomic_write,
    create_directory_recursively,
    is_writable,
)


@pytest.mark.unit
def test_create_directory_recursively_creates_missing_parents(tmp_path: Path) -> None:
    target = tmp_path / "Web" / "_Resources" / "Persistent"

    create_directory_recursively(target)
    create_directory_recursively(target)

    assert target.is_dir()


@pytest.mark.unit
def test_create_directory_recursively_fails_when_a_file_is_in_the_way(tmp_path: Path) -> None:
    blocker = tmp_path / "Data"
    blocker.write_text("not a directory", encoding="utf-8")

    with pytest.raises(DirectoryCreationError) as excinfo:
        create_directory_recursively(blocker / "Logs")

    assert isinstance(excinfo.value, OSError)
    assert excinfo.value.path == blocker / "Logs"
    assert str(blocker / "Logs") in str(excinfo.value)


@pytest.mark.unit
def test_is_writable_reports_existing_directory(tmp_path: Path) -> None:
    assert is_writable(tmp_path) is True
    assert is_writable(tmp_path / "missing") is False


@pytest.mark.unit
def test_atomic_write_replaces_content_and_leaves_no_temp_files(tmp_path: Path) -> None:
    target = tmp_path / "report.json"
    atomic_write(target, "first\n")
    atomic_write(target, b"second\n")

    assert target.read_text(encoding="utf-8") == "second\n"
    assert [item.name for item in tmp_path.iterdir()] == ["report.json"]


@pytest.mark.unit
def test_atomic_write_requires_existing_parent(tmp_path: Path) -> None:
    with pytest.raises(OSError):
        atomic_write(tmp_path / "missing" / "report.json", "{}")
