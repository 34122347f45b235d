"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

import logging
from collections.abc import Callable, Iterator
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Any

import pytest
from filetidy.core.logging import PACKAGE_LOGGER
from filetidy.models.snapshot import FileSnapshot


class FakeClock:
    """Manually advanced clock for time-dependent components."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2026, 3, 1, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> datetime:
        self.now = self.now + timedelta(seconds=seconds)
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    """A fake clock starting at a fixed moment."""
    return FakeClock()


@pytest.fixture
def make_snapshot() -> Callable[..., FileSnapshot]:
    """Factory for snapshots of imaginary files.

    The extension is derived from the name unless given explicitly.
    """

    def _make(name: str = "invoice.pdf", folder: str = "/home/user/Downloads", **overrides: Any) -> FileSnapshot:
        extension = name.rsplit(".", 1)[1] if "." in name.lstrip(".") else ""
        values: dict[str, Any] = {
            "path": f"{folder}/{name}",
            "name": name,
            "extension": extension,
            "size_bytes": 500,
        }
        values.update(overrides)
        return FileSnapshot(**values)

    return _make


@pytest.fixture
def snapshot_of() -> Callable[[Path], FileSnapshot]:
    """Snapshot a real file created under tmp_path."""
    from filetidy.filesystem.scanner import snapshot_entry

    return snapshot_entry


@pytest.fixture
def archive_rules(tmp_path: Path) -> Path:
    """A rules.toml that moves PDFs into tmp_path/Archive and trashes .log files."""
    path = tmp_path / "rules.toml"
    path.write_text(
        "[[rules]]\n"
        'name = "Archive PDFs"\n'
        f'outcome = {{ kind = "move", folder = "{tmp_path / "Archive"}" }}\n'
        "\n"
        "[[rules.conditions]]\n"
        'kind = "extension_equals"\n'
        'extension = "pdf"\n'
        "\n"
        "[[rules]]\n"
        'name = "Trash logs"\n'
        'outcome = { kind = "delete" }\n'
        "\n"
        "[[rules.conditions]]\n"
        'kind = "extension_equals"\n'
        'extension = "log"\n'
    )
    return path


@pytest.fixture
def downloads(tmp_path: Path) -> Path:
    """A folder with one PDF, one log file and one unmatched file."""
    folder = tmp_path / "Downloads"
    folder.mkdir()
    (folder / "invoice.pdf").write_text("invoice")
    (folder / "debug.log").write_text("log lines")
    (folder / "notes.txt").write_text("notes")
    return folder


@pytest.fixture
def xdg_dirs(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> dict[str, Path]:
    """Point every XDG base directory into tmp_path.

    Returns:
        The filetidy config, state and data directories.
    """
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg-config"))
    monkeypatch.setenv("XDG_STATE_HOME", str(tmp_path / "xdg-state"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "xdg-data"))
    return {
        "config": tmp_path / "xdg-config" / "filetidy",
        "state": tmp_path / "xdg-state" / "filetidy",
        "data": tmp_path / "xdg-data" / "filetidy",
    }


@pytest.fixture(autouse=True)
def _restore_package_logger() -> Iterator[None]:
    """Undo handler and level changes made by CLI invocations."""
    logger = logging.getLogger(PACKAGE_LOGGER)
    handlers = list(logger.handlers)
    level = logger.level
    yield
    logger.handlers = handlers
    logger.setLevel(level)
