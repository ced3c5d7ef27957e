"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

import os
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

# Fixed reference time for age-dependent tests
NOW = datetime(2026, 10, 18, 12, 0, 0, tzinfo=UTC)

MakeDir = Callable[..., Path]


@pytest.fixture(autouse=True)
def isolated_xdg(
    tmp_path_factory: pytest.TempPathFactory, monkeypatch: pytest.MonkeyPatch
) -> Path:
    """Point XDG config/state directories at a throwaway location."""
    base = tmp_path_factory.mktemp("xdg")
    monkeypatch.setenv("XDG_CONFIG_HOME", str(base / "config"))
    monkeypatch.setenv("XDG_STATE_HOME", str(base / "state"))
    return base


@pytest.fixture
def make_dir() -> MakeDir:
    """Create a directory with files and an optional age.

    Usage: ``make_dir(path, files={"a.bin": 10}, age_days=40)``. File
    values are sizes in bytes. The age is applied to the directory's own
    mtime after its files are written, relative to the real clock.
    """

    def _make(
        path: Path, files: dict[str, int] | None = None, age_days: float | None = None
    ) -> Path:
        path.mkdir(parents=True, exist_ok=True)
        for name, size in (files or {}).items():
            file_path = path / name
            file_path.parent.mkdir(parents=True, exist_ok=True)
            file_path.write_bytes(b"x" * size)
        if age_days is not None:
            stamp = (datetime.now(tz=UTC) - timedelta(days=age_days)).timestamp()
            os.utime(path, (stamp, stamp))
        return path

    return _make


@pytest.fixture
def fixed_clock() -> Callable[[], datetime]:
    """Clock that always returns NOW."""
    return lambda: NOW


@pytest.fixture
def now() -> datetime:
    """The fixed reference time returned by ``fixed_clock``."""
    return NOW
