"""Shared fixtures for the slicemeta test suite.

Provides access to the sample G-code files under ``tests/fixtures/gcode``
and a helper for building in-memory ``.gcode.3mf`` archives.
"""

from __future__ import annotations

import io
import zipfile
from pathlib import Path
from typing import Callable

import pytest

FIXTURE_DIR = Path(__file__).parent / "fixtures" / "gcode"


def read_fixture(name: str) -> str:
    """Return the text of a sample G-code file."""
    return (FIXTURE_DIR / name).read_text(encoding="utf-8")


def build_archive(entries: dict[str, str | bytes]) -> bytes:
    """Zip *entries* (archive path -> content) into an in-memory archive."""
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        for name, content in entries.items():
            zf.writestr(name, content)
    return buf.getvalue()


@pytest.fixture
def fixture_text() -> Callable[[str], str]:
    return read_fixture


@pytest.fixture
def make_archive() -> Callable[[dict[str, str | bytes]], bytes]:
    return build_archive


@pytest.fixture
def isolated_home(tmp_path, monkeypatch) -> Path:
    """Point ``~`` at a temp dir and clear ``SLICEMETA_*`` env vars."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    for name in ("SLICEMETA_LOG_LEVEL", "SLICEMETA_LOG_DIR", "SLICEMETA_OUTPUT"):
        monkeypatch.delenv(name, raising=False)
    return home
