"""slicemeta - print time and filament usage from sliced G-code."""

from __future__ import annotations

import logging
import re
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

from slicemeta.archive import (
    ArchiveError,
    ArchiveFormatError,
    StreamNotFoundError,
    extract_from_archive,
)
from slicemeta.duration import normalize_time
from slicemeta.metadata import (
    FilamentRecord,
    GcodeMetadata,
    extract_metadata,
    extract_metadata_from_bytes,
    parse_metadata,
)
from slicemeta.weight import estimate_weight_from_length

_logger = logging.getLogger(__name__)

_RE_VERSION = re.compile(r'(?m)^\s*version\s*=\s*"([^"]+)"\s*$')


def _pyproject_version(pyproject: Path) -> str | None:
    """Return the ``version = "..."`` value of *pyproject*, if it has one."""
    try:
        content = pyproject.read_text(encoding="utf-8")
    except OSError as exc:
        _logger.debug("Cannot read %s: %s", pyproject, exc)
        return None
    match = _RE_VERSION.search(content)
    return match.group(1) if match else None


def _resolve_version() -> str:
    """Prefer the source checkout's pyproject, then installed metadata."""
    local = _pyproject_version(Path(__file__).resolve().parents[2] / "pyproject.toml")
    if local:
        return local
    try:
        return version("slicemeta")
    except PackageNotFoundError:
        return "unknown"


__version__ = _resolve_version()

__all__ = [
    "ArchiveError",
    "ArchiveFormatError",
    "FilamentRecord",
    "GcodeMetadata",
    "StreamNotFoundError",
    "__version__",
    "estimate_weight_from_length",
    "extract_from_archive",
    "extract_metadata",
    "extract_metadata_from_bytes",
    "normalize_time",
    "parse_metadata",
]
