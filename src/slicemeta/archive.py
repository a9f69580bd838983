"""G-code extraction from sliced ``.gcode.3mf`` archives.

BambuStudio and OrcaSlicer can export a print as a 3MF (zip) package with
the G-code stored inside, one stream per build plate.  This module locates
the stream to analyse and returns it as text.

Candidate entries, best first:

1. ``Metadata/plate_1.gcode`` (the default plate)
2. any other ``Metadata/plate_<N>.gcode``, where ``<N>`` is all digits
   (names such as ``plate_extra.gcode`` are not plates)
3. any ``*.gcode`` at the archive root (older exports)

Usage::

    from slicemeta.archive import extract_from_archive

    with open("benchy.gcode.3mf", "rb") as fh:
        gcode_text = extract_from_archive(fh.read())
"""

from __future__ import annotations

import io
import logging
import re
import zipfile
import zlib

logger = logging.getLogger(__name__)

_DEFAULT_PLATE: str = "Metadata/plate_1.gcode"
_RE_PLATE = re.compile(r"^Metadata/plate_(\d+)\.gcode$")

_PRIORITY_DEFAULT_PLATE: int = 1
_PRIORITY_OTHER_PLATE: int = 2
_PRIORITY_ROOT: int = 3


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class ArchiveError(Exception):
    """Base class for archive extraction failures."""


class ArchiveFormatError(ArchiveError):
    """Raised when the data is not a readable zip archive."""


class StreamNotFoundError(ArchiveError):
    """Raised when a valid archive holds no G-code stream."""


# ---------------------------------------------------------------------------
# Candidate search
# ---------------------------------------------------------------------------


def _entry_priority(name: str) -> int | None:
    """Return the search priority for archive entry *name*, or ``None``."""
    if name == _DEFAULT_PLATE:
        return _PRIORITY_DEFAULT_PLATE
    if _RE_PLATE.match(name):
        return _PRIORITY_OTHER_PLATE
    if name.endswith(".gcode") and "/" not in name:
        return _PRIORITY_ROOT
    return None


def find_gcode_entries(zf: zipfile.ZipFile) -> list[str]:
    """List the G-code entries of *zf*, best candidate first.

    Entries of equal priority keep their order in the archive.
    """
    candidates: list[tuple[int, str]] = []
    for name in zf.namelist():
        priority = _entry_priority(name)
        if priority is not None:
            candidates.append((priority, name))
    candidates.sort(key=lambda item: item[0])
    return [name for _, name in candidates]


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def extract_from_archive(data: bytes) -> str:
    """Return the text of the best G-code stream inside a zip archive.

    :param data: Raw bytes of a ``.gcode.3mf`` (or any zip) file.
    :returns: The decoded G-code text.
    :raises ArchiveFormatError: If *data* is not a zip archive, or the chosen
        entry cannot be decompressed.
    :raises StreamNotFoundError: If no entry matches the candidate rules.
    """
    try:
        zf = zipfile.ZipFile(io.BytesIO(data))
    except zipfile.BadZipFile as exc:
        logger.debug("Could not open archive: %s", exc)
        raise ArchiveFormatError(f"Not a valid zip archive: {exc}") from exc

    with zf:
        entries = find_gcode_entries(zf)
        if not entries:
            raise StreamNotFoundError(
                f"No .gcode file found in archive. Expected {_DEFAULT_PLATE} or similar."
            )

        best = entries[0]
        logger.debug("Using archive entry %s (%d candidates)", best, len(entries))
        try:
            raw = zf.read(best)
        except (
            zipfile.BadZipFile,
            zlib.error,
            EOFError,
            NotImplementedError,
            OSError,
            RuntimeError,
        ) as exc:
            logger.debug("Could not read archive entry %s: %s", best, exc)
            raise ArchiveFormatError(f"Could not read {best}: {exc}") from exc

    # Stray non-UTF-8 bytes in comments must not lose the whole header.
    return raw.decode("utf-8", errors="replace")
