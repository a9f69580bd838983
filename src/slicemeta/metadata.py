"""G-code header metadata extraction for slicemeta.

Scans the comment header that slicers write at the top of a G-code file and
recovers the estimated print time plus per-filament usage (material type,
length, weight, density, colour).  Two directive dialects are understood:

- **BambuStudio / OrcaSlicer**::

    ; model printing time: 3h 6m 5s; total estimated time: 3h 13m 52s
    ; total filament length [mm] : 1229.28,2890.11
    ; total filament weight [g] : 3.73,8.77
    ; filament_type = PLA;PETG
    ; filament_density: 1.26,1.27
    ; filament_colour = #FF5733;#33FF57

- **Cura**::

    ;TIME:53473
    ;Filament used: 22.4m

Only the first :data:`MAX_HEADER_LINES` lines are examined.  Parsing never
raises: unrecognised or malformed directives simply leave fields empty.

Usage::

    from slicemeta.metadata import extract_metadata, parse_metadata

    meta = parse_metadata(gcode_text)
    print(meta.print_time, meta.total_filament_weight)

    meta = extract_metadata("/path/to/benchy.gcode.3mf")
    print(meta.to_dict())
"""

from __future__ import annotations

import logging
import math
import os
import re
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from slicemeta.archive import extract_from_archive
from slicemeta.duration import normalize_time
from slicemeta.weight import (
    DEFAULT_DENSITY_G_CM3,
    DEFAULT_DIAMETER_MM,
    estimate_weight_from_length,
)

logger = logging.getLogger(__name__)

MAX_HEADER_LINES: int = 200

UNKNOWN_MATERIAL: str = "Unknown"

_ARCHIVE_SUFFIX: str = ".3mf"
_GCODE_ARCHIVE_SUFFIX: str = ".gcode.3mf"


# ---------------------------------------------------------------------------
# Result dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FilamentRecord:
    """Usage of one filament (extruder slot) in a print."""

    material_type: str = UNKNOWN_MATERIAL
    length_display: str = ""
    weight_display: str = ""
    density: str | None = None
    color: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serialisable dict, omitting ``None`` values."""
        raw = {
            "material_type": self.material_type,
            "length_display": self.length_display,
            "weight_display": self.weight_display,
            "density": self.density,
            "color": self.color,
        }
        return {k: v for k, v in raw.items() if v is not None}


@dataclass(frozen=True)
class GcodeMetadata:
    """Print metadata recovered from a G-code header."""

    print_time: str | None = None
    filaments: tuple[FilamentRecord, ...] = ()
    total_filament_weight: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serialisable dict, omitting ``None`` values."""
        raw: dict[str, Any] = {
            "print_time": self.print_time,
            "filaments": [f.to_dict() for f in self.filaments],
            "total_filament_weight": self.total_filament_weight,
        }
        return {k: v for k, v in raw.items() if v is not None}


# ---------------------------------------------------------------------------
# Header directive patterns
# ---------------------------------------------------------------------------

# "; total filament length" and ";total filament length" are the same directive.
_RE_LEADING_COMMENT = re.compile(r"^;\s*")

_RE_TOTAL_ESTIMATED_TIME = re.compile(
    r"total estimated time:\s*(\d+h)?\s*(\d+m)?\s*(\d+s)?",
    re.IGNORECASE,
)
_RE_CURA_TIME = re.compile(r";TIME:\s*(\d+)", re.IGNORECASE)
_RE_CURA_FILAMENT_USED = re.compile(r";Filament used:\s*([\d.]+)m", re.IGNORECASE)


@dataclass
class _Columns:
    """Per-filament values collected while scanning, one list per directive."""

    lengths: list[str] = field(default_factory=list)
    weights: list[str] = field(default_factory=list)
    types: list[str] = field(default_factory=list)
    densities: list[str] = field(default_factory=list)
    colors: list[str] = field(default_factory=list)
    print_time_seconds: int | None = None


def _split_values(raw: str) -> list[str]:
    """Split a directive value on ``;`` if present, else on ``,``.

    BambuStudio separates string lists (types, colours) with semicolons and
    numeric lists with commas.
    """
    separator = ";" if ";" in raw else ","
    return [v.strip() for v in raw.split(separator) if v.strip()]


def _value_after(line: str, separator: str) -> list[str] | None:
    """Return the list value following the first *separator* in *line*.

    ``None`` when the separator is missing or nothing follows it.
    """
    _, found, rest = line.partition(separator)
    if not found or not rest:
        return None
    return _split_values(rest)


def _parse_float(raw: str | None) -> float | None:
    """Parse a finite float, or ``None`` if *raw* is not numeric."""
    if raw is None:
        return None
    try:
        value = float(raw)
    except ValueError:
        return None
    return value if math.isfinite(value) else None


# ---------------------------------------------------------------------------
# Directive handlers
#
# Each handler receives the line with its comment prefix normalised (original
# case preserved) and updates the column accumulator.
# ---------------------------------------------------------------------------


def _apply_total_estimated_time(line: str, cols: _Columns) -> None:
    m = _RE_TOTAL_ESTIMATED_TIME.search(line)
    if m is None:
        return
    hours = int(m.group(1)[:-1]) if m.group(1) else 0
    minutes = int(m.group(2)[:-1]) if m.group(2) else 0
    seconds = int(m.group(3)[:-1]) if m.group(3) else 0
    cols.print_time_seconds = hours * 3600 + minutes * 60 + seconds


def _apply_total_length(line: str, cols: _Columns) -> None:
    values = _value_after(line, ":")
    if values is not None:
        cols.lengths = values


def _apply_total_weight(line: str, cols: _Columns) -> None:
    values = _value_after(line, ":")
    if values is not None:
        cols.weights = values


def _apply_filament_type(line: str, cols: _Columns) -> None:
    values = _value_after(line, "=")
    if values is not None:
        cols.types = values


def _apply_filament_density(line: str, cols: _Columns) -> None:
    values = _value_after(line, ":")
    if values is not None:
        cols.densities = values


def _apply_filament_colour(line: str, cols: _Columns) -> None:
    values = _value_after(line, "=")
    if values is not None:
        cols.colors = values


def _apply_cura_time(line: str, cols: _Columns) -> None:
    m = _RE_CURA_TIME.match(line)
    if m is not None:
        cols.print_time_seconds = int(m.group(1))


def _apply_cura_filament_used(line: str, cols: _Columns) -> None:
    m = _RE_CURA_FILAMENT_USED.match(line)
    if m is None:
        return
    metres = _parse_float(m.group(1))
    if metres is not None:
        cols.lengths = [f"{metres * 1000:.2f}"]


def _is_colour_line(lowered: str) -> bool:
    # filament_colour_type carries colour-mode codes, not hex colours.
    return (
        "filament_colour =" in lowered or "filament_color =" in lowered
    ) and "_type" not in lowered


# (predicate(line, lowered), handler) pairs.  The first matching predicate
# owns the line.
_DIRECTIVES: tuple[tuple[Callable[[str, str], bool], Callable[[str, _Columns], None]], ...] = (
    (lambda line, lowered: "total estimated time:" in lowered, _apply_total_estimated_time),
    (lambda line, lowered: lowered.startswith(";total filament length [mm]"), _apply_total_length),
    # Case-sensitive, as BambuStudio writes it.
    (lambda line, lowered: line.startswith(";total filament weight [g]"), _apply_total_weight),
    (lambda line, lowered: lowered.startswith(";filament_type"), _apply_filament_type),
    (lambda line, lowered: lowered.startswith(";filament_density"), _apply_filament_density),
    (lambda line, lowered: _is_colour_line(lowered), _apply_filament_colour),
    (lambda line, lowered: lowered.startswith(";time:"), _apply_cura_time),
    (lambda line, lowered: lowered.startswith(";filament used:"), _apply_cura_filament_used),
)


def _scan_header(lines: list[str]) -> _Columns:
    """Collect directive values from *lines* into columns."""
    cols = _Columns()
    for raw_line in lines:
        line = _RE_LEADING_COMMENT.sub(";", raw_line.strip())
        lowered = line.lower()
        for matches, apply in _DIRECTIVES:
            if matches(line, lowered):
                apply(line, cols)
                break
    return cols


# ---------------------------------------------------------------------------
# Assembly
# ---------------------------------------------------------------------------


def _item(values: list[str], index: int) -> str | None:
    return values[index] if index < len(values) else None


def _assemble(cols: _Columns) -> GcodeMetadata:
    """Zip the collected columns into :class:`FilamentRecord` rows."""
    count = max(len(cols.lengths), len(cols.weights), len(cols.types))

    filaments: list[FilamentRecord] = []
    total_weight = 0.0
    any_weight = False

    for i in range(count):
        length = _item(cols.lengths, i)
        weight = _item(cols.weights, i)
        if length is None and weight is None:
            continue

        density = _item(cols.densities, i)
        length_mm = _parse_float(length)

        mass: float | None = None
        if weight is not None:
            mass = _parse_float(weight)
        elif length_mm is not None:
            density_val = _parse_float(density)
            estimate = estimate_weight_from_length(
                length_mm,
                DEFAULT_DIAMETER_MM,
                DEFAULT_DENSITY_G_CM3 if density_val is None else density_val,
            )
            # Total must equal the sum of the displayed estimates.
            mass = round(estimate, 2)

        # Non-numeric tokens pass through unformatted.
        if length is None:
            length_display = ""
        elif length_mm is None:
            length_display = length
        else:
            length_display = f"{length_mm:.2f}mm"

        if mass is not None:
            weight_display = f"{mass:.2f}g"
            total_weight += mass
            any_weight = True
        else:
            weight_display = weight or ""

        filaments.append(
            FilamentRecord(
                material_type=_item(cols.types, i) or UNKNOWN_MATERIAL,
                length_display=length_display,
                weight_display=weight_display,
                density=density,
                color=_item(cols.colors, i),
            )
        )

    print_time = None
    if cols.print_time_seconds is not None:
        print_time = normalize_time(cols.print_time_seconds)

    return GcodeMetadata(
        print_time=print_time,
        filaments=tuple(filaments),
        total_filament_weight=f"{total_weight:.2f}g" if any_weight else None,
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def parse_metadata(text: str) -> GcodeMetadata:
    """Extract print metadata from G-code *text*.

    Scans the first :data:`MAX_HEADER_LINES` lines for BambuStudio and Cura
    header comments.  Never raises on malformed input; fields that cannot be
    recovered are left empty.

    :param text: G-code file contents.
    :returns: A new :class:`GcodeMetadata`.
    """
    lines = text.split("\n")[:MAX_HEADER_LINES]
    meta = _assemble(_scan_header(lines))
    logger.debug(
        "Parsed G-code header: %d filament(s), print_time=%s, total_weight=%s",
        len(meta.filaments),
        meta.print_time,
        meta.total_filament_weight,
    )
    return meta


def is_archive_name(filename: str) -> bool:
    """Return ``True`` if *filename* names a 3MF archive (``.3mf``, ``.gcode.3mf``)."""
    return filename.lower().endswith(_ARCHIVE_SUFFIX)


def is_gcode_archive_name(filename: str) -> bool:
    """Return ``True`` if *filename* names a sliced ``.gcode.3mf`` archive.

    Model catalogues use this to keep sliced archives out of 3MF model scans.
    """
    return filename.lower().endswith(_GCODE_ARCHIVE_SUFFIX)


def extract_metadata_from_bytes(data: bytes, filename: str) -> GcodeMetadata:
    """Extract metadata from an uploaded file's bytes.

    Archives (by *filename* suffix) are unwrapped with
    :func:`~slicemeta.archive.extract_from_archive`; anything else is decoded
    as UTF-8 text.

    :raises slicemeta.archive.ArchiveError: If an archive cannot be unwrapped.
    """
    if is_archive_name(filename):
        text = extract_from_archive(data)
    else:
        text = data.decode("utf-8", errors="replace")
    return parse_metadata(text)


def extract_metadata(file_path: str | os.PathLike[str]) -> GcodeMetadata:
    """Extract metadata from a ``.gcode`` or ``.gcode.3mf`` file on disk.

    :raises FileNotFoundError: If *file_path* does not exist.
    :raises slicemeta.archive.ArchiveError: If an archive cannot be unwrapped.
    """
    path = os.fspath(file_path)
    with open(path, "rb") as fh:
        data = fh.read()
    logger.debug("Read %d bytes from %s", len(data), path)
    return extract_metadata_from_bytes(data, os.path.basename(path))
