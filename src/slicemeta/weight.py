"""Filament mass estimation from extruded length.

Used only as a fallback when a slicer reports how much filament a print
consumes but not what it weighs (Cura, or BambuStudio headers without a
weight line).
"""

from __future__ import annotations

import math

DEFAULT_DIAMETER_MM: float = 1.75
DEFAULT_DENSITY_G_CM3: float = 1.24  # PLA

_MM3_PER_CM3: float = 1000.0


def estimate_weight_from_length(
    length_mm: float,
    diameter_mm: float = DEFAULT_DIAMETER_MM,
    density_g_per_cm3: float = DEFAULT_DENSITY_G_CM3,
) -> float:
    """Estimate the mass in grams of *length_mm* of filament.

    The filament is modelled as a solid cylinder of *diameter_mm*.

    :param length_mm: Extruded length in millimetres (non-negative).
    :param diameter_mm: Filament diameter in millimetres.
    :param density_g_per_cm3: Material density in g/cm³.
    :returns: Estimated mass in grams.
    """
    radius_mm = diameter_mm / 2
    volume_mm3 = math.pi * radius_mm * radius_mm * length_mm
    return (volume_mm3 / _MM3_PER_CM3) * density_g_per_cm3
