"""Human-readable print durations for slicemeta.

Slicers report print time either as ``3h 13m 52s`` style text or as a raw
second count.  Both are reduced to seconds during scanning and rendered back
here in a compact form::

    >>> normalize_time(90)
    '1m 30s'
    >>> normalize_time(3661)
    '1h 2m'

Once a duration reaches an hour, the seconds component is never shown and
any leftover seconds round the minutes *up*.
"""

from __future__ import annotations

_SECONDS_PER_HOUR: int = 3600
_SECONDS_PER_MINUTE: int = 60


def normalize_time(total_seconds: int) -> str:
    """Convert a second count to ``Xh Ym`` / ``Ym Zs``.

    :param total_seconds: Non-negative number of seconds.
    :returns: Space-joined components, zero-valued components omitted;
        ``"0s"`` for zero.
    :raises ValueError: If *total_seconds* is negative.
    """
    if total_seconds < 0:
        raise ValueError(f"total_seconds must be non-negative, got {total_seconds}")
    if total_seconds == 0:
        return "0s"

    hours, remainder = divmod(total_seconds, _SECONDS_PER_HOUR)
    minutes, secs = divmod(remainder, _SECONDS_PER_MINUTE)

    parts: list[str] = []
    if hours > 0:
        if secs > 0:
            minutes += 1
        parts.append(f"{hours}h")
        if minutes > 0:
            parts.append(f"{minutes}m")
    else:
        if minutes > 0:
            parts.append(f"{minutes}m")
        if secs > 0:
            parts.append(f"{secs}s")

    return " ".join(parts)
