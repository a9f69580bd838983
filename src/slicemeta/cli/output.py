"""Output formatting for the slicemeta CLI.

All public functions accept a ``json_mode`` flag:
    - ``True``  → indented JSON envelope ``{status, data | error}``
    - ``False`` → Rich-rendered text for humans
"""

from __future__ import annotations

import json
from io import StringIO
from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text


def _render(renderable: Any) -> str:
    """Render a Rich object to a string."""
    buf = StringIO()
    console = Console(file=buf, force_terminal=False, width=100)
    console.print(renderable)
    return buf.getvalue().rstrip("\n")


# ---------------------------------------------------------------------------
# Envelope
# ---------------------------------------------------------------------------


def format_response(
    status: str,
    data: Optional[Dict[str, Any]] = None,
    error: Optional[Dict[str, Any]] = None,
    *,
    json_mode: bool = False,
) -> str:
    """Build a standard ``{status, data, error}`` response."""
    if json_mode:
        envelope: Dict[str, Any] = {"status": status}
        if data is not None:
            envelope["data"] = data
        if error is not None:
            envelope["error"] = error
        return json.dumps(envelope, indent=2, sort_keys=False)

    if status == "error" and error:
        code = error.get("code", "UNKNOWN")
        msg = error.get("message", "An unknown error occurred.")
        t = Text()
        t.append("Error", style="bold red")
        t.append(f" [{code}]: ", style="red")
        t.append(msg)
        return _render(Panel(t, title="Error", border_style="red"))

    if data:
        lines = [f"[bold]{k}:[/bold] {v}" for k, v in data.items()]
        return _render(Panel("\n".join(lines), border_style="green"))

    return status


def format_error(
    message: str,
    code: str = "ERROR",
    *,
    json_mode: bool = False,
) -> str:
    """Shortcut for a standard error response."""
    return format_response(
        "error",
        error={"code": code, "message": message},
        json_mode=json_mode,
    )


# ---------------------------------------------------------------------------
# G-code metadata
# ---------------------------------------------------------------------------


def format_metadata(
    meta: Dict[str, Any],
    *,
    file_name: str = "",
    json_mode: bool = False,
) -> str:
    """Format parsed G-code metadata.

    Expects a dict from ``GcodeMetadata.to_dict()``.
    """
    if json_mode:
        data = dict(meta)
        if file_name:
            data["file"] = file_name
        return format_response("success", data=data, json_mode=True)

    filaments: List[Dict[str, Any]] = meta.get("filaments", [])
    summary = [
        f"[bold]Print time:[/bold] {meta.get('print_time') or 'N/A'}",
        f"[bold]Total filament:[/bold] {meta.get('total_filament_weight') or 'N/A'}",
        f"[bold]Filaments:[/bold] {len(filaments)}",
    ]
    parts = [_render(Panel("\n".join(summary), title=file_name or None, border_style="green"))]

    if filaments:
        table = Table(title="Filaments", border_style="blue")
        table.add_column("#", justify="right")
        table.add_column("Type", style="bold")
        table.add_column("Length", justify="right")
        table.add_column("Weight", justify="right")
        table.add_column("Density", justify="right")
        table.add_column("Colour")

        for idx, f in enumerate(filaments, start=1):
            table.add_row(
                str(idx),
                f.get("material_type", ""),
                f.get("length_display", ""),
                f.get("weight_display", ""),
                f.get("density", ""),
                f.get("color", ""),
            )
        parts.append(_render(table))

    return "\n".join(parts)
