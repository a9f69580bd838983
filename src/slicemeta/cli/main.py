"""slicemeta CLI — inspect sliced G-code from the command line.

Every subcommand supports a ``--json`` flag for machine-parseable output.
The default output format can also be set with ``output: json`` in the
config file or ``SLICEMETA_OUTPUT=json``.
"""

from __future__ import annotations

import logging
import os
import sys

import click

from slicemeta.archive import ArchiveFormatError, StreamNotFoundError
from slicemeta.cli.output import format_error, format_metadata, format_response
from slicemeta.config import get_default_config_path, init_config, load_config, validate_config
from slicemeta.duration import normalize_time
from slicemeta.log_config import configure_logging
from slicemeta.metadata import extract_metadata
from slicemeta.weight import (
    DEFAULT_DENSITY_G_CM3,
    DEFAULT_DIAMETER_MM,
    estimate_weight_from_length,
)

logger = logging.getLogger(__name__)


def _json_mode(ctx: click.Context, flag: bool) -> bool:
    """``--json`` wins; otherwise fall back to the configured output format."""
    if flag:
        return True
    config = (ctx.obj or {}).get("config", {})
    return config.get("output") == "json"


@click.group()
@click.option(
    "--config",
    "config_path",
    default=None,
    type=click.Path(dir_okay=False),
    help="Path to config file (default ~/.slicemeta/config.yaml).",
)
@click.option("--log-level", default=None, help="Log level (DEBUG, INFO, WARNING, ...).")
@click.option("--log-dir", default=None, help="Write a rotating log file to this directory.")
@click.version_option(package_name="slicemeta")
@click.pass_context
def cli(
    ctx: click.Context,
    config_path: str | None,
    log_level: str | None,
    log_dir: str | None,
) -> None:
    """slicemeta — print time and filament usage from sliced G-code."""
    ctx.ensure_object(dict)
    config = load_config(log_level=log_level, log_dir=log_dir, config_path=config_path)
    ok, message = validate_config(config)
    if not ok:
        raise click.UsageError(f"Invalid configuration: {message}")

    ctx.obj["config"] = config
    ctx.obj["config_path"] = config_path
    configure_logging(config["log_dir"], level=config["log_level"])  # type: ignore[arg-type]


# ---------------------------------------------------------------------------
# parse
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option("--json", "json_flag", is_flag=True, help="Output JSON.")
@click.pass_context
def parse(ctx: click.Context, file: str, json_flag: bool) -> None:
    """Extract print time and filament usage from a .gcode or .gcode.3mf FILE."""
    json_mode = _json_mode(ctx, json_flag)
    file_name = os.path.basename(file)

    try:
        meta = extract_metadata(file)
    except ArchiveFormatError as exc:
        click.echo(
            format_error(
                f"{file_name} is not a valid archive: {exc}",
                code="ARCHIVE_FORMAT",
                json_mode=json_mode,
            )
        )
        sys.exit(1)
    except StreamNotFoundError as exc:
        click.echo(
            format_error(
                f"No G-code found inside {file_name}: {exc}",
                code="GCODE_NOT_FOUND",
                json_mode=json_mode,
            )
        )
        sys.exit(1)
    except OSError as exc:
        click.echo(format_error(f"Could not read {file}: {exc}", code="READ_ERROR", json_mode=json_mode))
        sys.exit(1)

    logger.info("Parsed %s: %d filament(s)", file_name, len(meta.filaments))
    click.echo(format_metadata(meta.to_dict(), file_name=file_name, json_mode=json_mode))


# ---------------------------------------------------------------------------
# time
# ---------------------------------------------------------------------------


@cli.command("time")
@click.argument("seconds", type=click.IntRange(min=0))
@click.option("--json", "json_flag", is_flag=True, help="Output JSON.")
@click.pass_context
def time_cmd(ctx: click.Context, seconds: int, json_flag: bool) -> None:
    """Format SECONDS as a print duration."""
    json_mode = _json_mode(ctx, json_flag)
    formatted = normalize_time(seconds)
    if json_mode:
        click.echo(
            format_response("success", data={"seconds": seconds, "print_time": formatted}, json_mode=True)
        )
    else:
        click.echo(formatted)


# ---------------------------------------------------------------------------
# weight
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("length_mm", type=click.FloatRange(min=0))
@click.option(
    "--diameter",
    type=click.FloatRange(min=0, min_open=True),
    default=DEFAULT_DIAMETER_MM,
    show_default=True,
    help="Filament diameter in mm.",
)
@click.option(
    "--density",
    type=click.FloatRange(min=0, min_open=True),
    default=DEFAULT_DENSITY_G_CM3,
    show_default=True,
    help="Material density in g/cm³.",
)
@click.option("--json", "json_flag", is_flag=True, help="Output JSON.")
@click.pass_context
def weight(
    ctx: click.Context,
    length_mm: float,
    diameter: float,
    density: float,
    json_flag: bool,
) -> None:
    """Estimate the weight of LENGTH_MM millimetres of filament."""
    json_mode = _json_mode(ctx, json_flag)
    grams = estimate_weight_from_length(length_mm, diameter, density)
    if json_mode:
        click.echo(
            format_response(
                "success",
                data={
                    "length_mm": length_mm,
                    "diameter_mm": diameter,
                    "density_g_cm3": density,
                    "weight_g": round(grams, 2),
                },
                json_mode=True,
            )
        )
    else:
        click.echo(f"{grams:.2f}g")


# ---------------------------------------------------------------------------
# config
# ---------------------------------------------------------------------------


@cli.group("config")
def config_group() -> None:
    """Manage the slicemeta config file."""


@config_group.command("init")
@click.option("--force", is_flag=True, help="Overwrite an existing config file.")
@click.pass_context
def config_init(ctx: click.Context, force: bool) -> None:
    """Write a config file with default values."""
    config_path = ctx.obj.get("config_path")
    target = config_path or str(get_default_config_path())
    if os.path.exists(target) and not force:
        click.echo(format_error(f"{target} already exists. Use --force to overwrite.", code="CONFIG_EXISTS"))
        sys.exit(1)

    path = init_config(config_path)
    click.echo(f"Wrote {path}")


@config_group.command("show")
@click.option("--json", "json_flag", is_flag=True, help="Output JSON.")
@click.pass_context
def config_show(ctx: click.Context, json_flag: bool) -> None:
    """Show the resolved configuration."""
    json_mode = _json_mode(ctx, json_flag)
    click.echo(format_response("success", data=dict(ctx.obj["config"]), json_mode=json_mode))


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
