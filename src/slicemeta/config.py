"""Configuration loading for the slicemeta CLI.

Values come from, highest priority first: explicit arguments (CLI flags),
``SLICEMETA_*`` environment variables, the YAML config file, and built-in
defaults.
"""

from __future__ import annotations

import os
from pathlib import Path

import yaml

DEFAULTS: dict[str, object] = {
    "log_level": "WARNING",
    "log_dir": None,
    "output": "text",
}

OUTPUT_CHOICES: tuple[str, ...] = ("text", "json")
LOG_LEVELS: tuple[str, ...] = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

_ENV_VARS: dict[str, str] = {
    "log_level": "SLICEMETA_LOG_LEVEL",
    "log_dir": "SLICEMETA_LOG_DIR",
    "output": "SLICEMETA_OUTPUT",
}


def get_default_config_path() -> Path:
    """Return the default config file path (``~/.slicemeta/config.yaml``)."""
    return Path.home() / ".slicemeta" / "config.yaml"


def _load_config_file(config_path: Path) -> dict[str, object]:
    """Read and parse a YAML config file, returning an empty dict on any failure."""
    if not config_path.is_file():
        return {}
    try:
        with config_path.open("r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
        if isinstance(data, dict):
            return data
        return {}
    except (yaml.YAMLError, OSError):
        return {}


def load_config(
    log_level: str | None = None,
    log_dir: str | None = None,
    output: str | None = None,
    config_path: str | None = None,
) -> dict[str, object]:
    """Resolve configuration using a three-tier precedence hierarchy.

    Returns a dict with keys ``log_level``, ``log_dir`` and ``output``.
    """
    config: dict[str, object] = dict(DEFAULTS)

    path = Path(config_path) if config_path else get_default_config_path()
    file_values = _load_config_file(path)
    for key in DEFAULTS:
        if key in file_values and file_values[key] is not None:
            config[key] = file_values[key]

    for key, env_name in _ENV_VARS.items():
        env_value = os.environ.get(env_name)
        if env_value:
            config[key] = env_value

    explicit = {"log_level": log_level, "log_dir": log_dir, "output": output}
    for key, value in explicit.items():
        if value is not None:
            config[key] = value

    config["log_level"] = str(config["log_level"]).upper()
    config["output"] = str(config["output"]).lower()
    if config["log_dir"] is not None:
        config["log_dir"] = os.path.expanduser(str(config["log_dir"]))

    return config


def init_config(config_path: str | None = None) -> Path:
    """Write a config file populated with the defaults.

    Returns the :class:`~pathlib.Path` of the written file.
    """
    path = Path(config_path) if config_path else get_default_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)

    with path.open("w", encoding="utf-8") as fh:
        yaml.safe_dump(dict(DEFAULTS), fh, default_flow_style=False, sort_keys=False)

    return path


def validate_config(config: dict[str, object]) -> tuple[bool, str | None]:
    """Validate a resolved configuration dict.

    Returns ``(True, None)`` when the config is valid, or
    ``(False, error_message)`` describing the first problem found.
    """
    level = config.get("log_level")
    if level not in LOG_LEVELS:
        return False, f"Unknown log level: {level!r}"

    output = config.get("output")
    if output not in OUTPUT_CHOICES:
        return False, f"Output must be one of {', '.join(OUTPUT_CHOICES)}, got {output!r}"

    log_dir = config.get("log_dir")
    if log_dir is not None and not isinstance(log_dir, str):
        return False, "log_dir must be a string path"

    return True, None
