"""Logging setup for slicemeta.

Configures the root logger level and, when a log directory is given, a
rotating file handler.  Library modules only ever log through
``logging.getLogger(__name__)``; this module is called by the CLI.
"""

from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Optional

_LOG_FILENAME = "slicemeta.log"
_LOG_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"


def resolve_level(level: Optional[str]) -> int:
    """Map a level name like ``"debug"`` to its :mod:`logging` constant.

    Unknown or empty names fall back to ``WARNING``.
    """
    if not level:
        return logging.WARNING
    resolved = getattr(logging, level.upper(), None)
    return resolved if isinstance(resolved, int) else logging.WARNING


def configure_logging(
    log_dir: Optional[str] = None,
    *,
    level: Optional[str] = None,
    max_bytes: int = 5_000_000,
    backup_count: int = 3,
) -> Optional[str]:
    """Configure the root logger, optionally with a rotating file handler.

    :param log_dir: Directory for ``slicemeta.log``.  No file handler is
        installed when ``None``.
    :param level: Log level name (default ``"WARNING"``).
    :param max_bytes: Maximum log file size before rotation.
    :param backup_count: Number of rotated log files to keep.
    :returns: Path of the log file, or ``None`` if file logging is off.
    """
    log_level = resolve_level(level)

    root = logging.getLogger()
    root.setLevel(log_level)

    if not log_dir:
        return None

    os.makedirs(log_dir, exist_ok=True)
    log_path = os.path.join(log_dir, _LOG_FILENAME)

    # Add rotating file handler if not already present.
    has_rotating = any(
        isinstance(h, RotatingFileHandler)
        and os.path.abspath(h.baseFilename) == os.path.abspath(log_path)
        for h in root.handlers
    )
    if not has_rotating:
        file_handler = RotatingFileHandler(
            log_path,
            maxBytes=max_bytes,
            backupCount=backup_count,
        )
        file_handler.setLevel(log_level)
        file_handler.setFormatter(
            logging.Formatter(_LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
        )
        root.addHandler(file_handler)

    return log_path
