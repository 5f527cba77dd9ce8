"""Logging configuration for mpd-sticker."""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(log_path: Path, *, verbose: bool = False) -> None:
    """Log the package to a rotating file, and to stderr when ``verbose`` is set.

    Idempotent, skips if handlers are already attached.
    """
    root = logging.getLogger("mpd_sticker")
    if root.handlers:
        return

    formatter = logging.Formatter(fmt=_FORMAT, datefmt=_DATE_FORMAT)
    file_handler = RotatingFileHandler(log_path, maxBytes=1_000_000, backupCount=3)
    file_handler.setFormatter(formatter)
    root.addHandler(file_handler)

    if verbose:
        # Protocol traffic on stderr keeps --json stdout parseable
        console = logging.StreamHandler(sys.stderr)
        console.setFormatter(formatter)
        root.addHandler(console)

    root.setLevel(logging.DEBUG)
