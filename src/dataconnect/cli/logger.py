"""Logging helpers for the DataConnect CLI."""

from __future__ import annotations

import logging
import os
import sys

import colorlog

from ..redact import RedactTokenFilter

LOG_COLORS = {
    "DEBUG": "bold_cyan",
    "INFO": "bold_green",
    "WARNING": "bold_yellow",
    "ERROR": "bold_red",
    "CRITICAL": "bold_red,bg_white",
}


def _use_color() -> bool:
    if os.getenv("NO_COLOR") is not None:
        return False
    return sys.stderr.isatty()


def configure_logging(verbose: bool, *, quiet: bool = False) -> None:
    """Log to stderr at DEBUG when verbose, WARNING when quiet, INFO otherwise."""
    level = logging.DEBUG if verbose else logging.WARNING if quiet else logging.INFO
    datefmt = "%Y-%m-%d %H:%M:%S"
    handler = logging.StreamHandler()
    if _use_color():
        handler.setFormatter(
            colorlog.ColoredFormatter(
                fmt="%(log_color)s[%(asctime)s] <%(name)s> %(levelname)s:%(reset)s %(message)s",
                log_colors=LOG_COLORS,
                datefmt=datefmt,
            )
        )
    else:
        handler.setFormatter(
            logging.Formatter(
                fmt="[%(asctime)s] <%(name)s> %(levelname)s: %(message)s",
                datefmt=datefmt,
            )
        )
    handler.addFilter(RedactTokenFilter())
    logging.basicConfig(level=level, handlers=[handler], force=True)
