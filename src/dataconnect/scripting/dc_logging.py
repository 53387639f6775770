"""Optional scripting extensions to configure logging."""

from __future__ import annotations

import logging
from datetime import datetime

from rich.logging import RichHandler
from rich.text import Text

from ..redact import RedactTokenFilter


def local_tz_time(log_time: datetime) -> Text:
    """Render the (naive, local) log time with the local timezone offset."""
    return Text(log_time.astimezone().strftime("[%Y-%m-%d %H:%M:%S %z]"))


def configure(verbose: bool, *, show_path: bool = False) -> None:
    """
    Configure the logging subsystem to use a RichHandler.

    Verbose mode also shows the per-page listing messages and the
    reasons why result units were kept undecoded.
    """
    level = logging.DEBUG if verbose else logging.INFO
    handler = RichHandler(
        show_time=True,
        show_level=True,
        show_path=show_path,
        log_time_format=local_tz_time,
        rich_tracebacks=verbose,
    )
    handler.addFilter(RedactTokenFilter())
    logging.basicConfig(
        level=level,
        format="<%(name)s> %(message)s",
        handlers=[handler],
        force=True,
    )


log = logging.getLogger("scripting")
"""Logger that the scripting package should use."""
