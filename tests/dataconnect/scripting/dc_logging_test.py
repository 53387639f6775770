"""Tests for the dataconnect.scripting.dc_logging module."""

import logging
from datetime import datetime

import pytest
from rich.logging import RichHandler

from dataconnect.redact import RedactTokenFilter
from dataconnect.scripting import dc_logging


@pytest.mark.parametrize(
    ("verbose", "expected_level"),
    [
        (True, logging.DEBUG),
        (False, logging.INFO),
    ],
)
def test_configure_sets_level_and_handler(verbose: bool, expected_level: int) -> None:
    dc_logging.configure(verbose=verbose)

    root = logging.getLogger()
    assert root.level == expected_level
    handlers = [handler for handler in root.handlers if isinstance(handler, RichHandler)]
    assert len(handlers) == 1
    assert any(isinstance(f, RedactTokenFilter) for f in handlers[0].filters)


def test_local_tz_time_shows_offset() -> None:
    text = dc_logging.local_tz_time(datetime(2024, 5, 1, 12, 30, 0))
    assert text.plain.startswith("[2024-05-01 12:30:00 ")
    assert text.plain.endswith("]")
    # +HHMM or -HHMM
    assert text.plain[-6] in "+-"


def test_log_is_named_scripting() -> None:
    assert dc_logging.log.name == "scripting"
