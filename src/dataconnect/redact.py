"""Module to keep bearer tokens out of the logs."""

from __future__ import annotations

import logging
import re

_BEARER = re.compile(r"(Bearer\s+)\S+", re.IGNORECASE)


def redact(text: str) -> str:
    """Return text with every bearer token replaced by `***`."""
    return _BEARER.sub(r"\1***", text)


class RedactTokenFilter(logging.Filter):
    """Logging filter applying `redact` to each message."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        redacted = redact(message)
        if redacted != message:
            record.msg, record.args = redacted, None
        return True
