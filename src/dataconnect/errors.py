"""Module containing the DataConnect error taxonomy.

Errors fall in two families:

1. local programmer errors (`InvalidArgumentError`, `KeyColumnsNotFoundError`),
   raised immediately and never sent to the server;

2. remote errors returned by the Flight service, which we never raise
   but classify into a `FlightErrorKind` using `classify_flight_error`.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class DataConnectError(Exception):
    """Base class for errors raised by this library."""


class InvalidArgumentError(DataConnectError, ValueError):
    """Error emitted when a required parameter is missing or has the wrong type."""

    def __init__(self, message: str, *, parameter: str | None = None) -> None:
        super().__init__(message)
        self.parameter = parameter


class KeyColumnsNotFoundError(DataConnectError, KeyError):
    """Error emitted when declared key columns do not exist in the data."""

    def __init__(self, missing: list[str]) -> None:
        super().__init__(missing)
        self.missing = list(missing)

    def __str__(self) -> str:
        return f"Key column(s) not found in data: {', '.join(self.missing)}"


class FlightErrorKind(str, Enum):
    """Enumerate the kinds of errors reported by the Flight service."""

    VALIDATION = "VALIDATION"
    NOT_FOUND = "NOT_FOUND"
    AUTHENTICATION = "AUTHENTICATION"
    AUTHORIZATION = "AUTHORIZATION"
    SERVER_ERROR = "SERVER_ERROR"


_PREFIXES: tuple[tuple[str, FlightErrorKind], ...] = (
    ("VALIDATION_ERROR:", FlightErrorKind.VALIDATION),
    ("NOT_FOUND:", FlightErrorKind.NOT_FOUND),
    ("AUTHENTICATION_ERROR:", FlightErrorKind.AUTHENTICATION),
    ("AUTHORIZATION_ERROR:", FlightErrorKind.AUTHORIZATION),
)


def classify_flight_error(message: str) -> FlightErrorKind:
    """
    Classify a raw error message into a FlightErrorKind.

    The server tags messages with a prefix such as `NOT_FOUND:`. Since
    pyarrow wraps the server message with its own preamble, we search
    for the prefix anywhere in the message. Messages without a known
    prefix are classified as SERVER_ERROR.
    """
    for prefix, kind in _PREFIXES:
        if prefix in message:
            return kind
    return FlightErrorKind.SERVER_ERROR


@dataclass(frozen=True, kw_only=True)
class FlightErrorInfo:
    """
    Classified error.

    Attributes:
        kind: the error classification.
        message: the original error message.
    """

    kind: FlightErrorKind
    message: str


def handle_flight_error(exc: BaseException) -> FlightErrorInfo:
    """Return the FlightErrorInfo describing the given exception."""
    message = str(exc)
    return FlightErrorInfo(kind=classify_flight_error(message), message=message)
