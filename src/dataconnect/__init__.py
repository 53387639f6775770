"""DataConnect client library.

This library lists study environments, datasets and dataset versions,
fetches datasets as pandas DataFrames, and publishes new datasets
through a DataConnect Arrow Flight service.

Typical usage:

    import dataconnect

    dc = dataconnect.init(token="...")
    for env in dc.study_environments():
        print(env["study_environment_uuid"])
"""

from importlib.metadata import PackageNotFoundError, version

from .client import DataConnectClient, init
from .datasets import (
    DatasetRef,
    FlightType,
    ListCriteria,
    PaginationSpec,
    Ticket,
    iterate_flights,
    to_frame,
)
from .errors import (
    DataConnectError,
    FlightErrorKind,
    InvalidArgumentError,
    KeyColumnsNotFoundError,
    classify_flight_error,
)
from .publish import PublishConfig, count_distinct_rows

try:
    __version__ = version("dataconnect")
except PackageNotFoundError:  # pragma: no cover - running from a source tree
    __version__ = "0.0.0"

__all__ = [
    "DataConnectClient",
    "DataConnectError",
    "DatasetRef",
    "FlightErrorKind",
    "FlightType",
    "InvalidArgumentError",
    "KeyColumnsNotFoundError",
    "ListCriteria",
    "PaginationSpec",
    "PublishConfig",
    "Ticket",
    "classify_flight_error",
    "count_distinct_rows",
    "init",
    "iterate_flights",
    "to_frame",
    "__version__",
]
