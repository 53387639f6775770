"""Package for listing and fetching remote datasets.

The `ListCriteria` type selects what to list (see `FlightType`) and
`get_paginated_data` eagerly walks all the pages, while `PaginationSpec`
defers the walk to the consumer, who can stop at any time.

The `DatasetRef` type lazily references a dataset: setting a limit
never performs I/O, collecting streams the rows chunk by chunk using
`read_table` and converts them to a pandas DataFrame.

Tickets
-------

A `Ticket` is the JSON object the server embeds in each FlightInfo and
expects back when streaming a dataset:

    {
      "study_uuid": "...",
      "study_env_uuid": "...",
      "dataset_uuid": "...",
      "dataset_name": "...",
      "limit": 10
    }

where `dataset_name` is an optional display hint and `limit` is only
present when the caller limited the number of rows.
"""

from .listing import (
    PaginationSpec,
    Record,
    client_list,
    extract_data,
    extract_record,
    get_paginated_data,
    iterate_flights,
    iterate_pages,
    to_frame,
)
from .table import DatasetRef, read_chunks, read_table
from .ticket import (
    DEFAULT_PAGE_SIZE,
    SERVER_PAGE_SIZE,
    UNBOUNDED,
    FlightType,
    ListCriteria,
    Ticket,
)

__all__ = [
    "DEFAULT_PAGE_SIZE",
    "SERVER_PAGE_SIZE",
    "UNBOUNDED",
    "DatasetRef",
    "FlightType",
    "ListCriteria",
    "PaginationSpec",
    "Record",
    "Ticket",
    "client_list",
    "extract_data",
    "extract_record",
    "get_paginated_data",
    "iterate_flights",
    "iterate_pages",
    "read_chunks",
    "read_table",
    "to_frame",
]
