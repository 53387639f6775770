"""Module implementing lazy references to remote datasets."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from typing import Any

import pandas as pd
import pyarrow as pa
import pyarrow.flight as flight
from tqdm import tqdm
from tqdm.contrib.logging import logging_redirect_tqdm

from ..errors import InvalidArgumentError
from ..flight.options import call_options
from .ticket import Ticket

log = logging.getLogger("datasets/table")


def _iter_batches(reader: flight.FlightStreamReader, progress: bool) -> Iterator[pa.RecordBatch]:
    """Pull chunks from the reader until the end of the stream."""
    with (
        logging_redirect_tqdm(),
        tqdm(desc="DataConnect download", unit="rows", disable=not progress) as pbar,
    ):
        while True:
            try:
                chunk = reader.read_chunk()
            except StopIteration:
                return
            pbar.update(chunk.data.num_rows)
            yield chunk.data


def _open_stream(
    client: flight.FlightClient,
    ticket: Ticket,
    options: flight.FlightCallOptions | None,
) -> flight.FlightStreamReader | None:
    if ticket is None:
        raise InvalidArgumentError("ticket must be provided", parameter="ticket")
    try:
        return client.do_get(
            flight.Ticket(ticket.to_json()),
            options=options if options is not None else call_options(),
        )
    except Exception as exc:
        log.warning("opening stream for %s... failure: %s", ticket, exc)
        return None


def read_chunks(
    client: flight.FlightClient,
    ticket: Ticket,
    *,
    chunk_callback: Callable[[pa.Table], Any] | None = None,
    options: flight.FlightCallOptions | None = None,
    progress: bool = False,
) -> list[Any] | None:
    """
    Read the dataset identified by ticket chunk by chunk.

    Arguments:
        client: the FlightClient to use.
        ticket: the dataset ticket.
        chunk_callback: optional function to apply to each chunk.
        options: call options, defaults to `call_options()`.
        progress: whether to show a progress bar.

    Returns:
        The list of chunks as Arrow tables (or of the values returned by
        chunk_callback) or None if the read failed.

    Raises:
        InvalidArgumentError: if the ticket is missing.
    """
    reader = _open_stream(client, ticket, options)
    if reader is None:
        return None
    try:
        chunks = []
        for batch in _iter_batches(reader, progress):
            table = pa.Table.from_batches([batch])
            chunks.append(chunk_callback(table) if chunk_callback is not None else table)
        return chunks
    except Exception as exc:
        log.warning("reading %s... failure: %s", ticket, exc)
        return None


def read_table(
    client: flight.FlightClient,
    ticket: Ticket,
    *,
    options: flight.FlightCallOptions | None = None,
    progress: bool = False,
) -> pa.Table | None:
    """
    Read the dataset identified by ticket into a single Arrow table.

    The chunks are concatenated using the stream schema, so that an empty
    stream produces an empty table with the correct columns.

    Returns:
        The Arrow table or None if the read failed.

    Raises:
        InvalidArgumentError: if the ticket is missing.
    """
    reader = _open_stream(client, ticket, options)
    if reader is None:
        return None
    try:
        log.info("reading %s... start", ticket)
        batches = list(_iter_batches(reader, progress))
        table = pa.Table.from_batches(batches, schema=reader.schema)
        log.info("reading %s... ok (%d rows)", ticket, table.num_rows)
        return table
    except Exception as exc:
        log.warning("reading %s... failure: %s", ticket, exc)
        return None


class DatasetRef:
    """
    Lazy reference to a remote dataset.

    Setting a limit never performs I/O. Only `collect`, `to_arrow` and
    `head` fetch rows from the server and they fetch again on every call.

    Use like:

        ref = client.fetch_data(study, env, dataset)["frame"]
        first_rows = ref.head(10)
        everything = ref.collect(ignore_limit=True)
    """

    def __init__(
        self,
        client: flight.FlightClient,
        ticket: Ticket,
        *,
        options_factory: Callable[[], flight.FlightCallOptions] | None = None,
    ) -> None:
        self._client = client
        self._ticket = ticket
        self._limit: int | None = None
        self._options_factory = options_factory

    def __repr__(self) -> str:
        return f"DatasetRef(ticket={self._ticket!r}, limit={self._limit!r})"

    @property
    def ticket(self) -> Ticket:
        """The base ticket, without any limit."""
        return self._ticket

    @property
    def limit_n(self) -> int | None:
        """The current row limit or None."""
        return self._limit

    def limit(self, n: int) -> DatasetRef:
        """Limit the results to the first n rows and return self for chaining."""
        if isinstance(n, bool) or not isinstance(n, int) or n < 0:
            raise InvalidArgumentError(
                f"limit must be a non-negative integer, got {n!r}",
                parameter="n",
            )
        self._limit = n
        return self

    def effective_ticket(self, ignore_limit: bool = False) -> Ticket:
        """Return the ticket to send to the server."""
        if ignore_limit or self._limit is None:
            return self._ticket
        return self._ticket.with_limit(self._limit)

    def to_arrow(self, ignore_limit: bool = False, *, progress: bool = False) -> pa.Table | None:
        """Fetch the rows as an Arrow table, or None if the read failed."""
        options = self._options_factory() if self._options_factory is not None else None
        return read_table(
            self._client,
            self.effective_ticket(ignore_limit),
            options=options,
            progress=progress,
        )

    def collect(self, ignore_limit: bool = False, *, progress: bool = False) -> pd.DataFrame | None:
        """Fetch the rows as a pandas DataFrame, or None if the read failed."""
        table = self.to_arrow(ignore_limit, progress=progress)
        return table.to_pandas() if table is not None else None

    def head(self, n: int = 6) -> pd.DataFrame | None:
        """Return the first n rows."""
        return self.limit(n).collect()
