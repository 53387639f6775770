"""Module implementing paginated listing of flights.

The server exposes study environments, datasets and dataset versions
through `list_flights`. The criteria select what to list and which page
to return. We walk the pages sequentially and stop when:

1. a page contains no items (end of the stream);

2. we processed `max_pages` pages (unless `max_pages` is UNBOUNDED);

3. we processed as many items as the `total_records` the server
   reported on the first item carrying it.

Each FlightInfo embeds a JSON ticket describing the resource. When the
ticket refers to a dataset, we attach a lazy `DatasetRef` under `frame`.
"""

from __future__ import annotations

import dataclasses
import json
import logging
from collections.abc import Callable, Iterable, Iterator, Mapping
from dataclasses import dataclass
from typing import Any

import pandas as pd
import pyarrow.flight as flight

from ..flight.options import call_options
from .table import DatasetRef
from .ticket import DEFAULT_PAGE_SIZE, UNBOUNDED, ListCriteria, Ticket

log = logging.getLogger("datasets/listing")

Record = dict[str, Any]
"""Item produced by listing: the decoded ticket plus an optional `frame`."""

Transform = Callable[[Record], Any]

OptionsFactory = Callable[[], flight.FlightCallOptions]


def client_list(
    client: flight.FlightClient,
    criteria: ListCriteria,
    options: flight.FlightCallOptions | None = None,
) -> Iterable[flight.FlightInfo]:
    """Request a single page of flights matching the criteria."""
    return client.list_flights(
        criteria.to_json(),
        options=options if options is not None else call_options(),
    )


def extract_data(info: flight.FlightInfo) -> Record | None:
    """Decode the JSON ticket embedded in the first endpoint of info."""
    if info is None:
        return None
    try:
        ticket = info.endpoints[0].ticket.ticket
        return json.loads(ticket.decode("utf-8"))
    except (AttributeError, IndexError, TypeError, ValueError) as exc:
        log.warning("cannot extract flight data: %s", exc)
        return None


def extract_record(
    client: flight.FlightClient,
    info: flight.FlightInfo,
    options_factory: OptionsFactory | None = None,
) -> Record | None:
    """
    Like `extract_data` but attach a DatasetRef under `frame` for datasets.

    The DatasetRef uses options_factory to build its call options.
    """
    data = extract_data(info)
    if not isinstance(data, dict):
        return None
    if data.get("dataset_uuid") is not None:
        try:
            data["frame"] = DatasetRef(
                client,
                Ticket.from_ticket_data(data),
                options_factory=options_factory,
            )
        except KeyError as exc:
            log.warning("cannot create frame for dataset %s: missing %s", data["dataset_uuid"], exc)
    return data


def _total_records(info: Any) -> int | None:
    value = getattr(info, "total_records", None)
    if isinstance(value, int) and value > 0:
        return value
    return None


def iterate_pages(
    client: flight.FlightClient,
    criteria: ListCriteria,
    *,
    max_pages: int = UNBOUNDED,
    transform: Transform | None = None,
    options: flight.FlightCallOptions | None = None,
    options_factory: OptionsFactory | None = None,
) -> Iterator[Any]:
    """
    Lazily walk the pages matching criteria.

    Arguments:
        client: the FlightClient to use.
        criteria: the listing criteria, which we copy and do not modify.
        max_pages: maximum number of pages to request or UNBOUNDED.
        transform: optional function applied to each record; we only
            yield the values that are not None.
        options: call options, defaults to `call_options()`.
        options_factory: optional function returning the call options
            of the DatasetRef attached to dataset records.

    Yields:
        The records (or transformed values) in server order.
    """
    criteria = dataclasses.replace(criteria)
    if criteria.page_size is None:
        criteria.page_size = DEFAULT_PAGE_SIZE

    page = 1
    total_records: int | None = None
    processed = 0

    while (max_pages == UNBOUNDED or page <= max_pages) and (
        total_records is None or processed < total_records
    ):
        criteria.page = page
        count = 0

        log.debug("listing %s page %d... start", criteria.flight_type.value, page)
        try:
            for info in client_list(client, criteria, options):
                count += 1
                if total_records is None:
                    total_records = _total_records(info)

                record = extract_record(client, info, options_factory)
                if record is None:
                    continue
                result = transform(record) if transform is not None else record
                if result is not None:
                    yield result

        except flight.FlightServerError as exc:
            log.warning("server returned an error during iteration: %s", exc)
        except Exception as exc:
            log.warning("error during iteration: %s", exc)

        log.debug("listing %s page %d... ok (%d items)", criteria.flight_type.value, page, count)

        if count == 0:
            break

        processed += count
        page += 1


def get_paginated_data(
    client: flight.FlightClient,
    criteria: ListCriteria,
    max_pages: int = UNBOUNDED,
    *,
    options: flight.FlightCallOptions | None = None,
    options_factory: OptionsFactory | None = None,
) -> list[Record]:
    """Eagerly walk all the pages and return the concatenated records."""
    return list(
        iterate_pages(
            client,
            criteria,
            max_pages=max_pages,
            options=options,
            options_factory=options_factory,
        )
    )


@dataclass(frozen=True, kw_only=True)
class PaginationSpec:
    """
    Deferred listing, driven one page at a time by the consumer.

    Iterating a PaginationSpec starts again from the first page, so the
    same spec can be consumed more than once. Use `map` to apply a
    transform and stop early without requesting the remaining pages:

        spec = client.datasets(study_uuid, env_uuid)
        names = itertools.islice(spec.map(lambda r: r.get("dataset_name")), 5)

    Attributes:
        client: the FlightClient to use.
        criteria: the listing criteria.
        max_pages: maximum number of pages to request or UNBOUNDED.
        options_factory: optional function returning the call options,
            also used by the DatasetRef attached to dataset records.
    """

    client: flight.FlightClient
    criteria: ListCriteria
    max_pages: int = UNBOUNDED
    options_factory: OptionsFactory | None = None

    def map(self, transform: Transform | None = None) -> Iterator[Any]:
        """Lazily yield the non-None results of transform applied to each record."""
        options = self.options_factory() if self.options_factory is not None else None
        return iterate_pages(
            self.client,
            self.criteria,
            max_pages=self.max_pages,
            transform=transform,
            options=options,
            options_factory=self.options_factory,
        )

    def __iter__(self) -> Iterator[Record]:
        return self.map()

    def collect(self, transform: Transform | None = None) -> list[Any]:
        """Walk all the pages and return the non-None transformed records."""
        return list(self.map(transform))


def iterate_flights(
    source: PaginationSpec | Iterable[flight.FlightInfo],
    transform: Transform | None = None,
    *,
    client: flight.FlightClient | None = None,
) -> Iterator[Any]:
    """
    Lazily apply transform to the records of a PaginationSpec or of a
    single page of FlightInfo (e.g. the return value of `client_list`).

    When source is a single page, pass client to attach a DatasetRef
    to the records describing datasets.

    Raises:
        TypeError: if source is neither a PaginationSpec nor iterable.
    """
    if isinstance(source, PaginationSpec):
        return source.map(transform)
    if not isinstance(source, Iterable) or isinstance(source, (str, bytes, Mapping)):
        raise TypeError("source must be either a PaginationSpec or an iterable of FlightInfo")
    return _iterate_single_page(source, transform, client)


def _iterate_single_page(
    infos: Iterable[flight.FlightInfo],
    transform: Transform | None,
    client: flight.FlightClient | None,
) -> Iterator[Any]:
    try:
        for info in infos:
            record = extract_record(client, info) if client is not None else extract_data(info)
            if record is None:
                continue
            result = transform(record) if transform is not None else record
            if result is not None:
                yield result
    except flight.FlightServerError as exc:
        log.warning("server returned an error during iteration: %s", exc)
    except Exception as exc:
        log.warning("error during iteration: %s", exc)


def to_frame(record: Mapping[str, Any]) -> pd.DataFrame:
    """Render a listing record as a two-column (name, value) DataFrame."""
    return pd.DataFrame(
        {
            "name": [str(name) for name in record],
            "value": [str(value) for value in record.values()],
        }
    )
