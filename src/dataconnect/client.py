"""Module implementing the DataConnectClient type."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pandas as pd
import pyarrow as pa
import pyarrow.flight as flight

from . import auth
from .datasets import (
    SERVER_PAGE_SIZE,
    UNBOUNDED,
    DatasetRef,
    FlightType,
    ListCriteria,
    PaginationSpec,
    Record,
    Ticket,
    get_paginated_data,
)
from .errors import InvalidArgumentError
from .flight import call_options, connect
from .publish import PublishConfig, dry_publish, publish
from .settings import DEFAULT_HOST, DEFAULT_PORT


def _require(**params: Any) -> None:
    missing = [name for name, value in params.items() if not value]
    if missing:
        raise InvalidArgumentError(
            f"All parameters are required: {', '.join(params)}; missing: {', '.join(missing)}",
            parameter=missing[0],
        )


class DataConnectClient:
    """
    Session with a DataConnect server.

    The client owns the Flight connection and dispatches to the listing,
    fetching and publishing operations. It is not thread safe: use one
    client per thread or serialize the calls.
    """

    def __init__(
        self,
        host: str = DEFAULT_HOST,
        port: int = DEFAULT_PORT,
        use_tls: bool = True,
        token: str | None = None,
        permanent: bool = False,
        *,
        tls_root_certs: str | Path | None = None,
        resolve_public_ip: bool = True,
        flight_client: flight.FlightClient | None = None,
    ):
        """
        Initialize the client and connect to the server.

        Parameters:
            host: the server host name.
            port: the server port.
            use_tls: whether to use TLS.
            token: optional authentication token, which becomes the
                process-wide token (see `auth.set_token`).
            permanent: whether to also persist the token.
            tls_root_certs: optional path to a PEM bundle of root certificates.
            resolve_public_ip: whether to send the public IP in the headers.
            flight_client: use this FlightClient instead of connecting.
        """
        if token is not None:
            auth.set_token(token, permanent=permanent)
        self.resolve_public_ip = resolve_public_ip
        self.client = (
            flight_client
            if flight_client is not None
            else connect(host, port, use_tls, tls_root_certs=tls_root_certs)
        )

    def __enter__(self) -> DataConnectClient:
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying Flight connection."""
        self.client.close()

    def options(self) -> flight.FlightCallOptions:
        """Return fresh call options using the current token."""
        return call_options(resolve_public_ip=self.resolve_public_ip)

    def _listing(
        self,
        criteria: ListCriteria,
        max_pages: int,
        lazy: bool,
    ) -> PaginationSpec | list[Record]:
        if lazy:
            return PaginationSpec(
                client=self.client,
                criteria=criteria,
                max_pages=max_pages,
                options_factory=self.options,
            )
        return get_paginated_data(
            self.client,
            criteria,
            max_pages,
            options=self.options(),
            options_factory=self.options,
        )

    def study_environments(
        self,
        *,
        page_size: int = 100,
        max_pages: int = UNBOUNDED,
        lazy: bool = True,
    ) -> PaginationSpec | list[Record]:
        """
        List the study environments the token can access.

        Returns:
            A PaginationSpec when lazy is True, otherwise the list of records.
        """
        criteria = ListCriteria(flight_type=FlightType.STUDY_ENVIRONMENTS, page_size=page_size)
        return self._listing(criteria, max_pages, lazy)

    def datasets(
        self,
        study_uuid: str,
        study_environment_uuid: str,
        search_dataset_name: str = "",
        lazy: bool = True,
    ) -> PaginationSpec | list[Record]:
        """
        List the datasets of a study environment.

        Each record describing a dataset carries a DatasetRef under `frame`.

        Arguments:
            study_uuid: UUID of the study.
            study_environment_uuid: UUID of the study environment.
            search_dataset_name: optional full or partial dataset name.
            lazy: whether to return a PaginationSpec instead of a list.
        """
        _require(study_uuid=study_uuid, study_environment_uuid=study_environment_uuid)
        criteria = ListCriteria(
            flight_type=FlightType.DATASETS,
            study_uuid=study_uuid,
            study_environment_uuid=study_environment_uuid,
            search_dataset_name=search_dataset_name,
            page_size=SERVER_PAGE_SIZE,
        )
        return self._listing(criteria, UNBOUNDED, lazy)

    def dataset_versions(
        self,
        study_uuid: str,
        study_environment_uuid: str,
        dataset_uuid: str,
    ) -> list[Record]:
        """List the versions of a dataset. The server returns them in a single page."""
        _require(
            study_uuid=study_uuid,
            study_environment_uuid=study_environment_uuid,
            dataset_uuid=dataset_uuid,
        )
        criteria = ListCriteria(
            flight_type=FlightType.VERSIONS,
            study_uuid=study_uuid,
            study_environment_uuid=study_environment_uuid,
            dataset_uuid=dataset_uuid,
        )
        return get_paginated_data(
            self.client,
            criteria,
            1,
            options=self.options(),
            options_factory=self.options,
        )

    def fetch_data(
        self,
        study_uuid: str,
        study_environment_uuid: str,
        dataset_uuid: str,
    ) -> dict[str, Any]:
        """
        Return a record describing a dataset with a DatasetRef under `frame`.

        No rows are fetched until calling `collect` or `head` on the frame.
        """
        _require(
            study_uuid=study_uuid,
            study_environment_uuid=study_environment_uuid,
            dataset_uuid=dataset_uuid,
        )
        ticket = Ticket(
            study_uuid=study_uuid,
            study_environment_uuid=study_environment_uuid,
            dataset_uuid=dataset_uuid,
            dataset_name="",
        )
        return {
            "study_uuid": study_uuid,
            "study_environment_uuid": study_environment_uuid,
            "dataset_uuid": dataset_uuid,
            "frame": DatasetRef(self.client, ticket, options_factory=self.options),
        }

    def dry_publish(
        self,
        project_token: str,
        dataset_name: str,
        key_columns: list[str],
        source_datasets: list[str],
        data: pd.DataFrame | pa.Table,
    ) -> dict[str, Any]:
        """
        Validate the publishing parameters and the data schema without publishing.

        See `dataconnect.publish.dry_publish` for the returned value.
        """
        config = PublishConfig(
            project_token=project_token,
            dataset_name=dataset_name,
            key_columns=key_columns,
            source_datasets=source_datasets,
        )
        return dry_publish(self.client, config, data, options=self.options())

    def publish(
        self,
        project_token: str,
        dataset_name: str,
        key_columns: list[str],
        source_datasets: list[str],
        data: pd.DataFrame | pa.Table,
    ) -> dict[str, Any]:
        """
        Publish a dataset.

        See `dataconnect.publish.publish` for the returned value.
        """
        config = PublishConfig(
            project_token=project_token,
            dataset_name=dataset_name,
            key_columns=key_columns,
            source_datasets=source_datasets,
        )
        return publish(self.client, config, data, options=self.options())


def init(
    host: str = DEFAULT_HOST,
    port: int = DEFAULT_PORT,
    use_tls: bool = True,
    *,
    token: str,
    permanent: bool = False,
) -> DataConnectClient:
    """
    Create a DataConnectClient using the given token.

    Arguments:
        host: the server host name.
        port: the server port.
        use_tls: whether to use TLS.
        token: token generated from the Developer Center.
        permanent: whether to also persist the token.

    Raises:
        InvalidArgumentError: if the token is empty.
    """
    if not token:
        raise InvalidArgumentError("token cannot be empty", parameter="token")
    return DataConnectClient(host, port, use_tls, token=token, permanent=permanent)
