"""Module implementing the dry-publish and publish operations."""

from __future__ import annotations

import logging
from typing import Any

import pandas as pd
import pyarrow as pa
import pyarrow.flight as flight

from ..errors import FlightErrorKind, InvalidArgumentError, KeyColumnsNotFoundError
from ..flight.commands import do_put_command, execute_command, failure_result
from .config import PublishConfig
from .keys import count_distinct_rows

DRY_PUBLISH_COMMAND = "dry_publish"

log = logging.getLogger("publish/pipeline")


def _validate(client: Any, config: Any, data: Any) -> None:
    if client is None:
        raise InvalidArgumentError("client must be provided", parameter="client")
    if config is None:
        raise InvalidArgumentError("config must be provided", parameter="config")
    if not isinstance(config, PublishConfig):
        raise InvalidArgumentError("config must be a PublishConfig", parameter="config")
    if data is None:
        raise InvalidArgumentError("data must be provided", parameter="data")
    if not isinstance(data, (pd.DataFrame, pa.Table)):
        raise InvalidArgumentError(
            "data must be a pandas DataFrame or an Arrow Table",
            parameter="data",
        )


def _to_arrow(data: pd.DataFrame | pa.Table) -> pa.Table:
    if isinstance(data, pa.Table):
        return data
    return pa.Table.from_pandas(data, preserve_index=False)


def append_key_counts(
    response: dict[str, Any],
    data: pd.DataFrame | pa.Table,
    key_columns: Any,
) -> dict[str, Any]:
    """
    Add the `valid_rows` and `duplicate_rows_based_on_keys` fields to response.

    The counts are computed locally and are advisory. When the key columns
    do not match the data we log and leave the response unchanged.
    """
    try:
        distinct = count_distinct_rows(data, key_columns)
    except KeyColumnsNotFoundError as exc:
        log.warning("cannot count duplicate rows: %s", exc)
        return response
    response["valid_rows"] = distinct
    response["duplicate_rows_based_on_keys"] = len(data) - distinct
    return response


def dry_publish_body(config: PublishConfig, schema: pa.Schema) -> bytes:
    """Return the dry-publish payload: config JSON, a blank line, and the IPC schema."""
    return config.to_json() + b"\n\n" + schema.serialize().to_pybytes()


def dry_publish(
    client: flight.FlightClient,
    config: PublishConfig,
    data: pd.DataFrame | pa.Table,
    *,
    options: flight.FlightCallOptions | None = None,
) -> dict[str, Any]:
    """
    Validate the configuration and the data schema without publishing rows.

    Arguments:
        client: the FlightClient to use.
        config: the publish configuration.
        data: the data whose schema we validate.
        options: call options, defaults to `call_options()`.

    Returns:
        The server response, augmented with the key-column counts, or a
        structured failure when the server could not be reached.

    Raises:
        InvalidArgumentError: if a parameter is missing or has the wrong type.
    """
    _validate(client, config, data)

    table = _to_arrow(data)
    if table.num_rows == 0:
        log.warning("uploading empty dataset")

    body = dry_publish_body(config, table.schema)

    try:
        log.info("dry publishing %s... start", config.dataset_name)
        result = execute_command(client, DRY_PUBLISH_COMMAND, body=body, options=options)
    except Exception as exc:
        log.warning("dry publishing %s... failure: %s", config.dataset_name, exc)
        return failure_result(exc)
    log.info("dry publishing %s... ok", config.dataset_name)

    if not result or not isinstance(result[0], dict):
        log.warning("no processed result from %s, returning raw result", DRY_PUBLISH_COMMAND)
        return {
            "success": False,
            "error_type": FlightErrorKind.SERVER_ERROR.value,
            "error_message": f"{DRY_PUBLISH_COMMAND} returned no JSON response",
            "original_error": repr(result),
        }

    return append_key_counts(result[0], data, config.key_columns)


def publish(
    client: flight.FlightClient,
    config: PublishConfig,
    data: pd.DataFrame | pa.Table,
    *,
    options: flight.FlightCallOptions | None = None,
) -> dict[str, Any]:
    """
    Upload the data with the given configuration.

    Empty data is uploaded as well, after logging a warning.

    Returns:
        A dict with `success` set to True and the key-column counts, or the
        structured failure result, which never carries the counts.

    Raises:
        InvalidArgumentError: if a parameter is missing or has the wrong type.
    """
    _validate(client, config, data)

    table = _to_arrow(data)
    if table.num_rows == 0:
        log.warning("uploading empty dataset")

    result = do_put_command(client, config.to_json(), table, options=options)
    if not result.get("success"):
        return result

    return append_key_counts(result, data, config.key_columns)
