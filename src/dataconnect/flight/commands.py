"""Module to execute commands on the Arrow Flight server.

Commands travel as Flight actions: the action type is the command name
and the action body is an opaque payload. When no pre-formatted body is
given, we JSON-encode the arguments (or send an empty body).

Each result unit whose body is UTF-8 JSON is decoded; any other unit is
kept as the raw `pyarrow.flight.Result`.
"""

from __future__ import annotations

import json
import logging
import traceback
from collections.abc import Mapping
from typing import Any

import pyarrow as pa
import pyarrow.flight as flight

from ..errors import InvalidArgumentError, handle_flight_error
from .options import call_options

log = logging.getLogger("flight/commands")


def _options_or_default(options: flight.FlightCallOptions | None) -> flight.FlightCallOptions:
    return options if options is not None else call_options()


def _action_body(args: Mapping[str, Any] | None, body: bytes | None) -> bytes:
    if body is not None:
        return body
    if args:
        return json.dumps(args).encode("utf-8")
    return b""


def _as_bytes(body: Any) -> bytes:
    if isinstance(body, bytes):
        return body
    if hasattr(body, "to_pybytes"):
        return body.to_pybytes()
    return bytes(body)


def _decode_result(result: Any) -> Any:
    """Decode a single result unit as JSON when possible, else return it unchanged."""
    body = getattr(result, "body", None)
    try:
        if body is not None:
            return json.loads(_as_bytes(body).decode("utf-8"))
        if isinstance(result, (bytes, str)):
            return json.loads(result)
    except (TypeError, ValueError) as exc:
        log.debug("keeping raw result: %s", exc)
    return result


def execute_command(
    client: flight.FlightClient,
    command: str,
    *,
    args: Mapping[str, Any] | None = None,
    body: bytes | None = None,
    options: flight.FlightCallOptions | None = None,
) -> list[Any]:
    """
    Execute the given command and return the decoded results in arrival order.

    Arguments:
        client: the FlightClient to use.
        command: the command name (i.e., the action type).
        args: arguments to JSON-encode into the action body.
        body: pre-formatted action body, takes precedence over args.
        options: call options, defaults to `call_options()`.

    Raises:
        InvalidArgumentError: if the command is empty.
        Exception: any transport error raised by pyarrow.
    """
    if not command:
        raise InvalidArgumentError("command must be provided", parameter="command")

    action = flight.Action(command, _action_body(args, body))
    results = client.do_action(action, options=_options_or_default(options))
    return [_decode_result(result) for result in results]


def do_command(
    client: flight.FlightClient,
    command: str,
    *,
    args: Mapping[str, Any] | None = None,
    body: bytes | None = None,
    options: flight.FlightCallOptions | None = None,
) -> list[Any] | None:
    """
    Like `execute_command` but transport errors are logged and we return None.

    A None return value means that no result could be obtained, which is
    different from an empty list meaning that the server returned no units.

    Raises:
        InvalidArgumentError: if the command is empty.
    """
    if not command:
        raise InvalidArgumentError("command must be provided", parameter="command")
    try:
        return execute_command(client, command, args=args, body=body, options=options)
    except Exception as exc:
        log.warning("executing command %s... failure: %s", command, exc)
        return None


def failure_result(exc: BaseException) -> dict[str, Any]:
    """Return the structured failure result for the given exception."""
    info = handle_flight_error(exc)
    return {
        "success": False,
        "error_type": info.kind.value,
        "error_message": info.message,
        "original_error": "".join(traceback.format_exception(exc)),
    }


def do_put_command(
    client: flight.FlightClient,
    config_json: bytes,
    data: pa.Table | pa.RecordBatch | pa.Schema,
    *,
    options: flight.FlightCallOptions | None = None,
) -> dict[str, Any]:
    """
    Upload data to the server using a Flight put.

    The descriptor path carries the serialized publish configuration. When
    data is a Schema we only negotiate the stream and write no rows.

    Returns:
        A dict with `success` and `message` on success or the structured
        failure produced by `failure_result` on failure.

    Raises:
        InvalidArgumentError: if a parameter is missing or has the wrong type.
    """
    if client is None:
        raise InvalidArgumentError("client must be provided", parameter="client")
    if config_json is None:
        raise InvalidArgumentError("config must be provided", parameter="config")
    if data is None:
        raise InvalidArgumentError("data must be provided", parameter="data")
    if not isinstance(data, (pa.Table, pa.RecordBatch, pa.Schema)):
        raise InvalidArgumentError(
            "data must be an Arrow Table, RecordBatch, or Schema",
            parameter="data",
        )

    schema = data if isinstance(data, pa.Schema) else data.schema

    try:
        log.info("uploading dataset... start")
        descriptor = flight.FlightDescriptor.for_path(config_json)
        writer, _ = client.do_put(descriptor, schema, options=_options_or_default(options))
        try:
            if isinstance(data, pa.Table):
                writer.write_table(data)
            elif isinstance(data, pa.RecordBatch):
                writer.write_batch(data)
        finally:
            writer.close()
        log.info("uploading dataset... ok")
        return {"success": True, "message": "Dataset published successfully"}

    except Exception as exc:
        log.warning("uploading dataset... failure: %s", exc)
        return failure_result(exc)
