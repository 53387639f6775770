"""Tests for the dataconnect.flight.commands module."""

import json
from types import SimpleNamespace
from unittest.mock import MagicMock

import pyarrow as pa
import pyarrow.flight as flight
import pytest

from dataconnect.errors import InvalidArgumentError
from dataconnect.flight.commands import (
    do_command,
    do_put_command,
    execute_command,
    failure_result,
)


def _result(body: bytes) -> SimpleNamespace:
    return SimpleNamespace(body=body)


class TestExecuteCommand:
    """Tests for execute_command."""

    def test_decodes_json_results_in_order(self):
        client = MagicMock()
        client.do_action.return_value = iter([_result(b'{"a": 1}'), _result(b"[2, 3]")])

        results = execute_command(client, "ping", args={"x": 1})

        assert results == [{"a": 1}, [2, 3]]
        action = client.do_action.call_args[0][0]
        assert action.type == "ping"
        assert json.loads(action.body.to_pybytes()) == {"x": 1}

    def test_keeps_undecodable_results(self):
        raw = _result(b"\x00\x01 not json")
        client = MagicMock()
        client.do_action.return_value = iter([raw])

        assert execute_command(client, "ping") == [raw]

    def test_body_takes_precedence(self):
        client = MagicMock()
        client.do_action.return_value = iter([])

        assert execute_command(client, "ping", args={"x": 1}, body=b"raw") == []
        action = client.do_action.call_args[0][0]
        assert action.body.to_pybytes() == b"raw"

    def test_empty_body_without_args(self):
        client = MagicMock()
        client.do_action.return_value = iter([])

        execute_command(client, "ping")
        action = client.do_action.call_args[0][0]
        assert action.body.to_pybytes() == b""

    def test_empty_command(self):
        client = MagicMock()
        with pytest.raises(InvalidArgumentError):
            execute_command(client, "")
        client.do_action.assert_not_called()

    def test_transport_error_propagates(self):
        client = MagicMock()
        client.do_action.side_effect = flight.FlightUnavailableError("down")
        with pytest.raises(flight.FlightUnavailableError):
            execute_command(client, "ping")


class TestDoCommand:
    """Tests for do_command."""

    def test_returns_none_on_failure(self):
        client = MagicMock()
        client.do_action.side_effect = flight.FlightUnavailableError("down")
        assert do_command(client, "ping") is None

    def test_empty_result_is_not_failure(self):
        client = MagicMock()
        client.do_action.return_value = iter([])
        assert do_command(client, "ping") == []


class TestFailureResult:
    """Tests for failure_result."""

    def test_shape(self):
        result = failure_result(RuntimeError("VALIDATION_ERROR: dataset name too long"))
        assert result["success"] is False
        assert result["error_type"] == "VALIDATION"
        assert result["error_message"] == "VALIDATION_ERROR: dataset name too long"
        assert "RuntimeError" in result["original_error"]


class TestDoPutCommand:
    """Tests for do_put_command."""

    @pytest.fixture
    def table(self) -> pa.Table:
        return pa.table({"subjid": ["1", "2"], "value": [1.0, 2.0]})

    @pytest.fixture
    def client(self):
        client = MagicMock()
        client.do_put.return_value = (MagicMock(), MagicMock())
        return client

    def test_writes_table(self, client, table):
        result = do_put_command(client, b'{"dataset_name": "adsl"}', table)

        assert result == {"success": True, "message": "Dataset published successfully"}
        descriptor, schema = client.do_put.call_args[0]
        assert descriptor.path == [b'{"dataset_name": "adsl"}']
        assert schema == table.schema
        writer = client.do_put.return_value[0]
        writer.write_table.assert_called_once_with(table)
        writer.close.assert_called_once()

    def test_writes_batch(self, client, table):
        batch = table.to_batches()[0]
        do_put_command(client, b"{}", batch)
        client.do_put.return_value[0].write_batch.assert_called_once_with(batch)

    def test_schema_only(self, client, table):
        do_put_command(client, b"{}", table.schema)
        writer = client.do_put.return_value[0]
        writer.write_table.assert_not_called()
        writer.write_batch.assert_not_called()
        writer.close.assert_called_once()

    def test_write_failure_closes_writer(self, client, table):
        writer = client.do_put.return_value[0]
        writer.write_table.side_effect = pa.ArrowInvalid("schema mismatch")

        result = do_put_command(client, b"{}", table)

        assert result["success"] is False
        assert result["error_type"] == "SERVER_ERROR"
        writer.close.assert_called_once()

    def test_failure(self, client, table):
        client.do_put.side_effect = flight.FlightServerError("NOT_FOUND: project")
        result = do_put_command(client, b"{}", table)
        assert result["success"] is False
        assert result["error_type"] == "NOT_FOUND"

    @pytest.mark.parametrize(
        "args,parameter",
        [
            ((None, b"{}", pa.table({"a": [1]})), "client"),
            ((MagicMock(), None, pa.table({"a": [1]})), "config"),
            ((MagicMock(), b"{}", None), "data"),
            ((MagicMock(), b"{}", [1, 2, 3]), "data"),
        ],
    )
    def test_invalid_arguments(self, args, parameter):
        with pytest.raises(InvalidArgumentError) as excinfo:
            do_put_command(*args)
        assert excinfo.value.parameter == parameter
