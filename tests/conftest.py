"""Shared pytest fixtures for DataConnect tests."""

from __future__ import annotations

import json
from pathlib import Path
from types import SimpleNamespace
from typing import Any

import pyarrow as pa
import pytest

from dataconnect.auth import TOKEN_ENV_VAR
from dataconnect.flight.options import NetworkIdentity


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    """Keep tests away from the user settings, the user token and the network."""
    config_path = tmp_path / "config" / "config.yaml"
    monkeypatch.setenv("DATACONNECT_CONFIG", str(config_path))
    # setenv records the original value so that teardown undoes set_token
    monkeypatch.setenv(TOKEN_ENV_VAR, "")
    identity = NetworkIdentity(local_ip="10.0.0.7", mac="aa:bb:cc:dd:ee:ff")
    monkeypatch.setattr(
        "dataconnect.flight.options.network_identity",
        lambda resolve_public_ip=True: identity,
    )
    return config_path


def make_flight_info(ticket: dict[str, Any] | bytes, total_records: int = -1) -> SimpleNamespace:
    """Create an object shaped like a pyarrow.flight.FlightInfo."""
    raw = ticket if isinstance(ticket, bytes) else json.dumps(ticket).encode("utf-8")
    endpoint = SimpleNamespace(ticket=SimpleNamespace(ticket=raw))
    return SimpleNamespace(endpoints=[endpoint], total_records=total_records)


class FakeStreamReader:
    """Implement the read_chunk protocol of pyarrow.flight.FlightStreamReader."""

    def __init__(self, batches: list[pa.RecordBatch], schema: pa.Schema) -> None:
        self._batches = list(batches)
        self.schema = schema

    def read_chunk(self) -> SimpleNamespace:
        if not self._batches:
            raise StopIteration
        return SimpleNamespace(data=self._batches.pop(0), app_metadata=None)


class FakeFlightClient:
    """
    Fake pyarrow.flight.FlightClient recording every call.

    Attributes:
        pages: list_flights pages, the last page repeats when exhausted
            unless it is empty.
        infinite: when True, every page request returns pages[0].
    """

    def __init__(
        self,
        *,
        pages: list[list[Any]] | None = None,
        infinite: bool = False,
        action_results: list[Any] | None = None,
        batches: list[pa.RecordBatch] | None = None,
        schema: pa.Schema | None = None,
    ) -> None:
        self.pages = pages or []
        self.infinite = infinite
        self.action_results = action_results or []
        self.batches = batches or []
        self.schema = schema if schema is not None else pa.schema([])
        self.list_calls: list[dict[str, Any]] = []
        self.actions: list[Any] = []
        self.tickets: list[dict[str, Any]] = []
        self.closed = False

    def list_flights(self, criteria: bytes, options=None):
        _ = options
        decoded = json.loads(criteria.decode("utf-8"))
        self.list_calls.append(decoded)
        if self.infinite:
            return iter(self.pages[0])
        index = decoded["page"] - 1
        return iter(self.pages[index] if index < len(self.pages) else [])

    def do_action(self, action, options=None):
        _ = options
        self.actions.append(action)
        return iter(self.action_results)

    def do_get(self, ticket, options=None):
        _ = options
        self.tickets.append(json.loads(ticket.ticket.decode("utf-8")))
        return FakeStreamReader(self.batches, self.schema)

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def dataset_ticket() -> dict[str, Any]:
    """Return the JSON ticket the server embeds for a dataset."""
    return {
        "study_uuid": "e2143dd5-2ca7-4b1d-9973-20d166f9a560",
        "study_env_uuid": "cec1f2a7-07ba-4fa8-bfcf-34fbc5d56793",
        "dataset_uuid": "9c1b54aa-0f0b-4a5c-8a7e-3d2c1b0a9f8e",
        "dataset_name": "adsl",
    }


@pytest.fixture
def make_info():
    """Return a factory of objects shaped like pyarrow.flight.FlightInfo."""
    return make_flight_info


@pytest.fixture
def fake_client():
    """Return the FakeFlightClient class, to instantiate with the test data."""
    return FakeFlightClient
