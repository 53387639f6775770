"""Module containing tickets and listing criteria."""

from __future__ import annotations

import dataclasses
import json
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, Final

DEFAULT_PAGE_SIZE: Final[int] = 100
"""Page size used when the criteria do not specify one."""

SERVER_PAGE_SIZE: Final[int] = -1
"""Page size letting the server decide how many items to return."""

UNBOUNDED: Final[int] = -1
"""Value of max_pages meaning that we do not limit the number of pages."""


class FlightType(str, Enum):
    """Enumerate the kinds of resources we can list."""

    STUDY_ENVIRONMENTS = "STUDY_ENVIRONMENTS"
    DATASETS = "DATASETS"
    VERSIONS = "VERSIONS"


@dataclass(frozen=True, kw_only=True)
class Ticket:
    """
    Locator of a dataset the server knows how to stream.

    Attributes:
        study_uuid: UUID of the study.
        study_environment_uuid: UUID of the study environment.
        dataset_uuid: UUID of the dataset.
        dataset_name: optional display name of the dataset.
        limit: optional maximum number of rows to stream.
    """

    study_uuid: str
    study_environment_uuid: str
    dataset_uuid: str
    dataset_name: str | None = None
    limit: int | None = None

    @classmethod
    def from_ticket_data(cls, data: Mapping[str, Any]) -> Ticket:
        """
        Build a Ticket from the JSON object embedded in a FlightInfo ticket.

        Raises:
            KeyError: if a UUID is missing. The study environment UUID may
                be under either `study_env_uuid` or `study_environment_uuid`.
        """
        env_uuid = data.get("study_env_uuid") or data.get("study_environment_uuid")
        if not env_uuid:
            raise KeyError("study_env_uuid")
        return cls(
            study_uuid=data["study_uuid"],
            study_environment_uuid=env_uuid,
            dataset_uuid=data["dataset_uuid"],
            dataset_name=data.get("dataset_name"),
        )

    def with_limit(self, limit: int | None) -> Ticket:
        """Return a copy of this ticket using the given row limit."""
        return dataclasses.replace(self, limit=limit)

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON object the server expects."""
        data: dict[str, Any] = {
            "study_uuid": self.study_uuid,
            "study_env_uuid": self.study_environment_uuid,
            "dataset_uuid": self.dataset_uuid,
        }
        if self.dataset_name is not None:
            data["dataset_name"] = self.dataset_name
        if self.limit is not None:
            data["limit"] = self.limit
        return data

    def to_json(self) -> bytes:
        """Return the UTF-8 JSON serialization of this ticket."""
        return json.dumps(self.to_dict()).encode("utf-8")


@dataclass(kw_only=True)
class ListCriteria:
    """
    Criteria for listing flights.

    Only the page field changes while paginating.

    Attributes:
        flight_type: the kind of resources to list.
        study_uuid: optional study filter.
        study_environment_uuid: optional study environment filter.
        dataset_uuid: optional dataset filter.
        search_dataset_name: optional full or partial dataset name.
        page_size: items per page, None means DEFAULT_PAGE_SIZE and
            SERVER_PAGE_SIZE lets the server decide.
        page: the 1-based page number.
    """

    flight_type: FlightType
    study_uuid: str | None = None
    study_environment_uuid: str | None = None
    dataset_uuid: str | None = None
    search_dataset_name: str | None = None
    page_size: int | None = None
    page: int = 1

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON object the server expects, omitting unset filters."""
        data: dict[str, Any] = {"flight_type": self.flight_type.value}
        for name in (
            "study_uuid",
            "study_environment_uuid",
            "dataset_uuid",
            "search_dataset_name",
        ):
            value = getattr(self, name)
            if value is not None:
                data[name] = value
        data["page_size"] = self.page_size if self.page_size is not None else DEFAULT_PAGE_SIZE
        data["page"] = self.page
        return data

    def to_json(self) -> bytes:
        """Return the UTF-8 JSON serialization of these criteria."""
        return json.dumps(self.to_dict()).encode("utf-8")
