"""Module containing the publish configuration."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

from ..errors import InvalidArgumentError
from .keys import normalize_key_columns


@dataclass(frozen=True, kw_only=True)
class PublishConfig:
    """
    Configuration sent along with a dry-publish or publish request.

    The server enforces the dataset name format (at most 15 alphanumeric
    or underscore characters) and the existence of the source datasets.

    Attributes:
        project_token: token of the target project.
        dataset_name: name of the dataset to publish.
        key_columns: non-empty list of key column names, matched
            case-insensitively against the data columns.
        source_datasets: UUIDs of the datasets the data derives from.
        dataset_description: description, defaults to the dataset name.
    """

    project_token: str
    dataset_name: str
    key_columns: list[str]
    source_datasets: list[str] = field(default_factory=list)
    dataset_description: str | None = None

    def __post_init__(self):
        if not self.project_token:
            raise InvalidArgumentError("project_token must be provided", parameter="project_token")
        if not self.dataset_name:
            raise InvalidArgumentError("dataset_name must be provided", parameter="dataset_name")
        if not isinstance(self.key_columns, (list, tuple)) or not normalize_key_columns(
            self.key_columns
        ):
            raise InvalidArgumentError(
                "key_columns must be a non-empty list",
                parameter="key_columns",
            )
        if self.source_datasets is None:
            raise InvalidArgumentError(
                "source_datasets must be provided",
                parameter="source_datasets",
            )

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON object the server expects."""
        return {
            "project_token": self.project_token,
            "dataset_name": self.dataset_name,
            "dataset_description": self.dataset_description or self.dataset_name,
            "key_columns": normalize_key_columns(self.key_columns),
            "source_datasets": list(self.source_datasets),
        }

    def to_json(self) -> bytes:
        """Return the UTF-8 JSON serialization of this configuration."""
        return json.dumps(self.to_dict()).encode("utf-8")
