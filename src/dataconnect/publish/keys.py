"""Module to validate key columns against in-memory data."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

import pandas as pd
import pyarrow as pa

from ..errors import InvalidArgumentError, KeyColumnsNotFoundError


def normalize_key_columns(key_columns: Any) -> list[str]:
    """
    Flatten key_columns into an ordered list of strings.

    Accepts a single name, a flat list, or arbitrarily nested lists
    and tuples (e.g., `[["subjid", "visit"]]`).
    """
    if key_columns is None:
        return []
    if isinstance(key_columns, str):
        return [key_columns]
    if isinstance(key_columns, Iterable):
        flat: list[str] = []
        for item in key_columns:
            flat.extend(normalize_key_columns(item))
        return flat
    return [str(key_columns)]


def match_key_columns(columns: Iterable[str], key_columns: Any) -> list[str]:
    """
    Match key_columns case-insensitively against the given column names.

    Returns:
        The matching column names, spelled as in the data.

    Raises:
        KeyColumnsNotFoundError: naming every key column without a match.
    """
    lookup: dict[str, str] = {}
    for column in columns:
        lookup.setdefault(str(column).lower(), str(column))

    matched, missing = [], []
    for key in normalize_key_columns(key_columns):
        column = lookup.get(key.lower())
        if column is None:
            missing.append(key)
        else:
            matched.append(column)

    if missing:
        raise KeyColumnsNotFoundError(missing)
    return matched


def _hashable(value: Any) -> Any:
    """Convert list-like and mapping cells into tuples so they compare by value."""
    if isinstance(value, Mapping):
        return tuple((key, _hashable(item)) for key, item in value.items())
    if isinstance(value, (list, tuple)):
        return tuple(_hashable(item) for item in value)
    # numpy arrays produced by to_pandas() for Arrow list columns
    if hasattr(value, "tolist") and getattr(value, "ndim", 0) > 0:
        return _hashable(value.tolist())
    return value


def count_distinct_rows(data: pd.DataFrame | pa.Table, key_columns: Any) -> int:
    """
    Count the distinct rows of data considering only the key columns.

    The result is 0 for empty data, the number of rows when all rows
    are unique, and 1 when all rows share the same key values. List and
    struct cells compare by value.

    Raises:
        KeyColumnsNotFoundError: if any key column is not in the data.
    """
    columns = data.column_names if isinstance(data, pa.Table) else data.columns
    matched = list(dict.fromkeys(match_key_columns(columns, key_columns)))
    if not matched:
        raise InvalidArgumentError("key_columns must be a non-empty list", parameter="key_columns")
    if isinstance(data, pa.Table):
        frame = data.select(matched).to_pandas()
    else:
        frame = data.loc[:, matched]
    if len(frame) == 0:
        return 0
    frame = frame.apply(lambda column: column.map(_hashable) if column.dtype == object else column)
    return len(frame.drop_duplicates())
