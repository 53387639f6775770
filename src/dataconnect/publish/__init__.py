"""Package for publishing datasets.

Publishing happens in two phases:

1. `dry_publish` sends the configuration and the data schema (no rows)
   through the `dry_publish` command so that the server can validate them;

2. `publish` uploads the configuration and the full data through a
   Flight put, whose descriptor path carries the configuration JSON.

Both operations annotate a successful response with `valid_rows` (the
number of distinct rows under the key columns) and
`duplicate_rows_based_on_keys` (the number of rows minus `valid_rows`).
These counts are computed locally by `count_distinct_rows`.

Dry-Publish Payload
-------------------

The dry-publish action body is:

    UTF8(JSON(config)) + b"\\n\\n" + IPC(schema)

where the config JSON has the following shape:

    {
      "project_token": "...",
      "dataset_name": "...",
      "dataset_description": "...",
      "key_columns": ["subjid", "visit"],
      "source_datasets": ["<uuid>", ...]
    }
"""

from .config import PublishConfig
from .keys import count_distinct_rows, match_key_columns, normalize_key_columns
from .pipeline import append_key_counts, dry_publish, dry_publish_body, publish

__all__ = [
    "PublishConfig",
    "append_key_counts",
    "count_distinct_rows",
    "dry_publish",
    "dry_publish_body",
    "match_key_columns",
    "normalize_key_columns",
    "publish",
]
