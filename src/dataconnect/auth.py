"""Module managing the process-wide authentication token.

The current token lives in the `DATACONNECT_TOKEN` environment variable,
so that child processes inherit it. A token can optionally be persisted
into the settings file (see `dataconnect.settings`), in which case it
is used when the environment variable is not set.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Final

from .errors import InvalidArgumentError
from .settings import load_settings, update_settings

TOKEN_ENV_VAR: Final[str] = "DATACONNECT_TOKEN"

log = logging.getLogger("auth")


def set_token(
    token: str | None,
    *,
    permanent: bool = False,
    config_path: str | Path | None = None,
) -> None:
    """
    Set the authentication token for the current process.

    Arguments:
        token: the token generated from the Developer Center.
        permanent: also persist the token into the settings file.
        config_path: optional settings file path.

    Raises:
        InvalidArgumentError: if the token is empty.
    """
    if not token:
        raise InvalidArgumentError("token cannot be empty", parameter="token")

    os.environ[TOKEN_ENV_VAR] = token

    if not permanent:
        log.info("token set for current session")
        return

    try:
        update_settings(config_path, token=token)
    except (OSError, ValueError) as exc:
        log.warning("cannot persist token: %s; token set for current session only", exc)
        return
    log.info("token persisted to the settings file")


def get_token(config_path: str | Path | None = None) -> str | None:
    """Return the current token or None if we don't have a token."""
    token = os.getenv(TOKEN_ENV_VAR)
    if token:
        return token
    try:
        return load_settings(config_path).token or None
    except ValueError as exc:
        log.warning("cannot load persisted token: %s", exc)
        return None


def clear_token(*, permanent: bool = False, config_path: str | Path | None = None) -> None:
    """Forget the current token and, when permanent, the persisted one."""
    os.environ.pop(TOKEN_ENV_VAR, None)
    if permanent:
        update_settings(config_path, token=None)
