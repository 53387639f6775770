"""Optional scripting extensions to create a DataConnectClient."""

from __future__ import annotations

from pathlib import Path

from .. import DataConnectClient, auth
from ..settings import load_settings
from .dc_logging import log


def create(
    config_path: str | Path | None = None,
    *,
    token: str | None = None,
) -> DataConnectClient:
    """
    Helper function to create a DataConnectClient from the settings file.

    Arguments:
       config_path: the settings file or None, in which case we use the default.
       token: optional token overriding the environment and the settings.

    Returns:
       A connected DataConnectClient.

    Raises:
        ValueError: if the settings file is invalid.
    """
    settings = load_settings(config_path)
    token = token or auth.get_token(config_path)
    if not token:
        log.warning("no token configured: requests will not be authenticated")

    log.info("connecting to %s:%d... start", settings.host, settings.port)
    client = DataConnectClient(
        settings.host,
        settings.port,
        settings.use_tls,
        token=token,
        tls_root_certs=settings.tls_root_certs,
        resolve_public_ip=settings.resolve_public_ip,
    )
    log.info("connecting to %s:%d... ok", settings.host, settings.port)
    return client
