"""Module to load and persist the DataConnect client settings.

The settings live in a YAML file, by default:

    $XDG_CONFIG_HOME/dataconnect/config.yaml

where `$XDG_CONFIG_HOME` defaults to `~/.config`. Setting the
`DATACONNECT_CONFIG` environment variable overrides the path.

A missing file is equivalent to an empty file: we use the defaults.
"""

from __future__ import annotations

import dataclasses
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from tempfile import TemporaryDirectory
from typing import Final

import dacite
import yaml
from filelock import FileLock

DEFAULT_HOST: Final[str] = "enodia-gateway.platform.imedidata.com"
DEFAULT_PORT: Final[int] = 443

CONFIG_ENV_VAR: Final[str] = "DATACONNECT_CONFIG"

log = logging.getLogger("settings")


@dataclass(frozen=True, kw_only=True)
class DataConnectSettings:
    """
    Settings used to connect to the DataConnect service.

    Attributes:
        host: the Flight server host name.
        port: the Flight server port.
        use_tls: whether to use TLS (`grpc+tls`) or plaintext (`grpc+tcp`).
        token: optional persisted authentication token.
        tls_root_certs: optional path to a PEM bundle of root certificates.
        resolve_public_ip: whether to look up the public IP for the request headers.
    """

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    use_tls: bool = True
    token: str | None = None
    tls_root_certs: str | None = None
    resolve_public_ip: bool = True


def settings_path(path: str | Path | None = None) -> Path:
    """
    Return path as a Path if not None. Otherwise return the
    default location of the settings file.
    """
    if path is not None:
        return Path(path)
    override = os.getenv(CONFIG_ENV_VAR)
    if override:
        return Path(override)
    base = os.getenv("XDG_CONFIG_HOME") or str(Path.home() / ".config")
    return Path(base) / "dataconnect" / "config.yaml"


def load_settings(path: str | Path | None = None) -> DataConnectSettings:
    """
    Load the settings from the given YAML file.

    Raises:
        ValueError: if the file is not valid YAML or contains unknown
            or wrongly-typed fields.
    """
    resolved = settings_path(path)
    if not resolved.exists():
        return DataConnectSettings()

    try:
        data = yaml.safe_load(resolved.read_text()) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in {resolved}: {exc}") from exc

    if not isinstance(data, dict):
        raise ValueError(f"Invalid settings in {resolved}: expected a mapping")

    try:
        return dacite.from_dict(DataConnectSettings, data, config=dacite.Config(strict=True))
    except dacite.DaciteError as exc:
        raise ValueError(f"Invalid settings in {resolved}: {exc}") from exc


def _lock(resolved: Path) -> FileLock:
    """Return the FileLock guarding writes to the given settings file."""
    resolved.parent.mkdir(parents=True, exist_ok=True)
    return FileLock(resolved.with_name(resolved.name + ".lock"))


def _write(settings: DataConnectSettings, resolved: Path) -> None:
    # Use a temporary directory, which is always removed regardless
    # of whether there's still a temporary file inside it
    content = yaml.safe_dump(dataclasses.asdict(settings), sort_keys=False)
    with TemporaryDirectory(dir=resolved.parent) as tmp_dir:
        tmp_file = Path(tmp_dir) / resolved.name
        tmp_file.write_text(content)
        tmp_file.chmod(0o600)
        os.replace(tmp_file, resolved)
    log.debug("saved settings to %s", resolved)


def save_settings(settings: DataConnectSettings, path: str | Path | None = None) -> Path:
    """Atomically write the settings to the given YAML file and return its path."""
    resolved = settings_path(path)
    with _lock(resolved):
        _write(settings, resolved)
    return resolved


def update_settings(path: str | Path | None = None, **changes) -> DataConnectSettings:
    """
    Load the settings, apply the given changes, save and return them.

    The whole sequence holds the settings lock, so concurrent updates
    of different fields are not lost.
    """
    resolved = settings_path(path)
    with _lock(resolved):
        settings = dataclasses.replace(load_settings(resolved), **changes)
        _write(settings, resolved)
    return settings
