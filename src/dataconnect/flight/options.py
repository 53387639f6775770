"""Module to build the call options attached to every Flight call."""

from __future__ import annotations

import functools
import logging
import socket
import uuid
from dataclasses import dataclass
from importlib.metadata import PackageNotFoundError, version
from typing import Final

import pyarrow.flight as flight
import requests

from .. import auth

CLIENT_VERSION_HEADER: Final[str] = "x-client-dataconnect-py-version"

_PUBLIC_IP_SERVICES: Final[tuple[str, ...]] = (
    "https://api.ipify.org",
    "https://ifconfig.me",
    "https://icanhazip.com",
)

_UNKNOWN: Final[str] = "NA"

log = logging.getLogger("flight/options")


@dataclass(frozen=True, kw_only=True)
class NetworkIdentity:
    """
    Best-effort description of the machine running the client.

    Attributes:
        local_ip: the local IP address or "NA".
        public_ip: the public IP address or "NA".
        mac: the MAC address or None when we could not find a real one.
    """

    local_ip: str = _UNKNOWN
    public_ip: str = _UNKNOWN
    mac: str | None = None


def client_version() -> str:
    """Return the installed package version string."""
    try:
        return version("dataconnect")
    except PackageNotFoundError:
        return "0.0.0"


def _local_ip() -> str:
    # Connecting a UDP socket sends no packets, it only selects the route
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
            sock.connect(("8.8.8.8", 80))
            return sock.getsockname()[0]
    except OSError as exc:
        log.debug("cannot determine local IP: %s", exc)
        return _UNKNOWN


def _mac_address() -> str | None:
    node = uuid.getnode()
    # Bit 40 set means getnode() fell back to a random number
    if node == 0 or (node >> 40) & 1:
        return None
    mac_hex = f"{node:012x}"
    mac = ":".join(mac_hex[i : i + 2] for i in range(0, 12, 2))
    if mac.startswith("00:00:00"):
        return None
    return mac


def _public_ip(timeout: float = 3) -> str:
    for service in _PUBLIC_IP_SERVICES:
        try:
            resp = requests.get(service, timeout=timeout)
            resp.raise_for_status()
        except requests.RequestException as exc:
            log.debug("cannot get public IP from %s: %s", service, exc)
            continue
        public_ip = resp.text.strip()
        if public_ip:
            return public_ip
    return _UNKNOWN


@functools.cache
def network_identity(resolve_public_ip: bool = True) -> NetworkIdentity:
    """Return the NetworkIdentity of this machine, computed once per process."""
    return NetworkIdentity(
        local_ip=_local_ip(),
        public_ip=_public_ip() if resolve_public_ip else _UNKNOWN,
        mac=_mac_address(),
    )


def call_headers(
    token: str | None = None,
    *,
    resolve_public_ip: bool = True,
) -> list[tuple[bytes, bytes]]:
    """
    Return the headers to attach to a Flight call.

    When token is None we use the process-wide token (see `auth.get_token`).
    The authorization header is omitted when there is no token.
    """
    identity = network_identity(resolve_public_ip)
    headers = [
        (CLIENT_VERSION_HEADER.encode(), client_version().encode()),
        (b"x-client-local-ip", identity.local_ip.encode()),
        (b"x-client-public-ip", identity.public_ip.encode()),
    ]
    if identity.mac is not None:
        headers.append((b"x-client-mac", identity.mac.encode()))

    token = token if token is not None else auth.get_token()
    if token:
        headers.append((b"authorization", f"Bearer {token}".encode()))
    return headers


def call_options(
    token: str | None = None,
    *,
    resolve_public_ip: bool = True,
) -> flight.FlightCallOptions:
    """Return FlightCallOptions carrying the headers built by `call_headers`."""
    return flight.FlightCallOptions(
        headers=call_headers(token, resolve_public_ip=resolve_public_ip),
    )
