"""Module to create Arrow Flight clients."""

from __future__ import annotations

import logging
import ssl
import sys
from pathlib import Path

import pyarrow.flight as flight

log = logging.getLogger("flight/connection")


def flight_uri(host: str, port: int, use_tls: bool = False) -> str:
    """Return the `grpc+tls://` or `grpc+tcp://` URI of the given server."""
    scheme = "grpc+tls" if use_tls else "grpc+tcp"
    return f"{scheme}://{host}:{port}"


def windows_root_certs() -> str:
    """
    Return the Windows system root certificates as a PEM bundle.

    On Mac and Linux, gRPC finds and uses the system trust store. On
    Windows it usually does not, so we pass the roots explicitly.
    """
    pem_certs = []
    for cert, encoding, _ in ssl.enum_certificates("ROOT"):  # type: ignore[attr-defined]
        if encoding == "x509_asn":
            pem_certs.append(ssl.DER_cert_to_PEM_cert(cert))
    return "".join(pem_certs)


def connect(
    host: str,
    port: int,
    use_tls: bool = False,
    tls_root_certs: str | Path | None = None,
) -> flight.FlightClient:
    """
    Create a FlightClient connected to the given server.

    Arguments:
        host: the server host name.
        port: the server port.
        use_tls: whether to use TLS.
        tls_root_certs: optional path to a PEM bundle of root certificates.

    Returns:
        The FlightClient instance.
    """
    uri = flight_uri(host, port, use_tls)
    log.info("connecting to %s", uri)

    certs = None
    if use_tls and tls_root_certs is not None:
        certs = Path(tls_root_certs).read_text()
    elif use_tls and sys.platform == "win32":
        certs = windows_root_certs()

    if certs:
        return flight.FlightClient(uri, tls_root_certs=certs)
    return flight.FlightClient(uri)
