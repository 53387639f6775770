"""Package wrapping the Arrow Flight transport.

The `connect` function creates a `pyarrow.flight.FlightClient`.

The `call_options` function builds the `FlightCallOptions` attached to
every call: client version, best-effort network identity, and the
bearer token from the process-wide authentication state.

The `do_command` and `execute_command` functions run a named command
(a Flight action) and decode its JSON results, while `do_put_command`
uploads a table through a Flight put.

Error Policy
------------

Argument errors raise `InvalidArgumentError` before touching the network.
Transport errors never escape `do_command` (which logs and returns None)
nor `do_put_command` (which returns a structured failure).
"""

from .commands import do_command, do_put_command, execute_command, failure_result
from .connection import connect, flight_uri
from .options import NetworkIdentity, call_headers, call_options, network_identity

__all__ = [
    "NetworkIdentity",
    "call_headers",
    "call_options",
    "connect",
    "do_command",
    "do_put_command",
    "execute_command",
    "failure_result",
    "flight_uri",
    "network_identity",
]
