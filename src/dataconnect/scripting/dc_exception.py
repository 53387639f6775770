"""Optional scripting helpers to log exceptions and convert them to exit codes."""

from __future__ import annotations

from typing import Any

from .dc_logging import log


class Interceptor:
    """
    Track whether a publishing script failed.

    DataConnect operations fail in two ways: argument errors raise
    (e.g., `InvalidArgumentError` for a missing data frame), while
    server and transport errors come back as a result dict whose
    `success` field is False. The interceptor turns both into a
    failed state and, eventually, into a non-zero exit code:

        interceptor = dc_exception.Interceptor()
        with interceptor:
            result = client.dry_publish(...)
            if interceptor.check_result(result)["success"]:
                interceptor.check_result(client.publish(...))
        sys.exit(interceptor.exitcode())

    Exceptions raised inside the with block are logged and suppressed,
    except KeyboardInterrupt, which propagates.
    """

    def __init__(self):
        self.failed = False

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> bool:
        _ = traceback
        if exc_type is None or issubclass(exc_type, KeyboardInterrupt):
            return False
        log.error("operation failed: %s", exc_value)
        self.failed = True
        return True

    def check_result(self, result: dict[str, Any] | None) -> dict[str, Any]:
        """
        Mark the interceptor as failed when result is None or not successful.

        Returns:
            The result, or an empty failure result when result is None,
            so that callers can always inspect `success`.
        """
        if result is None:
            log.error("operation failed: %s", "no result")
            self.failed = True
            return {"success": False}
        if result.get("success") is False:
            log.error("operation failed: %s", result.get("error_message") or "no result")
            self.failed = True
        return result

    def exitcode(self) -> int:
        """Return 1 if any operation failed, 0 otherwise."""
        return int(self.failed)
