"""Optional scripting helpers to log exceptions and convert them to exit codes."""

from __future__ import annotations

from ..errors import SyncError
from .jsync_logging import log


class Interceptor:
    """
    Context manager to intercept exceptions.

    Use as a context manager:

        interceptor = jsync_exception.Interceptor()
        for group in groups:
            with interceptor:
                cache.sync(group)
        sys.exit(interceptor.exitcode())

    Exceptions are logged and suppressed, so the loop above continues
    with the next group. For a SyncError we also log the reason why each
    resource failed. The errors field contains the intercepted exceptions.

    Use interceptor.exitcode() to get the suitable exit code
    to pass to the sys.exit() function.
    """

    def __init__(self):
        self.errors: list[Exception] = []

    @property
    def failed(self) -> bool:
        """Whether we intercepted at least one exception."""
        return bool(self.errors)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        if exc_type is None:
            return False
        if not issubclass(exc_type, Exception):
            return False  # e.g., KeyboardInterrupt
        log.error("operation failed: %s", exc_value)
        if isinstance(exc_value, SyncError):
            for name, error in sorted(exc_value.failures.items()):
                log.error("  %s: %s", name, error)
        _ = traceback
        self.errors.append(exc_value)
        return True  # suppress the exception

    def exitcode(self) -> int:
        """
        Return the exitcode to pass to sys.exit.

        Zero on success, 1 on failure.
        """
        return int(self.failed)
