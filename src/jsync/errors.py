"""Errors raised by the jsync library."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .cache.cache import SyncReport


class JSyncError(RuntimeError):
    """Base class for all the errors emitted by this library."""


class NetworkError(JSyncError):
    """Error talking to the remote object store (the caller may retry)."""


class LocalWriteError(JSyncError):
    """Error writing into the local cache directory (e.g., disk full)."""


class MetadataCodecError(JSyncError):
    """The persisted metadata record is corrupt or has an unexpected shape."""


class NotCachedError(JSyncError):
    """The requested resource is not in the cache index."""


class DecodeError(JSyncError):
    """The cached bytes cannot be decoded into the requested shape."""


class ContentTooLargeError(JSyncError):
    """The remote object exceeds the configured size cap."""


class DuplicateResourceNameError(JSyncError, ValueError):
    """Two resources in the same group share the same file name."""


class RemoteMissingError(JSyncError):
    """A declared resource has no remote counterpart (strict mode only)."""


class ConfigError(JSyncError):
    """The configuration file is missing or invalid."""


class SyncError(JSyncError):
    """
    Error emitted when some resources in a synchronization pass failed.

    Attributes:
        failures: maps each failed file name to its error.
        report: the report of the pass, including what succeeded.
    """

    def __init__(self, report: SyncReport) -> None:
        self.failures = dict(report.failed)
        self.report = report
        names = ", ".join(sorted(self.failures))
        super().__init__(
            f"cannot sync {len(self.failures)} resource(s) in {report.group}: {names}"
        )
