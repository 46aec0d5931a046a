"""Revalidating JSON resource cache.

This library keeps a local copy of a fixed set of named JSON resources
stored in a remote object store (e.g., a GCS bucket) and serves raw bytes
or decoded objects from the local copy.

Each synchronization pass compares the revision tags (ETags) we recorded
when we last fetched a resource against the current remote tags and only
downloads what changed. See `jsync.cache` for the on-disk format.
"""

from importlib.metadata import PackageNotFoundError, version

from .cache import CacheEntry, JSyncCache, SyncReport
from .errors import (
    ConfigError,
    ContentTooLargeError,
    DecodeError,
    DuplicateResourceNameError,
    JSyncError,
    LocalWriteError,
    MetadataCodecError,
    NetworkError,
    NotCachedError,
    RemoteMissingError,
    SyncError,
)
from .registry import ResourceGroup, ResourceID
from .remote import JSyncGCSStore, JSyncHTTPStore, ObjectInfo, ObjectStore

try:
    __version__ = version("jsync")
except PackageNotFoundError:  # pragma: no cover - not installed
    __version__ = "0.0.0"

__all__ = [
    "CacheEntry",
    "ConfigError",
    "ContentTooLargeError",
    "DecodeError",
    "DuplicateResourceNameError",
    "JSyncCache",
    "JSyncError",
    "JSyncGCSStore",
    "JSyncHTTPStore",
    "LocalWriteError",
    "MetadataCodecError",
    "NetworkError",
    "NotCachedError",
    "ObjectInfo",
    "ObjectStore",
    "RemoteMissingError",
    "ResourceGroup",
    "ResourceID",
    "SyncError",
    "SyncReport",
    "__version__",
]
