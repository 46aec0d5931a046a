"""
Clients for the remote object stores hosting the JSON resources.

The cache only depends on the `ObjectStore` protocol, which models three
operations on a flat key space where `/` separates folders:

    list_objects(folder) -> [ObjectInfo(key, etag)]
    head_object(key) -> etag or None
    get_object(key) -> iterator over the object bytes

We provide two implementations:

1. `JSyncGCSStore` uses the Google Cloud Storage client library and
the default application credentials.

2. `JSyncHTTPStore` uses plain HTTP(S) and works with any public
bucket exposing the S3-compatible XML API (including GCS).

Both implementations convert client errors into `jsync.errors.NetworkError`.
"""

from .gcs import JSyncGCSStore
from .http import JSyncHTTPStore
from .store import ObjectInfo, ObjectStore

__all__ = [
    "JSyncGCSStore",
    "JSyncHTTPStore",
    "ObjectInfo",
    "ObjectStore",
]
