"""Object store backed by Google Cloud Storage."""

from __future__ import annotations

import logging
from collections.abc import Iterator

import requests
from google.api_core import exceptions as google_exceptions
from google.cloud import storage

from ..errors import NetworkError
from .store import ObjectInfo, folder_prefix

log = logging.getLogger("jsync/remote")

# Blob readers require a multiple of 256 KiB.
_GCS_READER_CHUNK_SIZE = 256 * 1024

# Errors emitted by the client library and by its HTTP transport.
_CLIENT_ERRORS = (google_exceptions.GoogleAPIError, requests.RequestException)


class JSyncGCSStore:
    """
    Object store for a GCS bucket.

    This class implements the remote.ObjectStore protocol.

    The storage client is created lazily using the default application
    credentials unless the caller provides an explicit client.
    """

    def __init__(
        self,
        *,
        bucket: str,
        client: storage.Client | None = None,
        read_size: int = 8192,
    ) -> None:
        self.bucket_name = bucket
        self.read_size = read_size
        self._client = client

    @property
    def client(self) -> storage.Client:
        """Lazy initialization of the storage Client."""
        if self._client is None:
            self._client = storage.Client()
        return self._client

    def list_objects(self, folder: str) -> list[ObjectInfo]:
        prefix = folder_prefix(folder)
        log.debug("listing gs://%s/%s... start", self.bucket_name, prefix)
        try:
            blobs = list(self.client.list_blobs(self.bucket_name, prefix=prefix))
        except _CLIENT_ERRORS as exc:
            raise NetworkError(f"cannot list gs://{self.bucket_name}/{prefix}: {exc}") from exc
        log.debug("listing gs://%s/%s... ok (%d objects)", self.bucket_name, prefix, len(blobs))
        return [ObjectInfo(key=blob.name, etag=blob.etag) for blob in blobs]

    def head_object(self, key: str) -> str | None:
        try:
            blob = self.client.bucket(self.bucket_name).get_blob(key)
        except _CLIENT_ERRORS as exc:
            raise NetworkError(f"cannot stat gs://{self.bucket_name}/{key}: {exc}") from exc
        return None if blob is None else blob.etag

    def get_object(self, key: str) -> Iterator[bytes]:
        blob = self.client.bucket(self.bucket_name).blob(key)
        try:
            with blob.open("rb", chunk_size=_GCS_READER_CHUNK_SIZE) as filep:
                while chunk := filep.read(self.read_size):
                    yield chunk
        except _CLIENT_ERRORS as exc:
            raise NetworkError(f"cannot fetch gs://{self.bucket_name}/{key}: {exc}") from exc
