"""Object store reached over plain HTTP(S)."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from urllib.parse import quote
from xml.etree import ElementTree

import requests

from ..errors import NetworkError
from .store import ObjectInfo, folder_prefix

log = logging.getLogger("jsync/remote")


class JSyncHTTPStore:
    """
    Object store for a bucket served over HTTP(S).

    This class implements the remote.ObjectStore protocol.

    Objects live at `{base_url}/{key}`. Listing uses the S3 ListObjectsV2
    XML API, which GCS also serves for public buckets, for example:

        JSyncHTTPStore(base_url="https://storage.googleapis.com/BUCKET")
    """

    def __init__(
        self,
        *,
        base_url: str,
        session: requests.Session | None = None,
        timeout: float = 30.0,
        chunk_size: int = 8192,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.session = session if session is not None else requests.Session()
        self.timeout = timeout
        self.chunk_size = chunk_size

    def object_url(self, key: str) -> str:
        """Return the URL of the object with the given key."""
        return f"{self.base_url}/{quote(key)}"

    def list_objects(self, folder: str) -> list[ObjectInfo]:
        params = {"list-type": "2", "prefix": folder_prefix(folder)}
        objects: list[ObjectInfo] = []
        while True:
            try:
                resp = self.session.get(f"{self.base_url}/", params=params, timeout=self.timeout)
                resp.raise_for_status()
                root = ElementTree.fromstring(resp.content)
            except requests.RequestException as exc:
                raise NetworkError(f"cannot list {self.base_url}/{params['prefix']}: {exc}") from exc
            except ElementTree.ParseError as exc:
                raise NetworkError(f"invalid listing from {self.base_url}: {exc}") from exc
            objects.extend(_parse_contents(root))
            token = _child_text(root, "NextContinuationToken")
            if _child_text(root, "IsTruncated") != "true" or not token:
                return objects
            log.debug("listing %s... continuing", self.base_url)
            params["continuation-token"] = token

    def head_object(self, key: str) -> str | None:
        url = self.object_url(key)
        try:
            resp = self.session.head(url, timeout=self.timeout, allow_redirects=True)
            if resp.status_code == 404:
                return None
            resp.raise_for_status()
        except requests.RequestException as exc:
            raise NetworkError(f"cannot stat {url}: {exc}") from exc
        return resp.headers.get("ETag")

    def get_object(self, key: str) -> Iterator[bytes]:
        url = self.object_url(key)
        try:
            with self.session.get(url, stream=True, timeout=self.timeout) as resp:
                resp.raise_for_status()
                for chunk in resp.iter_content(chunk_size=self.chunk_size):
                    if chunk:
                        yield chunk
        except requests.RequestException as exc:
            raise NetworkError(f"cannot fetch {url}: {exc}") from exc


def _local_name(tag: str) -> str:
    """Strip the XML namespace from a tag name."""
    return tag.rsplit("}", 1)[-1]


def _child_text(elem: ElementTree.Element, name: str) -> str | None:
    for child in elem:
        if _local_name(child.tag) == name:
            return child.text
    return None


def _parse_contents(root: ElementTree.Element) -> Iterator[ObjectInfo]:
    for elem in root:
        if _local_name(elem.tag) != "Contents":
            continue
        key = _child_text(elem, "Key")
        if not key:
            continue
        yield ObjectInfo(key=key, etag=_child_text(elem, "ETag"))
