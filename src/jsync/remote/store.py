"""Module defining the object store protocol."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True, kw_only=True)
class ObjectInfo:
    """Metadata of a remote object returned by a listing."""

    key: str
    etag: str | None


class ObjectStore(Protocol):
    """
    Represent the possibility of listing and fetching objects from a
    remote location or service (e.g. a GCS bucket).

    Methods:
        list_objects: list all the objects under the given folder.
        head_object: return the object ETag or None if it does not exist.
        get_object: return an iterator over the object content.
    """

    def list_objects(self, folder: str) -> list[ObjectInfo]: ...

    def head_object(self, key: str) -> str | None: ...

    def get_object(self, key: str) -> Iterator[bytes]: ...


def folder_prefix(folder: str) -> str:
    """Return the listing prefix for a folder (empty for the root)."""
    folder = folder.strip("/")
    return f"{folder}/" if folder else ""
