"""Shared pytest fixtures for jsync tests."""

from __future__ import annotations

import hashlib
import posixpath
import threading
from collections import Counter
from collections.abc import Iterator

import pytest

from jsync.errors import NetworkError
from jsync.registry import ResourceGroup
from jsync.remote import ObjectInfo


class FakeStore:
    """In-memory object store counting the requests it receives."""

    def __init__(self, chunk_size: int = 4) -> None:
        self.objects: dict[str, tuple[bytes, str | None]] = {}
        self.errors: dict[object, Exception] = {}
        self.calls: Counter[str] = Counter()
        self.fetched: list[str] = []
        self.chunk_size = chunk_size
        self._mutex = threading.Lock()

    def _count(self, operation: str) -> None:
        with self._mutex:
            self.calls[operation] += 1

    def put(self, key: str, content: bytes, etag: str | None = "auto") -> str | None:
        if etag == "auto":
            etag = f'"{hashlib.md5(content).hexdigest()}"'
        self.objects[key] = (content, etag)
        return etag

    def list_objects(self, folder: str) -> list[ObjectInfo]:
        self._count("list")
        if "list" in self.errors:
            raise self.errors["list"]
        prefix = folder.strip("/") + "/" if folder.strip("/") else ""
        return [
            ObjectInfo(key=key, etag=etag)
            for key, (_, etag) in sorted(self.objects.items())
            if key.startswith(prefix)
        ]

    def head_object(self, key: str) -> str | None:
        self._count("head")
        if ("head", key) in self.errors:
            raise self.errors[("head", key)]
        if key not in self.objects:
            return None
        return self.objects[key][1]

    def get_object(self, key: str) -> Iterator[bytes]:
        self._count("get")
        with self._mutex:
            self.fetched.append(posixpath.basename(key))
        if key in self.errors:
            raise self.errors[key]
        if key not in self.objects:
            raise NetworkError(f"404: {key}")
        content = self.objects[key][0]
        return iter(
            [content[i : i + self.chunk_size] for i in range(0, len(content), self.chunk_size)]
        )


@pytest.fixture
def store() -> FakeStore:
    """Return an empty in-memory object store."""
    return FakeStore()


@pytest.fixture
def group() -> ResourceGroup:
    """Return a group with three resources under static/fares."""
    return ResourceGroup(
        name="fares",
        folder="static/fares",
        file_names=("airports.json", "airlines.json", "routes.json"),
    )


@pytest.fixture
def populated_store(store: FakeStore) -> FakeStore:
    """Return a store containing all the resources of the group fixture."""
    store.put("static/fares/airports.json", b'[{"code": "FCO", "name": "Fiumicino"}]')
    store.put("static/fares/airlines.json", b'{"AZ": "ITA Airways"}')
    store.put("static/fares/routes.json", b'{"routes": []}')
    return store
