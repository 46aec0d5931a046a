"""Module containing the JSyncCache implementation."""

from __future__ import annotations

import json
import logging
import os
import threading
from collections.abc import Iterator, Mapping
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field, make_dataclass
from pathlib import Path
from tempfile import TemporaryDirectory
from types import MappingProxyType
from typing import Any, Final, TypeVar

import dacite
from filelock import BaseFileLock, FileLock

from ..errors import (
    ContentTooLargeError,
    DecodeError,
    JSyncError,
    LocalWriteError,
    MetadataCodecError,
    NotCachedError,
    RemoteMissingError,
    SyncError,
)
from ..registry import Resource, ResourceGroup, ResourceID, resource_file_name
from ..remote import ObjectStore
from .diff import DiffEntry, DiffState, SyncStrategy, build_lookup, classify, diff, list_etags
from .metadata import Metadata, load_metadata, metadata_path_for_data_dir, save_metadata

log = logging.getLogger("jsync/cache")

T = TypeVar("T")

DEFAULT_MAX_BYTES: Final[int] = 1024 * 1024
DEFAULT_JOBS: Final[int] = 4

# Cache file names
JSYNC_CACHE_DOTLOCK_FILENAME: Final[str] = ".lock"
JSYNC_CACHE_FILES_DIRNAME: Final[str] = "files"


@dataclass(frozen=True, kw_only=True)
class CacheEntry:
    """
    Reference to a cached file.

    Attributes:
        file_name: the name of the resource file
        path: the Path of the local copy
        etag: the ETag observed when we wrote the local copy
    """

    file_name: str
    path: Path
    etag: str


@dataclass(kw_only=True)
class SyncReport:
    """
    Outcome of a synchronization pass.

    Attributes:
        group: name of the synchronized group
        fetched: file names we downloaded
        unchanged: file names whose local copy was already current
        skipped: file names without a remote counterpart
        failed: maps the file names we could not sync to the error
    """

    group: str
    fetched: list[str] = field(default_factory=list)
    unchanged: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    failed: dict[str, JSyncError] = field(default_factory=dict)


@dataclass(frozen=True, kw_only=True)
class _Outcome:
    """Result of syncing a single resource."""

    resource: ResourceID
    state: DiffState
    etag: str | None


class JSyncCache:
    """
    Local cache of JSON resources revalidated using ETags.

    Use `sync` to bring a ResourceGroup up to date and then use `get_raw`,
    `get_json`, or `get_decoded` to read the cached resources.

    The data directory contains:

        $datadir/files/{file_name}
        $datadir/state/etags.json
        $datadir/state/.lock

    Where $datadir defaults to `.jsync` in the current working directory.

    The in-memory index is only modified by `sync`, which builds a new
    index and publishes it at the end of the pass, so readers always see
    a consistent snapshot. Passes are serialized by a per-instance lock
    and by a file lock shared with other processes.
    """

    def __init__(
        self,
        *,
        store: ObjectStore,
        data_dir: str | Path | None = None,
        strategy: SyncStrategy | str = SyncStrategy.LIST,
        jobs: int = DEFAULT_JOBS,
        max_bytes: int = DEFAULT_MAX_BYTES,
        strict: bool = False,
        strict_metadata: bool = False,
    ) -> None:
        """
        Initialize the cache.

        Parameters:
            store: the remote object store hosting the resources.
            data_dir: directory containing the cache. If None, defaults
                to .jsync/ in the current working directory.
            strategy: how to discover the remote ETags (`list` or `head`).
            jobs: maximum number of concurrent network requests.
            max_bytes: maximum size of a single resource.
            strict: fail resources without a remote counterpart
                instead of silently skipping them.
            strict_metadata: fail when the metadata record is corrupt
                instead of treating it as empty.
        """
        if jobs < 1:
            raise ValueError(f"jobs must be >= 1, got: {jobs}")
        if max_bytes < 1:
            raise ValueError(f"max_bytes must be >= 1, got: {max_bytes}")
        self.store = store
        self.data_dir = data_dir_or_default(data_dir)
        self.strategy = SyncStrategy(strategy)
        self.jobs = jobs
        self.max_bytes = max_bytes
        self.strict = strict
        self.strict_metadata = strict_metadata
        self._index: Mapping[str, CacheEntry] = MappingProxyType({})
        self._mutex = threading.Lock()

    @property
    def files_dir(self) -> Path:
        """Return the directory containing the cached files."""
        return self.data_dir / JSYNC_CACHE_FILES_DIRNAME

    @property
    def metadata_path(self) -> Path:
        """Return the path of the metadata record."""
        return metadata_path_for_data_dir(self.data_dir)

    def file_path(self, file_name: str) -> Path:
        """Return the path of the local copy of the given file."""
        return self.files_dir / file_name

    def lock(self) -> BaseFileLock:
        """Return a FileLock locking the data directory."""
        lock_file_path = self.metadata_path.parent / JSYNC_CACHE_DOTLOCK_FILENAME
        lock_file_path.parent.mkdir(parents=True, exist_ok=True)
        return FileLock(lock_file_path)

    def entries(self) -> Mapping[str, CacheEntry]:
        """Return the currently published index, keyed by file name."""
        return self._index

    def sync(self, group: ResourceGroup) -> SyncReport:
        """
        Bring the given group up to date and return what we did.

        We download a resource when we do not have a local copy, or we
        do not have a recorded ETag, or the remote ETag changed. Resources
        without a remote counterpart are skipped (unless strict).

        Raises:
            DuplicateResourceNameError: two resources share a file name.
            NetworkError: listing the remote folder failed.
            MetadataCodecError: corrupt metadata and strict_metadata.
            LocalWriteError: we cannot write the metadata record.
            SyncError: some resources failed; the others were committed.
        """
        lookup = build_lookup(group)
        with self._mutex:
            try:
                file_lock = self.lock()
                file_lock.acquire()
            except OSError as exc:
                raise LocalWriteError(f"cannot lock {self.data_dir}: {exc}") from exc
            try:
                report = self._sync_locked(group, lookup)
            finally:
                file_lock.release()
        if report.failed:
            raise SyncError(report)
        return report

    def _sync_locked(self, group: ResourceGroup, lookup: dict[str, ResourceID]) -> SyncReport:
        log.info("syncing %s... start", group.name)
        metadata = self._load_metadata()
        listed = None
        if self.strategy == SyncStrategy.LIST:
            listed = list_etags(self.store, group.folder, lookup)

        try:
            self.files_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise LocalWriteError(f"cannot create {self.files_dir}: {exc}") from exc

        report = SyncReport(group=group.name)
        outcomes: list[_Outcome] = []
        with ThreadPoolExecutor(max_workers=self.jobs) as pool:
            futures = {
                pool.submit(self._sync_one, resource, metadata.etags.get(name), listed): name
                for name, resource in lookup.items()
            }
            for future in as_completed(futures):
                name = futures[future]
                try:
                    outcomes.append(future.result())
                except JSyncError as exc:
                    log.warning("syncing %s/%s... failure: %s", group.name, name, exc)
                    report.failed[name] = exc

        # Build the new index starting from the entries of other groups and
        # the previous entries of the resources that failed in this pass.
        index = {
            name: entry
            for name, entry in self._index.items()
            if name not in lookup or name in report.failed
        }
        for outcome in outcomes:
            name = outcome.resource.file_name
            if outcome.etag is None:
                report.skipped.append(name)
                continue
            if outcome.state == DiffState.MATCHING:
                report.unchanged.append(name)
            else:
                report.fetched.append(name)
                metadata.etags[name] = outcome.etag
            index[name] = CacheEntry(file_name=name, path=self.file_path(name), etag=outcome.etag)

        save_metadata(metadata, self.metadata_path)
        self._index = MappingProxyType(index)

        report.fetched.sort()
        report.unchanged.sort()
        report.skipped.sort()
        log.info(
            "syncing %s... %s (fetched=%d unchanged=%d skipped=%d failed=%d)",
            group.name,
            "ok" if not report.failed else "failure",
            len(report.fetched),
            len(report.unchanged),
            len(report.skipped),
            len(report.failed),
        )
        return report

    def _load_metadata(self) -> Metadata:
        try:
            return load_metadata(self.metadata_path)
        except MetadataCodecError as exc:
            if self.strict_metadata:
                raise
            log.warning("ignoring corrupt metadata (will fetch again): %s", exc)
            return Metadata()

    def _sync_one(
        self,
        resource: ResourceID,
        local_etag: str | None,
        listed: Mapping[str, str] | None,
    ) -> _Outcome:
        name = resource.file_name
        if listed is not None:
            remote_etag = listed.get(name)
        else:
            remote_etag = self.store.head_object(resource.key()) or None

        local_path = self.file_path(name)
        state = classify(local_path=local_path, local_etag=local_etag, remote_etag=remote_etag)
        if state == DiffState.MISSING_REMOTE:
            if self.strict:
                raise RemoteMissingError(f"no remote object for {resource.key()}")
            log.info("skipping %s: no remote object", resource.key())
            return _Outcome(resource=resource, state=state, etag=None)

        if state == DiffState.MATCHING:
            log.debug("%s is up to date (etag=%s)", resource.key(), remote_etag)
            return _Outcome(resource=resource, state=state, etag=remote_etag)

        self._fetch(resource, local_path)
        return _Outcome(resource=resource, state=state, etag=remote_etag)

    def _fetch(self, resource: ResourceID, dest_path: Path) -> None:
        """Download the given resource and atomically replace dest_path."""
        key = resource.key()
        log.info("fetching %s... start", key)
        try:
            # Dot prefix so the temporary directory cannot clash with a resource.
            with TemporaryDirectory(dir=dest_path.parent, prefix=".") as tmp_dir:
                tmp_file = Path(tmp_dir) / dest_path.name
                count = 0
                with open(tmp_file, "wb") as filep:
                    chunks = self.store.get_object(key)
                    try:
                        for chunk in chunks:
                            count += len(chunk)
                            if count > self.max_bytes:
                                raise ContentTooLargeError(
                                    f"{key} exceeds the {self.max_bytes} bytes limit"
                                )
                            filep.write(chunk)
                    finally:
                        close = getattr(chunks, "close", None)
                        if close is not None:
                            close()
                os.replace(tmp_file, dest_path)
        except OSError as exc:
            raise LocalWriteError(f"cannot write {dest_path}: {exc}") from exc
        log.info("fetching %s... ok (%d bytes)", key, count)

    def status(self, group: ResourceGroup) -> Iterator[DiffEntry]:
        """
        Compare the group against the local cache without fetching content.

        The remote ETags are read lazily while iterating the result, so
        NetworkError surfaces during iteration. The other errors are
        raised by this call.

        Raises:
            DuplicateResourceNameError: two resources share a file name.
            NetworkError: we cannot read the remote ETags.
            MetadataCodecError: corrupt metadata and strict_metadata.
        """
        build_lookup(group)
        metadata = self._load_metadata()
        return diff(
            store=self.store,
            group=group,
            etags=metadata.etags,
            files_dir=self.files_dir,
            strategy=self.strategy,
        )

    def get_raw(self, resource: Resource) -> bytes:
        """
        Return the cached bytes of the given resource.

        Raises:
            NotCachedError: the resource is not in the index.
        """
        entry = self._get_entry(resource)
        try:
            return entry.path.read_bytes()
        except FileNotFoundError as exc:
            raise NotCachedError(f"local copy of {entry.file_name} vanished") from exc

    def get_json(self, resource: Resource) -> Any:
        """
        Return the cached resource parsed as JSON.

        Raises:
            NotCachedError: the resource is not in the index.
            DecodeError: the cached bytes are not valid JSON.
        """
        data = self.get_raw(resource)
        try:
            return json.loads(data)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise DecodeError(f"invalid JSON in {resource_file_name(resource)}: {exc}") from exc

    def get_decoded(self, resource: Resource, data_class: type[T]) -> T:
        """
        Return the cached resource decoded into the given type.

        The type may be a dataclass or any type dacite understands,
        including `list[SomeDataclass]` and `dict[str, SomeDataclass]`.

        Raises:
            NotCachedError: the resource is not in the index.
            DecodeError: the cached value does not match the type.
        """
        value = self.get_json(resource)
        # Wrap the value so that dacite handles non-dataclass top-level types.
        wrapper = make_dataclass("_Decoded", [("value", data_class)])
        try:
            return dacite.from_dict(wrapper, {"value": value}).value
        except (dacite.DaciteError, TypeError, ValueError) as exc:
            raise DecodeError(
                f"cannot decode {resource_file_name(resource)} as {data_class}: {exc}"
            ) from exc

    def _get_entry(self, resource: Resource) -> CacheEntry:
        file_name = resource_file_name(resource)
        try:
            return self._index[file_name]
        except KeyError as exc:
            raise NotCachedError(f"{file_name} is not cached (did you sync its group?)") from exc


def data_dir_or_default(data_dir: str | Path | None) -> Path:
    """
    Return data_dir as a Path if not empty. Otherwise return the
    default value for the data_dir (i.e., `./.jsync` like git).
    """
    return Path.cwd() / ".jsync" if data_dir is None else Path(data_dir)
