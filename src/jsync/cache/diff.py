"""Diff between the remote tags and the local cache state."""

from __future__ import annotations

import posixpath
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from ..errors import DuplicateResourceNameError
from ..registry import ResourceGroup, ResourceID
from ..remote import ObjectStore


class SyncStrategy(str, Enum):
    """How we discover the remote ETags of a group."""

    LIST = "list"
    """One listing request for the whole folder."""

    HEAD = "head"
    """One metadata request for each resource."""


class DiffState(str, Enum):
    """State of a diff entry comparing remote vs local cache."""

    ONLY_REMOTE = "only_remote"
    TAG_MISMATCH = "tag_mismatch"
    MATCHING = "matching"
    MISSING_REMOTE = "missing_remote"


@dataclass(frozen=True, kw_only=True)
class DiffEntry:
    """Single entry in a remote-vs-local diff."""

    resource: ResourceID
    remote_etag: str | None
    local_etag: str | None
    state: DiffState

    @property
    def file_name(self) -> str:
        return self.resource.file_name

    def stale(self) -> bool:
        """Return whether we need to fetch the resource."""
        return self.state in (DiffState.ONLY_REMOTE, DiffState.TAG_MISMATCH)


def build_lookup(group: ResourceGroup) -> dict[str, ResourceID]:
    """
    Map each file name in the group to its resource.

    Raises:
        DuplicateResourceNameError: if two resources share a file name.
    """
    lookup: dict[str, ResourceID] = {}
    for resource in group:
        if resource.file_name in lookup:
            raise DuplicateResourceNameError(
                f"{group.name}: duplicate resource name: {resource.file_name}"
            )
        lookup[resource.file_name] = resource
    return lookup


def list_etags(
    store: ObjectStore,
    folder: str,
    lookup: Mapping[str, ResourceID],
) -> dict[str, str]:
    """
    List the folder once and return the ETags of the known resources.

    Objects we do not know about and objects without an ETag are ignored.
    The listing includes nested folders, so we require the full key to
    match: `folder/old/a.json` must not provide the ETag of `folder/a.json`.
    """
    etags: dict[str, str] = {}
    for info in store.list_objects(folder):
        resource = lookup.get(posixpath.basename(info.key))
        if resource is None or info.key != resource.key() or not info.etag:
            continue
        etags[resource.file_name] = info.etag
    return etags


def classify(
    *,
    local_path: Path,
    local_etag: str | None,
    remote_etag: str | None,
) -> DiffState:
    """
    Decide the state of a single resource.

    A resource is stale when the local file is missing, or we do not
    have a recorded ETag, or the recorded ETag differs from the remote one.
    """
    if remote_etag is None:
        return DiffState.MISSING_REMOTE
    if not local_path.exists() or local_etag is None:
        return DiffState.ONLY_REMOTE
    if local_etag != remote_etag:
        return DiffState.TAG_MISMATCH
    return DiffState.MATCHING


def diff(
    *,
    store: ObjectStore,
    group: ResourceGroup,
    etags: Mapping[str, str],
    files_dir: Path,
    strategy: SyncStrategy,
) -> Iterator[DiffEntry]:
    """
    Compare the remote ETags of a group against the local cache state.

    Yields one ``DiffEntry`` for each resource in sorted file name order.

    Args:
        store: The object store hosting the resources.
        group: The group of resources to compare.
        etags: The recorded ETags, keyed by file name.
        files_dir: Directory containing the cached files.
        strategy: How to discover the remote ETags.
    """
    lookup = build_lookup(group)
    listed = list_etags(store, group.folder, lookup) if strategy == SyncStrategy.LIST else None
    for file_name in sorted(lookup):
        resource = lookup[file_name]
        if listed is not None:
            remote_etag = listed.get(file_name)
        else:
            remote_etag = store.head_object(resource.key()) or None
        local_etag = etags.get(file_name)
        yield DiffEntry(
            resource=resource,
            remote_etag=remote_etag,
            local_etag=local_etag,
            state=classify(
                local_path=files_dir / file_name,
                local_etag=local_etag,
                remote_etag=remote_etag,
            ),
        )
