"""Package implementing the revalidating cache.

The `JSyncCache` class synchronizes groups of remote JSON resources
into a local directory and serves them from there.

Data Directory Convention
-------------------------

If a data directory is specified, we use it. Otherwise, we use `.jsync`
in the current directory. This is similar to git, that uses `.git`.

On-Disk Format
--------------

We store files using the following layout:

    $datadir/files/{file_name}
    $datadir/state/etags.json
    $datadir/state/.lock

The local layout does not mirror the remote folders: each resource is
stored using its file name only, which must therefore be unique across
the groups sharing a data directory (`load_config` enforces this).

The `etags.json` file is the metadata record and looks like:

    {
      "etags": {
        "airports.json": "\\"3a421c62179a...\\""
      },
      "v": 0
    }

It records the ETag we observed when we last fetched each file. Equal
ETags mean the remote content did not change, so we reuse the local
copy. We trust the remote store on this and do not hash the content.

We write both the cached files and the metadata record into a temporary
directory next to the destination and then use `os.replace` so that
readers never see partially-written files.

Synchronization Strategies
--------------------------

We discover remote ETags using either one listing request per group
(`list`, the default) or one metadata request per resource (`head`).
The former costs one round trip while the latter costs one round trip
for each resource but does not need listing permissions. Both silently
skip resources that do not exist remotely unless `strict` is set.
"""

from .cache import (
    DEFAULT_JOBS,
    DEFAULT_MAX_BYTES,
    CacheEntry,
    JSyncCache,
    SyncReport,
    data_dir_or_default,
)
from .diff import DiffEntry, DiffState, SyncStrategy

__all__ = [
    "CacheEntry",
    "DEFAULT_JOBS",
    "DEFAULT_MAX_BYTES",
    "DiffEntry",
    "DiffState",
    "JSyncCache",
    "SyncReport",
    "SyncStrategy",
    "data_dir_or_default",
]
