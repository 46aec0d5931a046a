"""Module to load and save the metadata record."""

from __future__ import annotations

import json
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from tempfile import TemporaryDirectory
from typing import Final

from dacite import DaciteError, from_dict

from ..errors import LocalWriteError, MetadataCodecError

METADATA_VERSION: Final[int] = 0


@dataclass(kw_only=True)
class Metadata:
    """
    Record of the ETags we observed when we last fetched each file.

    Attributes:
        v: the format version (only v=0 is supported)
        etags: maps file names to ETags
    """

    v: int = METADATA_VERSION
    etags: dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        if self.v != METADATA_VERSION:
            raise ValueError(f"Unsupported metadata version: {self.v} (only v=0 supported)")


def metadata_path_for_data_dir(data_dir: Path) -> Path:
    """Return the metadata path under the given data directory."""
    return data_dir / "state" / "etags.json"


def load_metadata(path: Path) -> Metadata:
    """
    Load metadata from the given file, or return empty metadata if not found.

    Raises:
        MetadataCodecError: if the file exists but we cannot parse it.
    """
    if not path.exists():
        return Metadata()

    try:
        data = json.loads(path.read_bytes())
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise MetadataCodecError(f"invalid metadata in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise MetadataCodecError(f"invalid metadata in {path}: expected a JSON object")

    try:
        return from_dict(Metadata, data)
    except (DaciteError, ValueError, TypeError) as exc:
        raise MetadataCodecError(f"invalid metadata in {path}: {exc}") from exc


def save_metadata(metadata: Metadata, path: Path) -> None:
    """
    Atomically replace the metadata file with the given metadata.

    Raises:
        LocalWriteError: if we cannot write the file.
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        # Write inside a temporary directory in the destination directory so
        # `os.replace()` is atomic and we avoid cross-filesystem moves.
        with TemporaryDirectory(dir=path.parent) as tmp_dir:
            tmp_file = Path(tmp_dir) / path.name
            with tmp_file.open("w") as filep:
                json.dump(asdict(metadata), filep, indent=2, sort_keys=True)
                filep.write("\n")
            os.replace(tmp_file, path)
    except OSError as exc:
        raise LocalWriteError(f"cannot write metadata to {path}: {exc}") from exc
