"""Module to load the jsync configuration file."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Final

import dacite
import yaml

from .cache import DEFAULT_JOBS, DEFAULT_MAX_BYTES, JSyncCache, SyncStrategy
from .errors import ConfigError
from .registry import ResourceGroup
from .remote import JSyncGCSStore, JSyncHTTPStore, ObjectStore

CONFIG_VERSION: Final[int] = 0
CONFIG_FILENAME: Final[str] = "jsync.yaml"


@dataclass(frozen=True, kw_only=True)
class RemoteConfig:
    kind: str
    bucket: str | None = None
    base_url: str | None = None


@dataclass(frozen=True, kw_only=True)
class GroupConfig:
    name: str
    folder: str
    files: list[str]


@dataclass(frozen=True, kw_only=True)
class JSyncConfig:
    """
    Content of the configuration file.

    Attributes:
        version: the format version (only 0 is supported)
        remote: where the resources live
        groups: the resource groups to synchronize
        strategy: how to discover the remote ETags
        jobs: maximum number of concurrent network requests
        max_bytes: maximum size of a single resource
        strict: whether missing remote resources are errors
    """

    version: int
    remote: RemoteConfig
    groups: list[GroupConfig] = field(default_factory=list)
    strategy: str = SyncStrategy.LIST.value
    jobs: int = DEFAULT_JOBS
    max_bytes: int = DEFAULT_MAX_BYTES
    strict: bool = False

    def resource_groups(self) -> list[ResourceGroup]:
        """Return the configured groups as ResourceGroup instances."""
        return [
            ResourceGroup(name=group.name, folder=group.folder, file_names=tuple(group.files))
            for group in self.groups
        ]

    def find_group(self, name: str) -> ResourceGroup:
        """
        Return the group with the given name.

        Raises:
            ConfigError: if there is no such group.
        """
        for group in self.resource_groups():
            if group.name == name:
                return group
        raise ConfigError(f"no such group: {name}")

    def new_store(self) -> ObjectStore:
        """Construct the configured object store."""
        if self.remote.kind == "gcs":
            assert self.remote.bucket is not None
            return JSyncGCSStore(bucket=self.remote.bucket)
        assert self.remote.base_url is not None
        return JSyncHTTPStore(base_url=self.remote.base_url)

    def new_cache(
        self,
        *,
        data_dir: str | Path | None = None,
        store: ObjectStore | None = None,
    ) -> JSyncCache:
        """Construct a JSyncCache using this configuration."""
        return JSyncCache(
            store=store if store is not None else self.new_store(),
            data_dir=data_dir,
            strategy=self.strategy,
            jobs=self.jobs,
            max_bytes=self.max_bytes,
            strict=self.strict,
        )


def config_path_for_data_dir(data_dir: Path) -> Path:
    """Return the default config path under the given data directory."""
    return data_dir / CONFIG_FILENAME


def load_config(config_path: Path) -> JSyncConfig:
    """
    Load the configuration from the given YAML file.

    Raises:
        ConfigError: if the file is missing or invalid.
    """
    try:
        content = config_path.read_text()
    except FileNotFoundError as exc:
        raise ConfigError(f"Config not found: {config_path}") from exc

    try:
        data = yaml.safe_load(content) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {config_path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigError("Config must be a mapping.")

    try:
        config = dacite.from_dict(JSyncConfig, data)
    except (dacite.DaciteError, TypeError) as exc:
        raise ConfigError(f"Invalid config: {exc}") from exc

    _validate_config(config)
    return config


def _validate_config(config: JSyncConfig) -> None:
    if config.version != CONFIG_VERSION:
        raise ConfigError(f"Unsupported config version: {config.version}")

    if config.remote.kind == "gcs":
        if not config.remote.bucket:
            raise ConfigError("The gcs remote requires a bucket.")
    elif config.remote.kind == "http":
        if not config.remote.base_url:
            raise ConfigError("The http remote requires a base_url.")
    else:
        raise ConfigError(f"Invalid remote kind: {config.remote.kind}")

    if config.strategy not in {strategy.value for strategy in SyncStrategy}:
        raise ConfigError(f"Invalid strategy: {config.strategy}")
    if config.jobs < 1:
        raise ConfigError(f"Invalid jobs: {config.jobs}")
    if config.max_bytes < 1:
        raise ConfigError(f"Invalid max_bytes: {config.max_bytes}")

    names = [group.name for group in config.groups]
    if len(names) != len(set(names)):
        raise ConfigError("Group names must be unique.")
    try:
        config.resource_groups()
    except ValueError as exc:
        raise ConfigError(f"Invalid group: {exc}") from exc

    # Cached files are stored by file name only.
    owners: dict[str, str] = {}
    for group in config.groups:
        for file_name in group.files:
            owner = owners.setdefault(file_name, group.name)
            if owner != group.name:
                raise ConfigError(
                    f"File name {file_name} is declared by both {owner} and {group.name}."
                )
