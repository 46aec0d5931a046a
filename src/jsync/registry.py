"""Module to declare the resources we expect to find remotely."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum
from typing import Union


@dataclass(frozen=True, kw_only=True)
class ResourceID:
    """
    Identifies a single remote JSON resource.

    Attributes:
        folder: the remote folder containing the resource
        file_name: the name of the file inside the folder
    """

    folder: str
    file_name: str

    def key(self) -> str:
        """Returns the remote object key (i.e., `folder/file_name`)."""
        return remote_key(self.folder, self.file_name)


Resource = Union[ResourceID, Enum, str]
"""Anything we can map to a file name using `resource_file_name`."""


@dataclass(frozen=True, kw_only=True)
class ResourceGroup:
    """
    Finite set of resources sharing the same remote folder.

    Iterating over the group yields a ResourceID for each file name
    in declaration order. Duplicate file names are accepted here and
    rejected by JSyncCache.sync, which needs a unique lookup key.

    Attributes:
        name: the group name (used for logging and by the CLI)
        folder: the remote folder shared by all the resources
        file_names: the file names of the resources
    """

    name: str
    folder: str
    file_names: tuple[str, ...]

    def __post_init__(self):
        for file_name in self.file_names:
            _validate_file_name(file_name)

    def __iter__(self) -> Iterator[ResourceID]:
        for file_name in self.file_names:
            yield ResourceID(folder=self.folder, file_name=file_name)

    def __len__(self) -> int:
        return len(self.file_names)

    def __contains__(self, resource: object) -> bool:
        try:
            file_name = resource_file_name(resource)  # type: ignore[arg-type]
        except TypeError:
            return False
        return file_name in self.file_names

    def resource(self, file_name: str) -> ResourceID:
        """
        Return the ResourceID for the given file name.

        Raises:
            KeyError: if the group does not declare the file name.
        """
        if file_name not in self.file_names:
            raise KeyError(f"{self.name}: no such resource: {file_name}")
        return ResourceID(folder=self.folder, file_name=file_name)

    @classmethod
    def from_enum(
        cls,
        enum_cls: type[Enum],
        *,
        folder: str,
        name: str | None = None,
    ) -> ResourceGroup:
        """
        Construct a group from an Enum whose members are the resources.

        Each member contributes its `file_name` attribute, if any, and
        otherwise its value. The group name defaults to the Enum name.
        """
        return cls(
            name=name if name is not None else enum_cls.__name__,
            folder=folder,
            file_names=tuple(resource_file_name(member) for member in enum_cls),
        )


def resource_file_name(resource: Resource) -> str:
    """Return the file name identifying the given resource."""
    file_name = getattr(resource, "file_name", None)
    if isinstance(file_name, str):
        return file_name
    # Check Enum first since a `str` Enum member is also a `str`
    if isinstance(resource, Enum):
        return str(resource.value)
    if isinstance(resource, str):
        return resource
    raise TypeError(f"cannot map {resource!r} to a file name")


def remote_key(folder: str, file_name: str) -> str:
    """Join folder and file name into a remote object key."""
    folder = folder.strip("/")
    return f"{folder}/{file_name}" if folder else file_name


def _validate_file_name(file_name: str) -> None:
    # Dot names are reserved for our own lock and temporary files.
    if not file_name or file_name.startswith("."):
        raise ValueError(f"Invalid file name: {file_name!r}")
    if "/" in file_name or "\\" in file_name:
        raise ValueError(f"Invalid file name: {file_name!r} (contains a separator)")
