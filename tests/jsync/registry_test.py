"""Tests for the jsync.registry module."""

from enum import Enum

import pytest

from jsync.registry import ResourceGroup, ResourceID, remote_key, resource_file_name


class Fares(str, Enum):
    AIRPORTS = "airports.json"
    AIRLINES = "airlines.json"


class Taxes(Enum):
    VAT = 1
    CITY = 2

    @property
    def file_name(self) -> str:
        return f"{self.name.lower()}.json"


class TestRemoteKey:
    """Tests for the remote_key function."""

    def test_join(self):
        assert remote_key("static/fares", "a.json") == "static/fares/a.json"

    def test_strips_slashes(self):
        assert remote_key("/static/fares/", "a.json") == "static/fares/a.json"

    def test_empty_folder(self):
        assert remote_key("", "a.json") == "a.json"
        assert remote_key("/", "a.json") == "a.json"


class TestResourceID:
    """Tests for the ResourceID class."""

    def test_key(self):
        resource = ResourceID(folder="static/fares", file_name="a.json")
        assert resource.key() == "static/fares/a.json"

    def test_hashable(self):
        first = ResourceID(folder="f", file_name="a.json")
        second = ResourceID(folder="f", file_name="a.json")
        assert first == second
        assert len({first, second}) == 1


class TestResourceFileName:
    """Tests for the resource_file_name function."""

    def test_string(self):
        assert resource_file_name("a.json") == "a.json"

    def test_resource_id(self):
        assert resource_file_name(ResourceID(folder="f", file_name="a.json")) == "a.json"

    def test_str_enum_uses_value(self):
        assert resource_file_name(Fares.AIRPORTS) == "airports.json"

    def test_enum_with_file_name(self):
        assert resource_file_name(Taxes.VAT) == "vat.json"

    def test_unsupported(self):
        with pytest.raises(TypeError, match="cannot map"):
            resource_file_name(42)  # type: ignore[arg-type]


class TestResourceGroup:
    """Tests for the ResourceGroup class."""

    def test_iter(self):
        group = ResourceGroup(name="g", folder="f", file_names=("b.json", "a.json"))
        assert list(group) == [
            ResourceID(folder="f", file_name="b.json"),
            ResourceID(folder="f", file_name="a.json"),
        ]
        assert len(group) == 2

    def test_contains(self):
        group = ResourceGroup.from_enum(Fares, folder="static/fares")
        assert "airports.json" in group
        assert Fares.AIRLINES in group
        assert "routes.json" not in group
        assert 42 not in group

    def test_resource(self):
        group = ResourceGroup(name="g", folder="f", file_names=("a.json",))
        assert group.resource("a.json") == ResourceID(folder="f", file_name="a.json")
        with pytest.raises(KeyError, match="no such resource"):
            group.resource("b.json")

    def test_duplicates_are_accepted(self):
        group = ResourceGroup(name="g", folder="f", file_names=("a.json", "a.json"))
        assert len(group) == 2

    @pytest.mark.parametrize("file_name", ["", ".", "..", ".lock", "a/b.json", "a\\b.json"])
    def test_invalid_file_names(self, file_name):
        with pytest.raises(ValueError, match="Invalid file name"):
            ResourceGroup(name="g", folder="f", file_names=(file_name,))

    def test_from_enum(self):
        group = ResourceGroup.from_enum(Fares, folder="static/fares")
        assert group.name == "Fares"
        assert group.folder == "static/fares"
        assert group.file_names == ("airports.json", "airlines.json")

    def test_from_enum_with_file_name_and_name(self):
        group = ResourceGroup.from_enum(Taxes, folder="static/taxes", name="taxes")
        assert group.name == "taxes"
        assert group.file_names == ("vat.json", "city.json")
