"""Tests for the jsync.cache.diff module."""

import pytest

from jsync.cache.diff import (
    DiffState,
    SyncStrategy,
    build_lookup,
    classify,
    diff,
    list_etags,
)
from jsync.errors import DuplicateResourceNameError
from jsync.registry import ResourceGroup, ResourceID


class TestBuildLookup:
    """Tests for the build_lookup function."""

    def test_success(self, group):
        lookup = build_lookup(group)
        assert sorted(lookup) == ["airlines.json", "airports.json", "routes.json"]
        assert lookup["routes.json"] == ResourceID(folder="static/fares", file_name="routes.json")

    def test_duplicate(self):
        group = ResourceGroup(name="g", folder="f", file_names=("a.json", "b.json", "a.json"))
        with pytest.raises(DuplicateResourceNameError, match="g: duplicate resource name: a.json"):
            build_lookup(group)


class TestListEtags:
    """Tests for the list_etags function."""

    def test_matches_by_file_name(self, populated_store, group):
        populated_store.put("static/fares/extra.json", b"{}")
        etags = list_etags(populated_store, group.folder, build_lookup(group))

        assert sorted(etags) == ["airlines.json", "airports.json", "routes.json"]
        assert etags["routes.json"] == populated_store.objects["static/fares/routes.json"][1]
        assert populated_store.calls["list"] == 1

    def test_ignores_missing_etag(self, store, group):
        store.put("static/fares/routes.json", b"{}", etag="")
        assert list_etags(store, group.folder, build_lookup(group)) == {}


class TestClassify:
    """Tests for the classify function."""

    def test_missing_remote(self, tmp_path):
        state = classify(local_path=tmp_path / "a.json", local_etag="1", remote_etag=None)
        assert state == DiffState.MISSING_REMOTE

    def test_missing_local_file(self, tmp_path):
        state = classify(local_path=tmp_path / "a.json", local_etag="1", remote_etag="1")
        assert state == DiffState.ONLY_REMOTE

    def test_missing_local_etag(self, tmp_path):
        path = tmp_path / "a.json"
        path.write_text("{}")
        state = classify(local_path=path, local_etag=None, remote_etag="1")
        assert state == DiffState.ONLY_REMOTE

    def test_mismatch(self, tmp_path):
        path = tmp_path / "a.json"
        path.write_text("{}")
        assert classify(local_path=path, local_etag="1", remote_etag="2") == DiffState.TAG_MISMATCH

    def test_matching(self, tmp_path):
        path = tmp_path / "a.json"
        path.write_text("{}")
        assert classify(local_path=path, local_etag="1", remote_etag="1") == DiffState.MATCHING


class TestDiff:
    """Tests for the diff function."""

    @pytest.mark.parametrize("strategy", [SyncStrategy.LIST, SyncStrategy.HEAD])
    def test_states(self, tmp_path, populated_store, group, strategy):
        files_dir = tmp_path / "files"
        files_dir.mkdir()
        (files_dir / "airports.json").write_text("[]")
        (files_dir / "routes.json").write_text("{}")
        airports_etag = populated_store.objects["static/fares/airports.json"][1]
        etags = {"airports.json": airports_etag, "routes.json": '"old"'}
        del populated_store.objects["static/fares/airlines.json"]

        entries = list(
            diff(
                store=populated_store,
                group=group,
                etags=etags,
                files_dir=files_dir,
                strategy=strategy,
            )
        )

        assert [entry.file_name for entry in entries] == [
            "airlines.json",
            "airports.json",
            "routes.json",
        ]
        assert [entry.state for entry in entries] == [
            DiffState.MISSING_REMOTE,
            DiffState.MATCHING,
            DiffState.TAG_MISMATCH,
        ]
        assert [entry.stale() for entry in entries] == [False, False, True]
        assert entries[2].local_etag == '"old"'
        assert populated_store.calls["get"] == 0
        if strategy == SyncStrategy.LIST:
            assert populated_store.calls["list"] == 1
        else:
            assert populated_store.calls["head"] == 3


class TestListEtagsNestedObjects:
    """Objects in nested folders never stand in for direct children."""

    def test_nested_object_with_same_name(self, store, group):
        direct = store.put("static/fares/airports.json", b"[1]")
        store.put("static/fares/old/airports.json", b"[0]")
        store.put("static/fares/old/routes.json", b"{}")

        etags = list_etags(store, group.folder, build_lookup(group))

        assert etags == {"airports.json": direct}
