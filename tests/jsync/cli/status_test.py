"""Tests for the jsync.cli.status module."""

from pathlib import Path
from unittest.mock import patch

import yaml
from click.testing import CliRunner

from jsync.cli import cli
from jsync.config import JSyncConfig
from jsync.errors import NetworkError

_CONFIG = {
    "version": 0,
    "remote": {"kind": "gcs", "bucket": "fares-bucket"},
    "groups": [
        {
            "name": "fares",
            "folder": "static/fares",
            "files": ["airports.json", "airlines.json", "routes.json", "taxes.json"],
        },
    ],
}


def _invoke(data_dir: Path, store, command: str, *args: str):
    runner = CliRunner()
    with patch.object(JSyncConfig, "new_store", return_value=store):
        return runner.invoke(cli, [command, "-d", str(data_dir), *args])


class TestStatus:
    """Status letters reflect the cache state."""

    def test_before_sync(self, tmp_path: Path, populated_store):
        (tmp_path / "jsync.yaml").write_text(yaml.dump(_CONFIG))

        result = _invoke(tmp_path, populated_store, "status")

        assert result.exit_code == 0, result.output
        lines = result.output.splitlines()
        assert "D fares/airlines.json" in lines
        assert "D fares/airports.json" in lines
        assert "D fares/routes.json" in lines
        assert "? fares/taxes.json" in lines
        assert populated_store.calls["get"] == 0

    def test_after_sync(self, tmp_path: Path, populated_store):
        (tmp_path / "jsync.yaml").write_text(yaml.dump(_CONFIG))
        assert _invoke(tmp_path, populated_store, "sync").exit_code == 0
        populated_store.put("static/fares/routes.json", b'{"routes": ["FCO-LIN"]}')

        result = _invoke(tmp_path, populated_store, "status")

        assert result.exit_code == 0, result.output
        lines = result.output.splitlines()
        assert "M fares/routes.json" in lines
        assert "? fares/taxes.json" in lines
        assert not any(line.endswith("fares/airports.json") for line in lines)

        result = _invoke(tmp_path, populated_store, "status", "--all")

        assert result.exit_code == 0, result.output
        assert any(line.endswith(" fares/airports.json") for line in result.output.splitlines())

    def test_listing_failure(self, tmp_path: Path, populated_store):
        (tmp_path / "jsync.yaml").write_text(yaml.dump(_CONFIG))
        populated_store.errors["list"] = NetworkError("unreachable")

        result = _invoke(tmp_path, populated_store, "status")

        assert result.exit_code != 0
        assert "fares: unreachable" in result.output
