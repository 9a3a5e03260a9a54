"""Tests for the htsync CLI."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from htsync_common import Partition, SyncConfig

from htsync.cli import app
from htsync.engine import SyncEngine

from conftest import FakeReloader, RecordingNotifier

runner = CliRunner()


@pytest.fixture
def cli_engine(tmp_config: SyncConfig):
    engine = SyncEngine(tmp_config, reloader=FakeReloader(), notifier=RecordingNotifier())
    with patch("htsync.commands.users.get_config", return_value=tmp_config), patch(
        "htsync.commands.users.build_engine", return_value=engine
    ):
        yield engine


class TestCli:
    def test_add_and_list(self, cli_engine: SyncEngine):
        result = runner.invoke(app, ["add", "bob@example.com", "--role", "admin"])
        assert result.exit_code == 0, result.output
        assert "Temporary password" in result.output
        assert cli_engine.store.list_identities(Partition.ADMIN) == ["bob@example.com"]

        result = runner.invoke(app, ["list"])
        assert result.exit_code == 0
        assert "bob@example.com" in result.output

    def test_add_rejects_bad_identity(self, cli_engine: SyncEngine):
        result = runner.invoke(app, ["add", "bad:identity"])
        assert result.exit_code == 2

    def test_remove_missing(self, cli_engine: SyncEngine):
        result = runner.invoke(app, ["remove", "ghost@example.com"])
        assert result.exit_code == 0
        assert "not found" in result.output

    def test_status(self, cli_engine: SyncEngine):
        runner.invoke(app, ["add", "alice@example.com"])
        result = runner.invoke(app, ["status", "alice@example.com"])
        assert result.exit_code == 0
        assert "user" in result.output
        assert runner.invoke(app, ["status", "ghost@example.com"]).exit_code == 1

    def test_passwd_wrong_secret(self, cli_engine: SyncEngine):
        runner.invoke(app, ["add", "alice@example.com"])
        result = runner.invoke(
            app,
            ["passwd", "alice@example.com", "--old-password", "nope", "--new-password", "x"],
        )
        assert result.exit_code == 1
        assert "Invalid old password" in result.output

    def test_sync_all(self, cli_engine: SyncEngine, tmp_config: SyncConfig, tmp_path: Path):
        export = tmp_path / "users.json"
        export.write_text(json.dumps([{"email": "alice@example.com"}, {"email": "bob@example.com", "role": "admin"}]))
        cfg = tmp_config.model_copy(update={"directory_file": export})
        with patch("htsync.commands.users.get_config", return_value=cfg):
            result = runner.invoke(app, ["sync-all"])
        assert result.exit_code == 0, result.output
        assert "2 success" in result.output
        assert cli_engine.store.list_identities(Partition.ADMIN) == ["bob@example.com"]
