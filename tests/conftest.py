"""Shared test fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from htsync_common import SyncConfig

from htsync.engine import SyncEngine
from htsync.errors import NotificationError, ReloadError


class FakeReloader:
    def __init__(self, error: str | None = None):
        self.error = error
        self.calls = 0

    def reload(self) -> None:
        self.calls += 1
        if self.error:
            raise ReloadError(self.error)


class RecordingNotifier:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent: list[tuple[str, str, bool]] = []

    def send(self, identity: str, temp_secret: str, is_new_user: bool) -> None:
        if self.fail:
            raise NotificationError("smtp relay unreachable")
        self.sent.append((identity, temp_secret, is_new_user))


@pytest.fixture
def tmp_config(tmp_path: Path) -> SyncConfig:
    """Return a SyncConfig pointing at temp directories."""
    return SyncConfig(
        auth_dir=tmp_path / "auth",
        hash_work_factor=4,
        reload_command="nginx -s reload",
        validate_command=None,
        notifier_endpoint=None,
        directory_url=None,
        directory_file=None,
        audit_jsonl_path=tmp_path / "log" / "audit.jsonl",
        audit_db_path=tmp_path / "lib" / "audit.db",
    )


@pytest.fixture
def reloader() -> FakeReloader:
    return FakeReloader()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def engine(tmp_config: SyncConfig, reloader: FakeReloader, notifier: RecordingNotifier) -> SyncEngine:
    return SyncEngine(tmp_config, reloader=reloader, notifier=notifier)
