"""Tests for the htpasswd credential store."""

from __future__ import annotations

import threading
from pathlib import Path
from unittest.mock import patch

import pytest

from htsync_common import Partition

from htsync.errors import InvalidInput, StoreIOError
from htsync.services.htpasswd import CredentialStore, HtpasswdFile, parse_line


class TestParseLine:
    def test_well_formed(self):
        entry = parse_line("alice@example.com:$2y$12$abc:def")
        assert entry.identity == "alice@example.com"
        assert entry.hash_digest == "$2y$12$abc:def"

    def test_malformed(self):
        assert parse_line("no-separator-here") is None
        assert parse_line("# comment: with colon") is None
        assert parse_line(":missing-identity") is None
        assert parse_line("   ") is None


class TestHtpasswdFile:
    def test_upsert_creates_file_and_parents(self, tmp_path: Path):
        f = HtpasswdFile(tmp_path / "deep" / "nested" / "users.htpasswd")
        f.upsert("alice", "$2y$04$hash")
        assert f.path.read_text() == "alice:$2y$04$hash\n"

    def test_upsert_replaces_existing(self, tmp_path: Path):
        f = HtpasswdFile(tmp_path / "users.htpasswd")
        f.upsert("alice", "h1")
        f.upsert("bob", "h2")
        f.upsert("alice", "h3")
        assert f.path.read_text().splitlines() == ["bob:h2", "alice:h3"]

    def test_upsert_collapses_duplicates(self, tmp_path: Path):
        path = tmp_path / "users.htpasswd"
        path.write_text("alice:old1\nalice:old2\n")
        HtpasswdFile(path).upsert("alice", "new")
        assert path.read_text() == "alice:new\n"

    def test_identity_match_is_exact_and_case_sensitive(self, tmp_path: Path):
        f = HtpasswdFile(tmp_path / "users.htpasswd")
        f.upsert("Alice", "h1")
        f.upsert("alice", "h2")
        f.upsert("alice2", "h3")
        assert not f.remove("ALICE")
        assert f.remove("alice")
        assert f.list_identities() == ["Alice", "alice2"]

    def test_malformed_lines_preserved(self, tmp_path: Path):
        path = tmp_path / "users.htpasswd"
        path.write_text("# managed by htsync\nbroken line without separator\nbob:h2\n")
        f = HtpasswdFile(path)
        f.upsert("alice", "h1")
        f.remove("bob")
        assert path.read_text().splitlines() == [
            "# managed by htsync",
            "broken line without separator",
            "alice:h1",
        ]
        assert f.list_identities() == ["alice"]

    def test_blank_lines_preserved(self, tmp_path: Path):
        path = tmp_path / "users.htpasswd"
        path.write_text("# staff\n\nbob:h2\n\ncarol:h3\n")
        f = HtpasswdFile(path)
        f.upsert("alice", "h1")
        f.remove("carol")
        assert path.read_text() == "# staff\n\nbob:h2\n\nalice:h1\n"

    def test_rejects_line_break_in_identity(self, tmp_path: Path):
        path = tmp_path / "users.htpasswd"
        path.write_text("bob:h2\n")
        f = HtpasswdFile(path)
        with pytest.raises(InvalidInput):
            f.upsert("mallory\rbob", "h1")
        with pytest.raises(InvalidInput):
            f.upsert("mallory\u2028bob", "h1")
        assert path.read_text() == "bob:h2\n"

    def test_carriage_return_does_not_split_lines(self, tmp_path: Path):
        path = tmp_path / "users.htpasswd"
        path.write_bytes(b"mallory\rbob:h1\nbob:h2\r\n")
        f = HtpasswdFile(path)
        assert f.list_identities() == ["mallory\rbob", "bob"]
        assert f.get_digest("bob") == "h2"
        f.upsert("bob", "h3")
        assert path.read_bytes() == b"mallory\rbob:h1\nbob:h3\n"

    def test_remove_reports_presence(self, tmp_path: Path):
        f = HtpasswdFile(tmp_path / "users.htpasswd")
        assert f.remove("ghost") is False
        assert not f.path.exists()
        f.upsert("alice", "h1")
        assert f.remove("alice") is True
        assert f.path.read_text() == ""

    def test_get_digest(self, tmp_path: Path):
        f = HtpasswdFile(tmp_path / "users.htpasswd")
        f.upsert("alice", "h1")
        assert f.get_digest("alice") == "h1"
        assert f.get_digest("bob") is None
        assert f.contains("alice")

    def test_read_nonexistent(self, tmp_path: Path):
        assert HtpasswdFile(tmp_path / "nonexistent.htpasswd").list_identities() == []

    def test_read_error_wrapped(self, tmp_path: Path):
        f = HtpasswdFile(tmp_path / "users.htpasswd")
        with patch("htsync.services.htpasswd.read_text", side_effect=PermissionError("denied")):
            with pytest.raises(StoreIOError):
                f.list_identities()

    def test_write_error_wrapped(self, tmp_path: Path):
        f = HtpasswdFile(tmp_path / "users.htpasswd")
        with patch("htsync.services.htpasswd.atomic_write_text", side_effect=OSError("disk full")):
            with pytest.raises(StoreIOError, match="disk full"):
                f.upsert("alice", "h1")

    def test_concurrent_upserts_do_not_lose_updates(self, tmp_path: Path):
        f = HtpasswdFile(tmp_path / "users.htpasswd")
        identities = [f"user{i}@example.com" for i in range(40)]
        threads = [threading.Thread(target=f.upsert, args=(i, "h")) for i in identities]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert sorted(f.list_identities()) == sorted(identities)


class TestCredentialStore:
    def test_partitions_are_separate_files(self, tmp_path: Path):
        store = CredentialStore(tmp_path / "users.htpasswd", tmp_path / "admin.htpasswd")
        store.upsert(Partition.ADMIN, "root", "h1")
        assert store.list_identities(Partition.ADMIN) == ["root"]
        assert store.list_identities(Partition.GENERAL) == []
        assert store.contains(Partition.ADMIN, "root")
        assert store.get_digest(Partition.ADMIN, "root") == "h1"
        assert store.remove(Partition.ADMIN, "root")
        assert not store.remove(Partition.ADMIN, "root")
