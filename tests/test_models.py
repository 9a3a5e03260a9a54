"""Tests for shared Pydantic models."""

from __future__ import annotations

import json
from datetime import datetime

import pytest
from pydantic import ValidationError

from htsync_common import AuditEvent, CredentialEntry, Role, TemporaryCredential, UserRecord


class TestUserRecord:
    def test_defaults(self):
        record = UserRecord(identity="alice@example.com")
        assert record.role is Role.USER
        assert record.display_name == ""

    def test_strips_identity(self):
        assert UserRecord(identity="  alice@example.com ").identity == "alice@example.com"

    def test_rejects_separator_in_identity(self):
        with pytest.raises(ValidationError):
            UserRecord(identity="evil:user")

    @pytest.mark.parametrize("identity", ["mallory\rbob@example.com", "a\x0bb", "a\x85b", "a\u2028b", "a\nb"])
    def test_rejects_line_breaks_in_identity(self, identity):
        with pytest.raises(ValidationError):
            UserRecord(identity=identity)

    def test_role_case_insensitive(self):
        assert UserRecord(identity="a@example.com", role="ADMIN").role is Role.ADMIN

    def test_display_name_alias(self):
        record = UserRecord.model_validate({"identity": "a@example.com", "displayName": "Ann"})
        assert record.display_name == "Ann"


class TestCredentialEntry:
    def test_to_line(self):
        assert CredentialEntry(identity="alice", hash_digest="$2y$04$x").to_line() == "alice:$2y$04$x"


class TestTemporaryCredential:
    def test_defaults(self):
        record = TemporaryCredential(identity="alice", secret="abcd")
        assert record.consumed is False
        assert isinstance(record.issued_at, datetime)


class TestAuditEvent:
    def test_to_jsonl(self):
        event = AuditEvent(action="user.sync", target="alice@example.com", params={"role": "admin"})
        data = json.loads(event.to_jsonl())
        assert data["action"] == "user.sync"
        assert data["params"]["role"] == "admin"
        assert data["result"] == "success"
