"""Temporary credential ledger — one-time secrets issued on signup/reset."""

from __future__ import annotations

import hmac
import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable

from pydantic import ValidationError

from htsync_common import TemporaryCredential

from htsync.errors import InvalidCredential, StoreIOError
from htsync.services.fileio import atomic_write_text, path_lock, read_text

log = logging.getLogger(__name__)

_LEDGER_MODE = 0o600


class TemporaryCredentialLedger:
    """JSON file mapping identity -> {secret, issued_at, consumed}."""

    def __init__(self, path: Path):
        self.path = path

    def _load(self) -> dict[str, TemporaryCredential]:
        try:
            content = read_text(self.path)
        except OSError as exc:
            raise StoreIOError(f"Failed to read {self.path}: {exc}") from exc
        if not content or not content.strip():
            return {}
        try:
            raw: dict[str, Any] = json.loads(content)
            return {
                identity: TemporaryCredential(identity=identity, **record)
                for identity, record in raw.items()
            }
        except (json.JSONDecodeError, TypeError, AttributeError, ValidationError) as exc:
            raise StoreIOError(f"Corrupt ledger {self.path}: {exc}") from exc

    def _save(self, records: dict[str, TemporaryCredential]) -> None:
        data = {
            identity: record.model_dump(mode="json", exclude={"identity"})
            for identity, record in records.items()
        }
        try:
            atomic_write_text(self.path, json.dumps(data, indent=2) + "\n", mode=_LEDGER_MODE)
        except OSError as exc:
            raise StoreIOError(f"Failed to write {self.path}: {exc}") from exc

    def issue(self, identity: str, secret: str) -> TemporaryCredential:
        """Record a fresh unconsumed secret, invalidating any previous one."""
        record = TemporaryCredential(
            identity=identity,
            secret=secret,
            issued_at=datetime.now(timezone.utc),
            consumed=False,
        )
        with path_lock(self.path):
            records = self._load()
            records[identity] = record
            self._save(records)
        return record

    def get(self, identity: str) -> TemporaryCredential | None:
        with path_lock(self.path):
            return self._load().get(identity)

    def try_consume(
        self,
        identity: str,
        presented_secret: str,
        apply: Callable[[], None] | None = None,
    ) -> TemporaryCredential:
        """Validate and consume the identity's temporary secret.

        ``apply`` runs after validation and before the record is marked
        consumed, inside the same locked read-modify-write. If it raises, the
        secret stays unconsumed. Raises :class:`InvalidCredential` when there
        is no record, it was already consumed, or the secret differs.
        """
        with path_lock(self.path):
            records = self._load()
            record = records.get(identity)
            if (
                record is None
                or record.consumed
                or not hmac.compare_digest(record.secret.encode(), presented_secret.encode())
            ):
                raise InvalidCredential()
            if apply is not None:
                apply()
            records[identity] = record.model_copy(update={"consumed": True})
            self._save(records)
            return records[identity]

    def discard(self, identity: str) -> bool:
        with path_lock(self.path):
            records = self._load()
            if identity not in records:
                return False
            del records[identity]
            self._save(records)
        return True

    def identities(self) -> list[str]:
        with path_lock(self.path):
            return list(self._load())
