"""Read-only access to the canonical user directory."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Protocol

import httpx
from pydantic import ValidationError

from htsync_common import RejectedRecord, UserRecord

from htsync.errors import DirectoryError

log = logging.getLogger(__name__)


class DirectoryPort(Protocol):
    def list_users(self) -> list[UserRecord | RejectedRecord]:
        """Return every directory entry in enumeration order."""


def _label(raw: Any, index: int) -> str:
    if isinstance(raw, dict):
        for key in ("identity", "email", "emailId"):
            value = raw.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()
    return f"<entry {index}>"


def parse_users(data: Any) -> list[UserRecord | RejectedRecord]:
    """Validate a directory payload: a list of users, or ``{"users": [...]}``.

    Entries are validated one by one; an unreadable entry becomes a
    :class:`RejectedRecord` in its place so the rest can still be synced.
    A payload that is not a list at all raises :class:`DirectoryError`.
    """
    if isinstance(data, dict) and "users" in data:
        data = data["users"]
    if not isinstance(data, list):
        raise DirectoryError(f"Malformed directory payload: expected a list of users, got {type(data).__name__}")

    records: list[UserRecord | RejectedRecord] = []
    for index, raw in enumerate(data):
        try:
            records.append(UserRecord.model_validate(raw))
        except ValidationError as exc:
            label = _label(raw, index)
            errors = "; ".join(err["msg"] for err in exc.errors())
            log.warning("Skipping directory entry %s: %s", label, errors)
            records.append(RejectedRecord(identity=label, error=f"Invalid directory entry: {errors}"))
    return records


class HttpDirectory:
    """Fetches the user list from a directory service over HTTP."""

    def __init__(
        self,
        url: str,
        *,
        token: str | None = None,
        timeout: float = 30.0,
        client: httpx.Client | None = None,
    ):
        self.url = url
        self.timeout = timeout
        self.headers = {"Authorization": f"Bearer {token}"} if token else {}
        self._client = client

    def list_users(self) -> list[UserRecord | RejectedRecord]:
        try:
            if self._client is not None:
                resp = self._client.get(self.url, headers=self.headers, timeout=self.timeout)
            else:
                with httpx.Client(timeout=self.timeout) as client:
                    resp = client.get(self.url, headers=self.headers)
            resp.raise_for_status()
            data = resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise DirectoryError(f"Failed to query directory {self.url}: {exc}") from exc
        users = parse_users(data)
        log.info("Fetched %d directory entries from %s", len(users), self.url)
        return users


class JsonFileDirectory:
    """Reads users from a JSON export of the directory."""

    def __init__(self, path: Path):
        self.path = path

    def list_users(self) -> list[UserRecord | RejectedRecord]:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise DirectoryError(f"Failed to read directory export {self.path}: {exc}") from exc
        return parse_users(data)
