"""Credential store and temporary credential models."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field


def check_identity(value: str) -> str:
    """Return ``value`` if it can be stored as a single htpasswd key.

    Rejects the ``:`` separator and every character ``str.splitlines`` treats
    as a line boundary (``\\r``, ``\\x0b``, ``\\x85``, ``\\u2028`` ...).
    """
    if not value:
        raise ValueError("identity must not be empty")
    if ":" in value or value.splitlines() != [value]:
        raise ValueError("identity must not contain ':' or line breaks")
    return value


class Partition(str, Enum):
    """Role-scoped credential file. GENERAL is the superset for access."""

    GENERAL = "general"
    ADMIN = "admin"


class CredentialEntry(BaseModel):
    identity: str
    hash_digest: str

    def to_line(self) -> str:
        return f"{self.identity}:{self.hash_digest}"


class TemporaryCredential(BaseModel):
    """A one-time secret issued on signup or reset."""

    identity: str
    secret: str
    issued_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    consumed: bool = False
