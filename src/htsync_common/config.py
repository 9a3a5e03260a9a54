"""Central configuration for the credential sync engine."""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import BaseModel, Field, model_validator

from htsync_common.constants import (
    ADMIN_PARTITION_FILE,
    AUDIT_DB_PATH,
    AUDIT_JSONL_PATH,
    AUTH_DIR,
    DEFAULT_HASH_WORK_FACTOR,
    DEFAULT_LOGIN_URL,
    DEFAULT_NOTIFIER_TIMEOUT,
    DEFAULT_RELOAD_COMMAND,
    DEFAULT_RELOAD_TIMEOUT,
    GENERAL_PARTITION_FILE,
    LEDGER_FILE,
)


def _env(name: str, default: str | None = None) -> str | None:
    return os.environ.get(f"HTSYNC_{name}", default)


def _env_path(name: str) -> Path | None:
    value = _env(name)
    return Path(value) if value else None


def _env_bool(name: str, default: bool) -> bool:
    value = _env(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


class SyncConfig(BaseModel):
    """Runtime configuration resolved once at startup.

    Partition and ledger paths default to files inside ``auth_dir`` when they
    are not given explicitly.
    """

    auth_dir: Path = Field(default_factory=lambda: _env_path("AUTH_DIR") or AUTH_DIR)
    general_partition_path: Path | None = Field(default_factory=lambda: _env_path("GENERAL_PARTITION_PATH"))
    admin_partition_path: Path | None = Field(default_factory=lambda: _env_path("ADMIN_PARTITION_PATH"))
    ledger_path: Path | None = Field(default_factory=lambda: _env_path("LEDGER_PATH"))

    hash_work_factor: int = Field(
        default_factory=lambda: int(_env("HASH_WORK_FACTOR", str(DEFAULT_HASH_WORK_FACTOR))),
        ge=4,
        le=31,
    )

    reload_command: str = Field(default_factory=lambda: _env("RELOAD_COMMAND", DEFAULT_RELOAD_COMMAND))
    validate_command: str | None = Field(default_factory=lambda: _env("VALIDATE_COMMAND"))
    reload_timeout: float = Field(
        default_factory=lambda: float(_env("RELOAD_TIMEOUT", str(DEFAULT_RELOAD_TIMEOUT))),
        gt=0,
    )

    notifier_endpoint: str | None = Field(default_factory=lambda: _env("NOTIFIER_ENDPOINT"))
    notifier_timeout: float = Field(default=DEFAULT_NOTIFIER_TIMEOUT, gt=0)
    login_url: str = Field(default_factory=lambda: _env("LOGIN_URL", DEFAULT_LOGIN_URL))

    directory_url: str | None = Field(default_factory=lambda: _env("DIRECTORY_URL"))
    directory_file: Path | None = Field(default_factory=lambda: _env_path("DIRECTORY_FILE"))
    directory_token: str | None = Field(default_factory=lambda: _env("DIRECTORY_TOKEN"))

    audit_enabled: bool = Field(default_factory=lambda: _env_bool("AUDIT_ENABLED", True))
    audit_jsonl_path: Path = Field(default_factory=lambda: _env_path("AUDIT_JSONL_PATH") or AUDIT_JSONL_PATH)
    audit_db_path: Path = Field(default_factory=lambda: _env_path("AUDIT_DB_PATH") or AUDIT_DB_PATH)

    @model_validator(mode="after")
    def _fill_partition_paths(self) -> "SyncConfig":
        if self.general_partition_path is None:
            self.general_partition_path = self.auth_dir / GENERAL_PARTITION_FILE
        if self.admin_partition_path is None:
            self.admin_partition_path = self.auth_dir / ADMIN_PARTITION_FILE
        if self.ledger_path is None:
            self.ledger_path = self.auth_dir / LEDGER_FILE
        return self

    @property
    def log_dir(self) -> Path:
        return self.audit_jsonl_path.parent
