"""htsync common — shared models and constants for the htsync engine, CLI and API."""

from htsync_common.constants import (
    ADMIN_PARTITION_FILE,
    AUDIT_DB_PATH,
    AUDIT_JSONL_PATH,
    AUTH_DIR,
    DEFAULT_HASH_WORK_FACTOR,
    DEFAULT_RELOAD_COMMAND,
    DEFAULT_RELOAD_TIMEOUT,
    GENERAL_PARTITION_FILE,
    LEDGER_FILE,
    PROXY_BCRYPT_MARKER,
)
from htsync_common.config import SyncConfig
from htsync_common.models.audit_event import AuditEvent
from htsync_common.models.credential import CredentialEntry, Partition, TemporaryCredential
from htsync_common.models.user import RejectedRecord, Role, UserRecord

__all__ = [
    "ADMIN_PARTITION_FILE",
    "AUDIT_DB_PATH",
    "AUDIT_JSONL_PATH",
    "AUTH_DIR",
    "AuditEvent",
    "CredentialEntry",
    "DEFAULT_HASH_WORK_FACTOR",
    "DEFAULT_RELOAD_COMMAND",
    "DEFAULT_RELOAD_TIMEOUT",
    "GENERAL_PARTITION_FILE",
    "LEDGER_FILE",
    "PROXY_BCRYPT_MARKER",
    "Partition",
    "RejectedRecord",
    "Role",
    "SyncConfig",
    "TemporaryCredential",
    "UserRecord",
]
