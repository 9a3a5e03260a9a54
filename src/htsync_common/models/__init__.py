"""Shared Pydantic models."""

from htsync_common.models.audit_event import AuditEvent
from htsync_common.models.credential import CredentialEntry, Partition, TemporaryCredential
from htsync_common.models.user import RejectedRecord, Role, UserRecord

__all__ = ["AuditEvent", "CredentialEntry", "Partition", "RejectedRecord", "Role", "TemporaryCredential", "UserRecord"]
