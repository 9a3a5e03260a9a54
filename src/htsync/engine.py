"""Credential synchronization engine.

Computes and applies the htpasswd partition mutations that make the proxy's
credential files reflect a directory user's role, then issues the one-time
secret, notifies the user and reloads the proxy.

Partition membership rules:

* every identity gets an entry in GENERAL;
* admins additionally get the *same* digest in ADMIN;
* a user whose directory role is no longer admin is removed from ADMIN.

Steps are applied in order and never rolled back. A failed reload leaves the
files ahead of the running proxy until the next successful reload.
"""

from __future__ import annotations

import logging

from pydantic import BaseModel, Field, computed_field

from htsync_common import Partition, RejectedRecord, Role, SyncConfig, UserRecord

from htsync.audit import audit
from htsync.errors import DirectoryError, InvalidCredential, InvalidInput, NotificationError, ReloadError
from htsync.services.directory import DirectoryPort, HttpDirectory, JsonFileDirectory
from htsync.services.hasher import CredentialHasher, check_secret, generate_temp_secret
from htsync.services.htpasswd import CredentialStore
from htsync.services.ledger import TemporaryCredentialLedger
from htsync.services.nginx import CommandReloader, NoopReloader, ReloadPort
from htsync.services.notifier import HttpNotifier, Notifier, NullNotifier

log = logging.getLogger(__name__)


class SyncResult(BaseModel):
    identity: str
    role: Role
    temp_secret: str
    is_new_user: bool
    notified: bool = False
    reloaded: bool = False
    reload_error: str | None = None


class RemovalResult(BaseModel):
    identity: str
    removed_from: list[Partition] = Field(default_factory=list)
    reloaded: bool = False
    reload_error: str | None = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def found(self) -> bool:
        return bool(self.removed_from)


class PasswordChangeResult(BaseModel):
    identity: str
    role: Role
    reloaded: bool = False
    reload_error: str | None = None


class RecordOutcome(BaseModel):
    identity: str
    ok: bool
    error: str | None = None


class BulkSyncReport(BaseModel):
    success: int = 0
    errors: int = 0
    outcomes: list[RecordOutcome] = Field(default_factory=list)
    reloaded: bool = False
    reload_error: str | None = None


class UserStatus(BaseModel):
    identity: str
    role: Role | None = None
    has_access: bool = Field(default=False, serialization_alias="hasAccess")


class SyncEngine:
    """Keeps the GENERAL and ADMIN partitions consistent with directory records."""

    def __init__(
        self,
        cfg: SyncConfig,
        *,
        reloader: ReloadPort,
        notifier: Notifier,
        hasher: CredentialHasher | None = None,
        store: CredentialStore | None = None,
        ledger: TemporaryCredentialLedger | None = None,
    ):
        self.cfg = cfg
        self.reloader = reloader
        self.notifier = notifier
        self.hasher = hasher or CredentialHasher(cfg.hash_work_factor)
        self.store = store or CredentialStore(cfg.general_partition_path, cfg.admin_partition_path)
        self.ledger = ledger or TemporaryCredentialLedger(cfg.ledger_path)

    # ------------------------------------------------------------------
    # Out-of-line steps
    # ------------------------------------------------------------------

    def _notify(self, identity: str, temp_secret: str, is_new_user: bool) -> bool:
        try:
            self.notifier.send(identity, temp_secret, is_new_user)
        except NotificationError as exc:
            log.warning("Notification for %s failed: %s", identity, exc)
            return False
        return True

    def _reload(self) -> tuple[bool, str | None]:
        try:
            self.reloader.reload()
        except ReloadError as exc:
            log.error("Proxy reload failed: %s", exc)
            return False, str(exc)
        return True, None

    def role_of(self, identity: str) -> Role | None:
        """Role as encoded by partition membership, None when unknown."""
        if self.store.contains(Partition.ADMIN, identity):
            return Role.ADMIN
        if self.store.contains(Partition.GENERAL, identity):
            return Role.USER
        return None

    def _apply_digest(self, identity: str, role: Role, digest: str) -> None:
        self.store.upsert(Partition.GENERAL, identity, digest)
        if role is Role.ADMIN:
            self.store.upsert(Partition.ADMIN, identity, digest)
        elif self.store.remove(Partition.ADMIN, identity):
            log.info("Removed %s from admin partition (role is now %s)", identity, role.value)

    def _issue(self, identity: str, role: Role, *, is_new_user: bool, reload: bool) -> SyncResult:
        temp_secret = generate_temp_secret()
        digest = self.hasher.hash(temp_secret)
        self._apply_digest(identity, role, digest)
        self.ledger.issue(identity, temp_secret)

        result = SyncResult(
            identity=identity,
            role=role,
            temp_secret=temp_secret,
            is_new_user=is_new_user,
        )
        result.notified = self._notify(identity, temp_secret, is_new_user)
        if reload:
            result.reloaded, result.reload_error = self._reload()
        return result

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def sync_user(self, record: UserRecord, *, reload: bool = True) -> SyncResult:
        """Make both partitions reflect ``record`` and issue a fresh temporary secret.

        Repeating the call is safe; each call replaces the digest and
        invalidates the previously issued secret.
        """
        with audit(self.cfg, "user.sync", target=record.identity, role=record.role.value) as event:
            is_new_user = not self.store.contains(Partition.GENERAL, record.identity)
            result = self._issue(record.identity, record.role, is_new_user=is_new_user, reload=reload)
            event.params.update(new_user=is_new_user, notified=result.notified, reloaded=result.reloaded)
        log.info("Synced %s (%s)", record.identity, record.role.value)
        return result

    def remove_user(self, identity: str, *, reload: bool = True) -> RemovalResult:
        """Remove ``identity`` from both partitions. Absence is not an error."""
        if not identity:
            raise InvalidInput("identity is required")
        with audit(self.cfg, "user.remove", target=identity) as event:
            result = RemovalResult(identity=identity)
            # ADMIN first, so an interruption never leaves an admin-only entry.
            for partition in (Partition.ADMIN, Partition.GENERAL):
                if self.store.remove(partition, identity):
                    result.removed_from.append(partition)
            self.ledger.discard(identity)
            if reload:
                result.reloaded, result.reload_error = self._reload()
            event.params.update(found=result.found, removed_from=[p.value for p in result.removed_from])
        if result.found:
            log.info("Removed %s from %s", identity, ", ".join(p.value for p in result.removed_from))
        else:
            log.info("User not found: %s", identity)
        return result

    def change_own_password(self, identity: str, old_secret: str, new_secret: str) -> PasswordChangeResult:
        """Replace the temporary secret with a user-chosen one, exactly once.

        The role is read from ADMIN partition membership. Unknown identities
        and wrong or already used secrets all raise :class:`InvalidCredential`.
        """
        if not identity or not old_secret or not new_secret:
            raise InvalidInput("identity, old secret and new secret are required")
        check_secret(new_secret)

        with audit(self.cfg, "user.password_change", target=identity) as event:
            applied: dict[str, Role] = {}

            def apply() -> None:
                role = self.role_of(identity)
                if role is None:
                    raise InvalidCredential()
                self._apply_digest(identity, role, self.hasher.hash(new_secret))
                applied["role"] = role

            self.ledger.try_consume(identity, old_secret, apply=apply)
            result = PasswordChangeResult(identity=identity, role=applied["role"])
            result.reloaded, result.reload_error = self._reload()
            event.params.update(role=result.role.value, reloaded=result.reloaded)
        log.info("Password changed for %s", identity)
        return result

    def reset_password(self, identity: str) -> SyncResult:
        """Issue a new temporary secret for an existing identity, keeping its role."""
        if not identity:
            raise InvalidInput("identity is required")
        with audit(self.cfg, "user.password_reset", target=identity) as event:
            role = self.role_of(identity)
            if role is None:
                raise InvalidInput(f"Unknown identity: {identity}")
            result = self._issue(identity, role, is_new_user=False, reload=True)
            event.params.update(role=role.value, notified=result.notified, reloaded=result.reloaded)
        log.info("Password reset for %s", identity)
        return result

    def bulk_sync(self, records: list[UserRecord | RejectedRecord]) -> BulkSyncReport:
        """Sync every record in order, isolating per-record failures.

        Rejected directory entries are counted as errors without touching the
        partitions.

        The proxy is reloaded once, after all records are applied.
        """
        report = BulkSyncReport()
        with audit(self.cfg, "users.bulk_sync", count=len(records)) as event:
            for record in records:
                if isinstance(record, RejectedRecord):
                    report.errors += 1
                    report.outcomes.append(RecordOutcome(identity=record.identity, ok=False, error=record.error))
                    continue
                try:
                    self.sync_user(record, reload=False)
                except Exception as exc:
                    log.error("Failed to sync user %s: %s", record.identity, exc)
                    report.errors += 1
                    report.outcomes.append(RecordOutcome(identity=record.identity, ok=False, error=str(exc)))
                else:
                    report.success += 1
                    report.outcomes.append(RecordOutcome(identity=record.identity, ok=True))
            if report.success:
                report.reloaded, report.reload_error = self._reload()
            event.params.update(success=report.success, errors=report.errors, reloaded=report.reloaded)
        log.info("Sync complete: %d success, %d errors", report.success, report.errors)
        return report

    def sync_directory(self, directory: DirectoryPort) -> BulkSyncReport:
        records = directory.list_users()
        log.info("Found %d entries in directory", len(records))
        return self.bulk_sync(records)

    def user_status(self, identity: str) -> UserStatus:
        role = self.role_of(identity)
        return UserStatus(identity=identity, role=role, has_access=role is not None)

    def list_accounts(self) -> list[UserStatus]:
        """Every identity across both partitions, GENERAL order first."""
        admins = set(self.store.list_identities(Partition.ADMIN))
        seen: dict[str, UserStatus] = {}
        for identity in self.store.list_identities(Partition.GENERAL):
            role = Role.ADMIN if identity in admins else Role.USER
            seen.setdefault(identity, UserStatus(identity=identity, role=role, has_access=True))
        for identity in admins:
            # Admin entry without a GENERAL entry: hand-edited or interrupted.
            seen.setdefault(identity, UserStatus(identity=identity, role=Role.ADMIN, has_access=False))
        return list(seen.values())


def build_notifier(cfg: SyncConfig) -> Notifier:
    if cfg.notifier_endpoint:
        return HttpNotifier(cfg.notifier_endpoint, login_url=cfg.login_url, timeout=cfg.notifier_timeout)
    return NullNotifier()


def build_directory(cfg: SyncConfig) -> DirectoryPort:
    if cfg.directory_url:
        return HttpDirectory(cfg.directory_url, token=cfg.directory_token)
    if cfg.directory_file:
        return JsonFileDirectory(cfg.directory_file)
    raise DirectoryError("No user directory configured (set HTSYNC_DIRECTORY_URL or HTSYNC_DIRECTORY_FILE)")


def build_engine(cfg: SyncConfig) -> SyncEngine:
    """Wire a SyncEngine with the collaborators named in ``cfg``.

    An empty ``reload_command`` leaves the proxy alone (dry run).
    """
    reloader: ReloadPort
    if not cfg.reload_command.strip():
        log.warning("No reload command configured, proxy reloads are skipped")
        reloader = NoopReloader()
    else:
        reloader = CommandReloader(
            cfg.reload_command,
            validate_command=cfg.validate_command,
            timeout=cfg.reload_timeout,
        )
    return SyncEngine(cfg, reloader=reloader, notifier=build_notifier(cfg))
