"""HTTP Basic Auth credential store — role-partitioned htpasswd files.

Each partition is a plain ``identity:digest`` file read by NGINX's
``auth_basic_user_file``. Every mutation is a full read-modify-rewrite under
the file's lock. Lines without a ``:`` separator, ``#`` comments and blank
lines are kept verbatim and never matched by identity operations. Lines are
split on ``\\n`` only, the same boundary the writer uses.
"""

from __future__ import annotations

import logging
from pathlib import Path

from htsync_common import CredentialEntry, Partition
from htsync_common.models.credential import check_identity

from htsync.errors import InvalidInput, StoreIOError
from htsync.services.fileio import atomic_write_text, path_lock, read_text

log = logging.getLogger(__name__)


def parse_line(line: str) -> CredentialEntry | None:
    """Return the entry for a well-formed line, None for anything else."""
    if not line.strip() or line.lstrip().startswith("#") or ":" not in line:
        return None
    identity, digest = line.split(":", 1)
    if not identity:
        return None
    return CredentialEntry(identity=identity, hash_digest=digest.removesuffix("\r"))


class HtpasswdFile:
    """A single htpasswd partition file."""

    def __init__(self, path: Path):
        self.path = path

    def _read_lines(self) -> list[str]:
        try:
            content = read_text(self.path)
        except OSError as exc:
            raise StoreIOError(f"Failed to read {self.path}: {exc}") from exc
        if not content:
            return []
        lines = content.split("\n")
        if lines[-1] == "":
            lines.pop()
        return lines

    def _write_lines(self, lines: list[str]) -> None:
        content = "\n".join(lines) + "\n" if lines else ""
        try:
            atomic_write_text(self.path, content)
        except OSError as exc:
            raise StoreIOError(f"Failed to write {self.path}: {exc}") from exc

    @staticmethod
    def _without(lines: list[str], identity: str) -> tuple[list[str], bool]:
        kept: list[str] = []
        found = False
        for line in lines:
            entry = parse_line(line)
            if entry is not None and entry.identity == identity:
                found = True
                continue
            kept.append(line)
        return kept, found

    def entries(self) -> list[CredentialEntry]:
        with path_lock(self.path):
            lines = self._read_lines()
        return [entry for entry in map(parse_line, lines) if entry is not None]

    def upsert(self, identity: str, hash_digest: str) -> None:
        """Replace any entry for ``identity`` and append the new one."""
        try:
            check_identity(identity)
        except ValueError as exc:
            raise InvalidInput(str(exc)) from exc
        entry = CredentialEntry(identity=identity, hash_digest=hash_digest)
        with path_lock(self.path):
            lines, replaced = self._without(self._read_lines(), identity)
            lines.append(entry.to_line())
            self._write_lines(lines)
        log.debug("%s %s in %s", "Updated" if replaced else "Added", identity, self.path)

    def remove(self, identity: str) -> bool:
        """Drop the entry for ``identity``. Returns whether one was present."""
        with path_lock(self.path):
            lines, found = self._without(self._read_lines(), identity)
            if found:
                self._write_lines(lines)
        if found:
            log.debug("Removed %s from %s", identity, self.path)
        return found

    def list_identities(self) -> list[str]:
        return [entry.identity for entry in self.entries()]

    def get_digest(self, identity: str) -> str | None:
        for entry in self.entries():
            if entry.identity == identity:
                return entry.hash_digest
        return None

    def contains(self, identity: str) -> bool:
        return self.get_digest(identity) is not None


class CredentialStore:
    """The General and Admin partitions addressed by :class:`Partition`."""

    def __init__(self, general_path: Path, admin_path: Path):
        self._files = {
            Partition.GENERAL: HtpasswdFile(general_path),
            Partition.ADMIN: HtpasswdFile(admin_path),
        }

    def file(self, partition: Partition) -> HtpasswdFile:
        return self._files[partition]

    def upsert(self, partition: Partition, identity: str, hash_digest: str) -> None:
        self._files[partition].upsert(identity, hash_digest)

    def remove(self, partition: Partition, identity: str) -> bool:
        return self._files[partition].remove(identity)

    def list_identities(self, partition: Partition) -> list[str]:
        return self._files[partition].list_identities()

    def get_digest(self, partition: Partition, identity: str) -> str | None:
        return self._files[partition].get_digest(identity)

    def contains(self, partition: Partition, identity: str) -> bool:
        return self._files[partition].contains(identity)
