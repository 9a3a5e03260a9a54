"""bcrypt credential hashing for NGINX htpasswd files."""

from __future__ import annotations

import secrets

import bcrypt

from htsync_common.constants import BCRYPT_MARKER, DEFAULT_HASH_WORK_FACTOR, MAX_SECRET_BYTES, PROXY_BCRYPT_MARKER

from htsync.errors import InvalidInput

# No 0/O, 1/l/I: temporary secrets are read from an email and typed by hand.
_TEMP_ALPHABET = "abcdefghjkmnpqrstuvwxyzABCDEFGHJKLMNPQRSTUVWXYZ23456789"
_TEMP_GROUPS = 4
_TEMP_GROUP_LEN = 4


def to_proxy_digest(digest: str) -> str:
    """Rewrite bcrypt's native $2b$ marker to the $2y$ marker NGINX expects."""
    if digest.startswith(BCRYPT_MARKER):
        return PROXY_BCRYPT_MARKER + digest[len(BCRYPT_MARKER):]
    return digest


def from_proxy_digest(digest: str) -> str:
    if digest.startswith(PROXY_BCRYPT_MARKER):
        return BCRYPT_MARKER + digest[len(PROXY_BCRYPT_MARKER):]
    return digest


def check_secret(secret: str) -> str:
    if len(secret.encode()) > MAX_SECRET_BYTES:
        raise InvalidInput(f"Password must be at most {MAX_SECRET_BYTES} bytes")
    return secret


def generate_temp_secret() -> str:
    """Return a random, human-typeable one-time secret like ``k7Qm-xR2p-...``."""
    groups = [
        "".join(secrets.choice(_TEMP_ALPHABET) for _ in range(_TEMP_GROUP_LEN))
        for _ in range(_TEMP_GROUPS)
    ]
    return "-".join(groups)


class CredentialHasher:
    """One-way password hash with a fixed work factor."""

    def __init__(self, rounds: int = DEFAULT_HASH_WORK_FACTOR):
        self.rounds = rounds

    def hash(self, secret: str) -> str:
        """Generate a bcrypt hash suitable for NGINX htpasswd files."""
        check_secret(secret)
        salt = bcrypt.gensalt(rounds=self.rounds)
        hashed = bcrypt.hashpw(secret.encode(), salt)
        return to_proxy_digest(hashed.decode())

    def verify(self, secret: str, digest: str) -> bool:
        try:
            return bcrypt.checkpw(secret.encode(), from_proxy_digest(digest).encode())
        except ValueError:
            return False
