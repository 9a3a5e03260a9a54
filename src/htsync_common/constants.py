"""Shared constants for the htsync ecosystem."""

from pathlib import Path

# Default paths (overridable via SyncConfig / env vars)
AUTH_DIR = Path("/etc/nginx/auth")
GENERAL_PARTITION_FILE = "users.htpasswd"
ADMIN_PARTITION_FILE = "admin.htpasswd"
LEDGER_FILE = "temp-credentials.json"

# Audit / logging
LOG_DIR = Path("/var/log/htsync")
AUDIT_JSONL_PATH = LOG_DIR / "audit.jsonl"
AUDIT_DB_PATH = Path("/var/lib/htsync/audit.db")

# bcrypt
DEFAULT_HASH_WORK_FACTOR = 12
BCRYPT_MARKER = "$2b$"
# NGINX / Apache htpasswd verifiers expect the $2y$ variant
PROXY_BCRYPT_MARKER = "$2y$"
# bcrypt only hashes the first 72 bytes of a secret
MAX_SECRET_BYTES = 72

# Reverse proxy reload
DEFAULT_RELOAD_COMMAND = "nginx -s reload"
DEFAULT_RELOAD_TIMEOUT = 30.0

# Notifications
DEFAULT_NOTIFIER_TIMEOUT = 10.0
DEFAULT_LOGIN_URL = "http://localhost/"
