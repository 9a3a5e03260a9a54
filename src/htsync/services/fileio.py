"""Per-file locking and atomic rewrites for the credential files."""

from __future__ import annotations

import os
import tempfile
import threading
from pathlib import Path

_registry_lock = threading.Lock()
_path_locks: dict[Path, threading.Lock] = {}


def path_lock(path: Path) -> threading.Lock:
    """Return the process-wide mutex guarding ``path``.

    Every read-modify-rewrite of a file must happen while holding its lock;
    different files never share a lock.
    """
    key = Path(os.path.abspath(path))
    with _registry_lock:
        lock = _path_locks.get(key)
        if lock is None:
            lock = threading.Lock()
            _path_locks[key] = lock
        return lock


def read_text(path: Path) -> str | None:
    """Return the file contents untranslated, or None when it does not exist."""
    try:
        with open(path, encoding="utf-8", newline="") as f:
            return f.read()
    except FileNotFoundError:
        return None


def atomic_write_text(path: Path, content: str, *, mode: int | None = None) -> None:
    """Replace ``path`` with ``content`` via a temp file in the same directory."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=str(path.parent), prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
        if mode is not None:
            os.chmod(tmp_name, mode)
        elif path.exists():
            os.chmod(tmp_name, path.stat().st_mode & 0o777)
        else:
            os.chmod(tmp_name, 0o644)
        os.replace(tmp_name, path)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:
            pass
        raise
