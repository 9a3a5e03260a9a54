"""NGINX config validation and reload."""

from __future__ import annotations

import logging
import shlex
import subprocess
from typing import Protocol

from htsync.errors import ReloadError

log = logging.getLogger(__name__)


class ReloadPort(Protocol):
    def reload(self) -> None:
        """Make the proxy pick up the credential files. Raises ReloadError."""


def _run(cmd: list[str], *, timeout: float) -> subprocess.CompletedProcess[str]:
    try:
        return subprocess.run(
            cmd,
            check=False,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired as exc:
        raise ReloadError(f"Command timed out after {timeout:g}s: {' '.join(cmd)}") from exc
    except OSError as exc:
        raise ReloadError(f"Command failed: {' '.join(cmd)}\n{exc}") from exc


class CommandReloader:
    """Runs the configured reload command, optionally validating config first."""

    def __init__(self, command: str, *, validate_command: str | None = None, timeout: float = 30.0):
        self.command = shlex.split(command)
        self.validate_command = shlex.split(validate_command) if validate_command else None
        self.timeout = timeout
        if not self.command:
            raise ValueError("reload command must not be empty")

    def validate(self) -> None:
        """Run the validation command (e.g. nginx -t). Raises ReloadError on failure."""
        if not self.validate_command:
            return
        result = _run(self.validate_command, timeout=self.timeout)
        if result.returncode != 0:
            raise ReloadError(f"NGINX config test failed:\n{result.stderr}")

    def reload(self) -> None:
        """Validate config, then reload NGINX."""
        self.validate()
        result = _run(self.command, timeout=self.timeout)
        if result.returncode != 0:
            raise ReloadError(result.stderr or result.stdout or f"exit code {result.returncode}")
        log.info("NGINX configuration reloaded")


class NoopReloader:
    """Reload port that does nothing, for dry runs."""

    def reload(self) -> None:
        log.debug("Skipping proxy reload")
