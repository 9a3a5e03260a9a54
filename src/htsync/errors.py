"""Custom exceptions for credential synchronization."""

from __future__ import annotations


class HtsyncError(Exception):
    """Base exception for all htsync operations."""

    def __init__(self, message: str, *, exit_code: int = 1):
        super().__init__(message)
        self.message = message
        self.exit_code = exit_code


class InvalidInput(HtsyncError):
    """A request field is missing or malformed."""

    def __init__(self, message: str, *, exit_code: int = 2):
        super().__init__(message, exit_code=exit_code)


class InvalidCredential(HtsyncError):
    """Old secret rejected or identity unknown. Deliberately indistinguishable."""

    def __init__(self, message: str = "Invalid old password or password already changed", *, exit_code: int = 1):
        super().__init__(message, exit_code=exit_code)


class StoreIOError(HtsyncError):
    """Reading or rewriting a partition or ledger file failed."""


class ReloadError(HtsyncError):
    """The reverse-proxy reload command failed."""


class NotificationError(HtsyncError):
    """Delivering a credential notification failed."""


class DirectoryError(HtsyncError):
    """The user directory could not be queried."""
