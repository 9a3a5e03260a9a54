"""Out-of-band delivery of temporary credentials."""

from __future__ import annotations

import logging
from typing import Any, Protocol

import httpx

from htsync.errors import NotificationError

log = logging.getLogger(__name__)

_NEW_USER_SUBJECT = "Welcome! Your Account Credentials"
_RESET_SUBJECT = "Your Temporary Password"


class Notifier(Protocol):
    def send(self, identity: str, temp_secret: str, is_new_user: bool) -> None:
        """Deliver the temporary secret. Raises NotificationError."""


def compose_message(identity: str, temp_secret: str, is_new_user: bool, login_url: str) -> dict[str, str]:
    """Return subject and plain-text body for a credential notification."""
    subject = _NEW_USER_SUBJECT if is_new_user else _RESET_SUBJECT
    intro = (
        "Your account has been created. Here are your login credentials:"
        if is_new_user
        else "Your password has been reset. Here are your temporary credentials:"
    )
    body = (
        f"{intro}\n\n"
        f"  Email: {identity}\n"
        f"  Temporary password: {temp_secret}\n"
        f"  Login URL: {login_url}\n\n"
        "This is a one-time password. Change it on first login and do not share it.\n"
    )
    return {"subject": subject, "body": body}


class HttpNotifier:
    """POSTs the notification as JSON to a mail relay endpoint."""

    def __init__(
        self,
        endpoint: str,
        *,
        login_url: str,
        timeout: float = 10.0,
        client: httpx.Client | None = None,
    ):
        self.endpoint = endpoint
        self.login_url = login_url
        self.timeout = timeout
        self._client = client

    def _payload(self, identity: str, temp_secret: str, is_new_user: bool) -> dict[str, Any]:
        return {
            "to": identity,
            "identity": identity,
            "temp_secret": temp_secret,
            "is_new_user": is_new_user,
            **compose_message(identity, temp_secret, is_new_user, self.login_url),
        }

    def send(self, identity: str, temp_secret: str, is_new_user: bool) -> None:
        payload = self._payload(identity, temp_secret, is_new_user)
        try:
            if self._client is not None:
                resp = self._client.post(self.endpoint, json=payload, timeout=self.timeout)
                resp.raise_for_status()
            else:
                with httpx.Client(timeout=self.timeout) as client:
                    resp = client.post(self.endpoint, json=payload)
                    resp.raise_for_status()
        except httpx.HTTPError as exc:
            raise NotificationError(f"Failed to notify {identity}: {exc}") from exc
        log.info("Credential notification sent to %s", identity)


class NullNotifier:
    """Notifier used when no endpoint is configured."""

    def send(self, identity: str, temp_secret: str, is_new_user: bool) -> None:
        log.warning("No notifier endpoint configured; credentials for %s were not delivered", identity)
