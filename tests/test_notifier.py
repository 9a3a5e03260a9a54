"""Tests for credential notifications."""

from __future__ import annotations

import json

import httpx
import pytest

from htsync.errors import NotificationError
from htsync.services.notifier import HttpNotifier, NullNotifier, compose_message


class TestComposeMessage:
    def test_new_user(self):
        msg = compose_message("alice@example.com", "abcd-efgh", True, "https://app.example.com/")
        assert msg["subject"] == "Welcome! Your Account Credentials"
        assert "abcd-efgh" in msg["body"]
        assert "https://app.example.com/" in msg["body"]

    def test_reset(self):
        msg = compose_message("alice@example.com", "abcd-efgh", False, "http://localhost/")
        assert msg["subject"] == "Your Temporary Password"
        assert "reset" in msg["body"]


class TestHttpNotifier:
    def test_posts_payload(self):
        captured: list[dict] = []

        def handler(request: httpx.Request) -> httpx.Response:
            captured.append(json.loads(request.content))
            return httpx.Response(202)

        client = httpx.Client(transport=httpx.MockTransport(handler))
        notifier = HttpNotifier("http://mail.local/send", login_url="http://localhost/", client=client)
        notifier.send("alice@example.com", "abcd-efgh", True)

        assert captured[0]["to"] == "alice@example.com"
        assert captured[0]["temp_secret"] == "abcd-efgh"
        assert captured[0]["is_new_user"] is True
        assert captured[0]["subject"] == "Welcome! Your Account Credentials"

    def test_http_error_raises_notification_error(self):
        client = httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(503)))
        notifier = HttpNotifier("http://mail.local/send", login_url="http://localhost/", client=client)
        with pytest.raises(NotificationError):
            notifier.send("alice@example.com", "abcd-efgh", False)

    def test_connection_error_raises_notification_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        client = httpx.Client(transport=httpx.MockTransport(handler))
        notifier = HttpNotifier("http://mail.local/send", login_url="http://localhost/", client=client)
        with pytest.raises(NotificationError, match="connection refused"):
            notifier.send("alice@example.com", "abcd-efgh", True)


class TestNullNotifier:
    def test_does_not_raise(self):
        NullNotifier().send("alice@example.com", "abcd-efgh", True)
