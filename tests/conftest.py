"""Pytest configuration and fixtures for Gmail extension tests."""

from __future__ import annotations

import base64
import os
import tempfile
from typing import Any
from unittest.mock import MagicMock

import pytest

# Module-level singletons read these at import time
os.environ.setdefault("TOKEN_ENCRYPTION_KEY", "ab" * 32)
os.environ.setdefault("CONTINUATION_BACKEND", "memory")
os.environ.setdefault("TELEMETRY_ENABLED", "false")
os.environ.setdefault("TOKEN_STORAGE_DIR", tempfile.mkdtemp(prefix="gmail-extension-tokens-"))

from gmail_extension.continuation.store import ContinuationStore  # noqa: E402
from gmail_extension.middleware.telemetry import telemetry  # noqa: E402
from gmail_extension.storage.kv import InMemoryKeyValueStore  # noqa: E402


def _b64(text: str) -> str:
    return base64.urlsafe_b64encode(text.encode()).decode()


@pytest.fixture
def memory_store() -> ContinuationStore:
    """Continuation store backed by a dict, one-hour TTL."""
    return ContinuationStore(InMemoryKeyValueStore(), ttl_seconds=3600)


@pytest.fixture(autouse=True)
def reset_telemetry():
    """Start every test with empty telemetry counters."""
    telemetry.reset()
    yield
    telemetry.reset()


@pytest.fixture
def sample_message() -> dict[str, Any]:
    """Raw Gmail API message in full format."""
    return {
        "id": "18abc123def",
        "threadId": "thread-1",
        "labelIds": ["INBOX", "UNREAD", "Label_1"],
        "internalDate": "1768921200000",
        "payload": {
            "headers": [
                {"name": "From", "value": "Jane Sender <sender@example.com>"},
                {"name": "To", "value": "me@example.com, colleague@example.com"},
                {"name": "Cc", "value": "watcher@example.com"},
                {"name": "Subject", "value": "Quarterly report"},
                {"name": "Date", "value": "Mon, 20 Jan 2026 10:00:00 -0500"},
                {"name": "Message-ID", "value": "<abc@mail.example.com>"},
            ],
            "mimeType": "multipart/mixed",
            "parts": [
                {"mimeType": "text/plain", "body": {"data": _b64("plain body")}},
                {"mimeType": "text/html", "body": {"data": _b64("<p>html body</p>")}},
                {
                    "mimeType": "application/pdf",
                    "filename": "report.pdf",
                    "body": {"attachmentId": "att-1", "size": 2048},
                },
            ],
        },
    }


@pytest.fixture
def sample_labels() -> list[dict[str, str]]:
    """Labels list response."""
    return [
        {"id": "INBOX", "name": "INBOX", "type": "system"},
        {"id": "SENT", "name": "SENT", "type": "system"},
        {"id": "UNREAD", "name": "UNREAD", "type": "system"},
        {"id": "Label_1", "name": "Work", "type": "user"},
        {"id": "Label_2", "name": "Personal", "type": "user"},
    ]


@pytest.fixture
def mock_gmail_service() -> MagicMock:
    """Mocked Gmail API service."""
    return MagicMock()
