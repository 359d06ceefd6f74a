"""Fixtures for tool tests."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from gmail_extension.continuation.store import ContinuationStore
from gmail_extension.storage.kv import EncryptedFileKeyValueStore
from gmail_extension.utils.encryption import generate_key

VALID_ID = "msg-1"


@pytest.fixture
def mock_email() -> MagicMock:
    """Email returned by the mocked account."""
    email = MagicMock()
    email.id = VALID_ID
    email.sender = "Jane <jane@example.com>"
    email.to = ["me@example.com"]
    email.cc = []
    email.bcc = []
    email.reply_to = []
    email.subject = "Hello"
    email.body = "<p>Hi</p>"
    email.is_read = False
    email.sent_at = None
    email.received_at = None
    email.attachments = []
    return email


@pytest.fixture
def mock_folder(mock_email: MagicMock) -> MagicMock:
    folder = MagicMock()
    folder.id = "Label_1"
    folder.name = "Work"
    folder.get_emails.return_value = [mock_email]
    return folder


@pytest.fixture
def mock_account(mock_email: MagicMock, mock_folder: MagicMock):
    """Mailbox facade with one message (msg-1) and one folder (Work)."""
    account = MagicMock()
    account.fetch_all_message_ids.return_value = {VALID_ID}
    account.get_email.side_effect = lambda message_id: (
        mock_email if message_id == VALID_ID else None
    )
    account.get_folder_by_name.side_effect = lambda name, case_sensitive=False: (
        mock_folder
        if name is not None
        and (name == "Work" or (not case_sensitive and name.lower() == "work"))
        else None
    )
    account.get_inbox_folder.return_value = mock_folder
    account.get_sent_folder.return_value = mock_folder
    account.get_folder_names.return_value = ["INBOX", "SENT", "Work"]
    account.search_emails.return_value = [mock_email]
    with patch("gmail_extension.tools.base.mail_account", account):
        yield account


@pytest.fixture
def continuation_store(memory_store: ContinuationStore):
    """In-memory continuation store shared by operations and continuations."""
    with (
        patch("gmail_extension.tools.base.continuation_store", memory_store),
        patch("gmail_extension.tools.continuations.continuation_store", memory_store),
    ):
        yield memory_store


@pytest.fixture
def file_continuation_store(tmp_path: Path):
    """Continuation store sealing records on disk, shared like continuation_store."""
    store = ContinuationStore(EncryptedFileKeyValueStore(tmp_path, key=generate_key()))
    with (
        patch("gmail_extension.tools.base.continuation_store", store),
        patch("gmail_extension.tools.continuations.continuation_store", store),
    ):
        yield store
