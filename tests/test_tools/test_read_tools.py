"""Tests for the fetch, label and search operations."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from gmail_extension.schemas.tools import (
    FetchByLabelParams,
    FetchMailParams,
    FetchPageParams,
    QueryParams,
)
from gmail_extension.tools.read import (
    gmail_fetch_all_labels,
    gmail_fetch_inbox,
    gmail_fetch_latest_mail,
    gmail_fetch_mail_by_message_id,
    gmail_fetch_mail_details_by_query,
    gmail_fetch_mails_by_label,
    gmail_fetch_sent,
)
from gmail_extension.tools.read.search import SEARCH_RESULT_LIMIT

pytestmark = pytest.mark.usefixtures("continuation_store")


class TestFetchMailByMessageId:
    """Tests for gmail_fetch_mail_by_message_id."""

    @pytest.mark.asyncio
    async def test_fetch(self, mock_account) -> None:
        result = await gmail_fetch_mail_by_message_id(FetchMailParams(message_id="msg-1"))

        mail = result["values"]["Mail"]
        assert mail["Message ID"] == "msg-1"
        assert mail["From"] == "jane@example.com"
        assert mail["To"] == "me@example.com"
        assert mail["Is Read"] is False
        assert mail["File Attachment"] == []

    @pytest.mark.asyncio
    async def test_unknown_id(self, mock_account) -> None:
        result = await gmail_fetch_mail_by_message_id(FetchMailParams(message_id="nope"))

        assert result["error_kind"] == "INPUT_ERROR"
        assert result["remediation_actions"][0]["kind"] == "inform"

    @pytest.mark.asyncio
    async def test_message_vanished_after_validation(self, mock_account) -> None:
        mock_account.get_email.side_effect = None
        mock_account.get_email.return_value = None

        result = await gmail_fetch_mail_by_message_id(FetchMailParams(message_id="msg-1"))

        assert result["error_kind"] == "LOGIC_ERROR"
        assert result["error_message"].startswith("We couldn't fetch the email")


class TestFetchInboxAndSent:
    """Tests for the paged folder operations."""

    @pytest.mark.asyncio
    async def test_inbox_defaults(self, mock_account, mock_folder) -> None:
        result = await gmail_fetch_inbox(FetchPageParams())

        assert len(result["values"]["Inbox Mails"]) == 1
        mock_folder.get_emails.assert_called_once_with(None, None)

    @pytest.mark.asyncio
    async def test_inbox_page(self, mock_account, mock_folder) -> None:
        await gmail_fetch_inbox(FetchPageParams(page_number=2.0, page_size=5.0))
        mock_folder.get_emails.assert_called_once_with(2, 5)

    @pytest.mark.asyncio
    async def test_inbox_page_out_of_range(self, mock_account, mock_folder) -> None:
        result = await gmail_fetch_inbox(FetchPageParams(page_number=0, page_size=16))

        assert result["error_kind"] == "INPUT_ERROR"
        assert result["error_message"] == (
            "The provided Page number : 0 should be greater than 0 and less than or equal to 15. "
            "The provided Page size : 16 should be greater than 0 and less than or equal to 15."
        )
        mock_folder.get_emails.assert_not_called()

    @pytest.mark.asyncio
    async def test_sent(self, mock_account) -> None:
        result = await gmail_fetch_sent(FetchPageParams(page_size=15))
        assert "Sent Mails" in result["values"]

    @pytest.mark.asyncio
    async def test_sent_failure(self, mock_account) -> None:
        mock_account.get_sent_folder.side_effect = RuntimeError("boom")

        result = await gmail_fetch_sent(FetchPageParams())

        assert result["error_message"] == "Error occurred while fetch sent"


class TestFetchMailsByLabel:
    """Tests for gmail_fetch_mails_by_label."""

    @pytest.mark.asyncio
    async def test_page_number_out_of_range(self, mock_account) -> None:
        result = await gmail_fetch_mails_by_label(
            FetchByLabelParams(label="Work", page_number=20)
        )
        assert result["error_kind"] == "INPUT_ERROR"

    @pytest.mark.asyncio
    async def test_full_page(self, mock_account, mock_folder, mock_email) -> None:
        mock_folder.get_emails.return_value = [mock_email] * 15

        result = await gmail_fetch_mails_by_label(
            FetchByLabelParams(label="Work", page_number=1, page_size=15)
        )

        assert len(result["values"]["Mails"]) == 15
        mock_folder.get_emails.assert_called_once_with(1, 15)

    @pytest.mark.asyncio
    async def test_label_is_case_sensitive(self, mock_account) -> None:
        result = await gmail_fetch_mails_by_label(FetchByLabelParams(label="work"))

        assert result["error_message"] == (
            "Invalid label name: 'work'. Please check that the label exists in your Gmail account."
        )


class TestFetchMailDetailsByQuery:
    """Tests for gmail_fetch_mail_details_by_query."""

    @pytest.mark.asyncio
    async def test_search(self, mock_account) -> None:
        result = await gmail_fetch_mail_details_by_query(QueryParams(query="from:jane"))

        assert len(result["values"]["Mails"]) == 1
        mock_account.search_emails.assert_called_once_with(
            "from:jane", max_results=SEARCH_RESULT_LIMIT
        )

    @pytest.mark.asyncio
    async def test_no_matches(self, mock_account) -> None:
        mock_account.search_emails.return_value = []

        result = await gmail_fetch_mail_details_by_query(QueryParams(query="nothing"))

        assert result == {"status": "success", "values": {"Mails": []}}


class TestInputlessOperations:
    """Tests for Fetch All Labels and Fetch Latest Mail."""

    @pytest.mark.asyncio
    async def test_all_labels(self, mock_account) -> None:
        result = await gmail_fetch_all_labels()
        assert result["values"] == {"Labels": ["INBOX", "SENT", "Work"]}

    @pytest.mark.asyncio
    async def test_latest_mail(self, mock_account, mock_folder) -> None:
        result = await gmail_fetch_latest_mail()

        assert result["values"]["New Email"]["Message ID"] == "msg-1"
        mock_folder.get_emails.assert_called_once_with(1, 1)

    @pytest.mark.asyncio
    async def test_latest_mail_empty_inbox(self, mock_account, mock_folder) -> None:
        mock_folder.get_emails.return_value = []

        result = await gmail_fetch_latest_mail()

        assert result["values"] == {"New Email": None}

    @pytest.mark.asyncio
    async def test_labels_failure(self, mock_account) -> None:
        mock_account.get_folder_names.side_effect = RuntimeError("boom")

        result = await gmail_fetch_all_labels()

        assert result["error_kind"] == "SYSTEM_ERROR"
        assert result["error_message"] == "Error occurred while fetching labels"


def test_mail_details_joins_addresses(mock_email: MagicMock) -> None:
    from gmail_extension.schemas.mail import MailDetails

    mock_email.to = ["a@example.com", "b@example.com"]
    details = MailDetails.from_email(mock_email).to_values()

    assert details["To"] == "a@example.com,b@example.com"
    assert details["Send Date and Time"] is None
