"""Mailbox facade used by validators and operation handlers.

MailAccount is the only object the rest of the extension talks to when it
needs Gmail: it resolves folders (labels), loads and searches messages, and
sends mail. Email and Folder wrap raw API resources with the handful of
actions the operations need.
"""

from __future__ import annotations

import html
import logging
from datetime import UTC, datetime
from email.utils import getaddresses, parsedate_to_datetime
from typing import Any

from googleapiclient.discovery import Resource

from gmail_extension.gmail.client import GmailClient, gmail_client, to_api_error
from gmail_extension.gmail.labels import get_label_by_name, list_labels
from gmail_extension.gmail.messages import (
    build_mime_message,
    decode_body,
    get_message,
    list_attachments,
    list_message_ids,
    modify_message,
    parse_headers,
    send_message,
)

logger = logging.getLogger(__name__)

UNREAD = "UNREAD"

# Labels that describe a message's state rather than where it is filed
KEEP_ON_MOVE = {
    "SENT",
    "DRAFT",
    "UNREAD",
    "STARRED",
    "IMPORTANT",
    "CHAT",
}

DEFAULT_PAGE_NUMBER = 1
DEFAULT_PAGE_SIZE = 15


def split_addresses(header_value: str | None) -> list[str]:
    """Return the bare addresses from an address header or CSV string."""
    if not header_value:
        return []
    return [addr for _, addr in getaddresses([header_value]) if addr]


class Email:
    """A single Gmail message."""

    def __init__(self, account: MailAccount, message: dict[str, Any]) -> None:
        self._account = account
        self._message = message
        self._headers = parse_headers(message)

    @property
    def id(self) -> str:
        return self._message["id"]

    @property
    def thread_id(self) -> str | None:
        return self._message.get("threadId")

    @property
    def label_ids(self) -> list[str]:
        return list(self._message.get("labelIds", []))

    @property
    def subject(self) -> str:
        return self._headers.get("Subject", "")

    @property
    def sender(self) -> str:
        return self._headers.get("From", "")

    @property
    def to(self) -> list[str]:
        return split_addresses(self._headers.get("To"))

    @property
    def cc(self) -> list[str]:
        return split_addresses(self._headers.get("Cc"))

    @property
    def bcc(self) -> list[str]:
        return split_addresses(self._headers.get("Bcc"))

    @property
    def reply_to(self) -> list[str]:
        return split_addresses(self._headers.get("Reply-To"))

    @property
    def is_read(self) -> bool:
        return UNREAD not in self.label_ids

    @property
    def sent_at(self) -> datetime | None:
        date = self._headers.get("Date")
        if not date:
            return None
        try:
            return parsedate_to_datetime(date)
        except (TypeError, ValueError):
            logger.debug("Unparseable Date header on %s: %s", self.id, date)
            return None

    @property
    def received_at(self) -> datetime | None:
        internal = self._message.get("internalDate")
        if internal is None:
            return None
        return datetime.fromtimestamp(int(internal) / 1000, tz=UTC)

    @property
    def body(self) -> str:
        return decode_body(self._message)

    @property
    def attachments(self) -> list[dict[str, Any]]:
        return list_attachments(self._message)

    def mark_as_read(self) -> None:
        modify_message(self._account.service, self.id, remove_labels=[UNREAD])
        logger.info("Marked message %s as read", self.id)

    def mark_as_unread(self) -> None:
        modify_message(self._account.service, self.id, add_labels=[UNREAD])
        logger.info("Marked message %s as unread", self.id)

    def move_to_folder(self, folder: Folder) -> None:
        """File the message under folder, removing the folders it was in."""
        remove = [
            label
            for label in self.label_ids
            if label != folder.id
            and label not in KEEP_ON_MOVE
            and not label.startswith("CATEGORY_")
        ]
        modify_message(
            self._account.service, self.id, add_labels=[folder.id], remove_labels=remove
        )
        logger.info("Moved message %s to %s", self.id, folder.name)

    def reply(
        self,
        text: str,
        attachments: list[dict[str, Any]] | None = None,
        reply_all: bool = False,
        to: list[str] | None = None,
        cc: list[str] | None = None,
        bcc: list[str] | None = None,
    ) -> dict[str, Any]:
        """Reply in the message's thread.

        The reply goes to Reply-To (or the sender). With reply_all the
        original To and Cc recipients are added, except the mailbox owner.
        Explicit to/cc/bcc are added on top.
        """
        recipients = self.reply_to or split_addresses(self.sender)
        copies: list[str] = []
        if reply_all:
            owner = self._account.owner_address().lower()
            recipients += [a for a in self.to if a.lower() != owner]
            copies += [a for a in self.cc if a.lower() != owner]
        recipients = _dedupe(recipients + (to or []))
        copies = _dedupe(copies + (cc or []))

        subject = self.subject
        if not subject.lower().startswith("re:"):
            subject = f"Re: {subject}"

        message = build_mime_message(
            to=recipients,
            subject=subject,
            body=text,
            cc=copies,
            bcc=bcc,
            attachments=attachments,
            in_reply_to=self._headers.get("Message-ID"),
        )
        return send_message(self._account.service, message, thread_id=self.thread_id)

    def forward(self, text: str | None, to: list[str]) -> dict[str, Any]:
        """Forward the message, quoting the original below text."""
        quoted = (
            "<br><br>---------- Forwarded message ---------<br>"
            f"From: {html.escape(self.sender)}<br>"
            f"Date: {html.escape(self._headers.get('Date', ''))}<br>"
            f"Subject: {html.escape(self.subject)}<br>"
            f"To: {html.escape(', '.join(self.to))}<br><br>"
        )
        subject = self.subject
        if not subject.lower().startswith("fwd:"):
            subject = f"Fwd: {subject}"

        message = build_mime_message(
            to=to,
            subject=subject,
            body=(text or "") + quoted + self.body,
        )
        return send_message(self._account.service, message)


class Folder:
    """A Gmail label viewed as a folder."""

    def __init__(self, account: MailAccount, label: dict[str, Any]) -> None:
        self._account = account
        self._label = label

    @property
    def id(self) -> str:
        return self._label["id"]

    @property
    def name(self) -> str:
        return self._label.get("name", "")

    def get_emails(
        self, page_number: int | None = None, page_size: int | None = None
    ) -> list[Email]:
        """Return one page of the folder's messages, newest first.

        Args:
            page_number: 1-based page index (default 1).
            page_size: Messages per page (default 15).
        """
        number = DEFAULT_PAGE_NUMBER if page_number is None else page_number
        size = DEFAULT_PAGE_SIZE if page_size is None else page_size
        if number < 1 or size < 1:
            raise ValueError(f"Invalid page request: number={number}, size={size}")

        service = self._account.service
        ids = list_message_ids(service, label_ids=[self.id], max_results=number * size)
        start = (number - 1) * size
        if len(ids) <= start:
            logger.info("Not enough mails in %s for page %d (got %d)", self.name, number, len(ids))
            return []

        emails: list[Email] = []
        for message_id in ids[start : start + size]:
            message = get_message(service, message_id)
            if message is not None:
                emails.append(Email(self._account, message))
        return emails


class MailAccount:
    """Entry point to one authorized mailbox."""

    def __init__(self, client: GmailClient | None = None, user_id: str | None = None) -> None:
        self._client = client or gmail_client
        self._user_id = user_id

    @property
    def service(self) -> Resource:
        """Authenticated Gmail API resource (raises MustAuthorizeError)."""
        return self._client.get_service(self._user_id)

    def owner_address(self) -> str:
        try:
            profile = self.service.users().getProfile(userId="me").execute()
        except Exception as e:
            raise to_api_error(e, "read mailbox profile") from e
        return profile.get("emailAddress", "")

    def get_folder_by_name(self, name: str | None, case_sensitive: bool = False) -> Folder | None:
        """Resolve a folder by label name; None for blank or unknown names."""
        if not name or not name.strip():
            logger.info("Folder name is empty")
            return None
        label = get_label_by_name(self.service, name.strip(), case_sensitive=case_sensitive)
        if label is None:
            logger.info("Folder %s not found", name)
            return None
        return Folder(self, label)

    def get_inbox_folder(self) -> Folder | None:
        return self.get_folder_by_name("inbox")

    def get_sent_folder(self) -> Folder | None:
        return self.get_folder_by_name("sent")

    def get_folder_names(self) -> list[str]:
        return [label.get("name", "") for label in list_labels(self.service)]

    def get_email(self, message_id: str | None) -> Email | None:
        if not message_id or not message_id.strip():
            logger.info("Message ID is empty")
            return None
        message = get_message(self.service, message_id.strip())
        return Email(self, message) if message is not None else None

    def search_emails(self, query: str, max_results: int | None = None) -> list[Email]:
        service = self.service
        emails: list[Email] = []
        for message_id in list_message_ids(service, query=query, max_results=max_results):
            message = get_message(service, message_id)
            if message is not None:
                emails.append(Email(self, message))
        return emails

    def fetch_all_message_ids(self) -> set[str]:
        """Every message id in the mailbox (walks all list pages)."""
        return set(list_message_ids(self.service))

    def send_email(
        self,
        to: list[str],
        subject: str,
        body: str,
        cc: list[str] | None = None,
        bcc: list[str] | None = None,
        reply_to: list[str] | None = None,
        attachments: list[dict[str, Any]] | None = None,
    ) -> dict[str, Any]:
        message = build_mime_message(
            to=to,
            subject=subject,
            body=body,
            cc=cc,
            bcc=bcc,
            reply_to=reply_to,
            attachments=attachments,
        )
        return send_message(self.service, message)


def _dedupe(addresses: list[str]) -> list[str]:
    seen: set[str] = set()
    result: list[str] = []
    for address in addresses:
        key = address.lower()
        if key not in seen:
            seen.add(key)
            result.append(address)
    return result


# Global singleton
mail_account = MailAccount()
