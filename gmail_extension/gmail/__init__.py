"""Gmail API operations module."""

from gmail_extension.gmail.account import Email, Folder, MailAccount, mail_account
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

__all__ = [
    "GmailClient",
    "gmail_client",
    "to_api_error",
    "MailAccount",
    "mail_account",
    "Email",
    "Folder",
    "list_message_ids",
    "get_message",
    "build_mime_message",
    "send_message",
    "modify_message",
    "parse_headers",
    "decode_body",
    "list_attachments",
    "list_labels",
    "get_label_by_name",
]
