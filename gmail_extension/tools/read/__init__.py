"""Read-only Gmail operations."""

from gmail_extension.tools.read.fetch import (
    gmail_fetch_inbox,
    gmail_fetch_latest_mail,
    gmail_fetch_mail_by_message_id,
    gmail_fetch_sent,
)
from gmail_extension.tools.read.labels import gmail_fetch_all_labels, gmail_fetch_mails_by_label
from gmail_extension.tools.read.search import gmail_fetch_mail_details_by_query

__all__ = [
    "gmail_fetch_mail_by_message_id",
    "gmail_fetch_inbox",
    "gmail_fetch_sent",
    "gmail_fetch_latest_mail",
    "gmail_fetch_mails_by_label",
    "gmail_fetch_all_labels",
    "gmail_fetch_mail_details_by_query",
]
