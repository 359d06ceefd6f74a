"""Names of the operations the extension exposes.

Each operation has a host-facing display name, a telemetry metric base and,
when it supports the retry flow, a pair of continuation operations
(confirmReenter<Suffix> and handleReenter<Suffix>).
"""

from __future__ import annotations

from enum import Enum


class Operation(str, Enum):
    """Business operations, valued by their host display names."""

    SEND_MAIL = "Send Mail"
    REPLY_TO_MAIL = "Reply To Mail"
    REPLY_TO_ALL = "Reply To All"
    REPLY_TO_MAIL_WITH_FIELDS = "Reply To Mail With CC and BCC"
    REPLY_TO_ALL_WITH_FIELDS = "Reply To All With CC and BCC"
    FORWARD_MAIL = "Forward Mail"
    MOVE_MESSAGE = "Move Message"
    MARK_MESSAGE = "Mark Message"
    FETCH_MAIL_BY_ID = "Fetch Mail By Message Id"
    FETCH_INBOX = "Fetch Inbox"
    FETCH_SENT = "Fetch Sent"
    FETCH_MAILS_BY_LABEL = "Fetch Mails By Label"
    FETCH_MAILS_BY_QUERY = "Fetch Mail Details By Query"
    FETCH_ALL_LABELS = "Fetch All Labels"
    FETCH_LATEST_MAIL = "Fetch Latest Mail"

    @property
    def metric(self) -> str:
        """Telemetry metric base name, e.g. gmail.sendMail."""
        return _METRICS[self]

    @property
    def retryable(self) -> bool:
        return self in _CONTINUATION_SUFFIXES

    @property
    def confirm_continuation(self) -> str:
        return f"confirmReenter{_CONTINUATION_SUFFIXES[self]}"

    @property
    def handle_continuation(self) -> str:
        return f"handleReenter{_CONTINUATION_SUFFIXES[self]}"


_METRICS: dict[Operation, str] = {
    Operation.SEND_MAIL: "gmail.sendMail",
    Operation.REPLY_TO_MAIL: "gmail.replyToMail",
    Operation.REPLY_TO_ALL: "gmail.replyToAll",
    Operation.REPLY_TO_MAIL_WITH_FIELDS: "gmail.replyToMailWithCCAndBCC",
    Operation.REPLY_TO_ALL_WITH_FIELDS: "gmail.replyToAllWithCCAndBCC",
    Operation.FORWARD_MAIL: "gmail.forwardMail",
    Operation.MOVE_MESSAGE: "gmail.moveMessage",
    Operation.MARK_MESSAGE: "gmail.markMessage",
    Operation.FETCH_MAIL_BY_ID: "gmail.fetchMailByMessageId",
    Operation.FETCH_INBOX: "gmail.fetchInbox",
    Operation.FETCH_SENT: "gmail.fetchSent",
    Operation.FETCH_MAILS_BY_LABEL: "gmail.fetchMailsByLabel",
    Operation.FETCH_MAILS_BY_QUERY: "gmail.fetchMailDetailsByQuery",
    Operation.FETCH_ALL_LABELS: "gmail.fetchAllLabels",
    Operation.FETCH_LATEST_MAIL: "gmail.fetchLatestMail",
}

_CONTINUATION_SUFFIXES: dict[Operation, str] = {
    Operation.SEND_MAIL: "SendMail",
    Operation.REPLY_TO_MAIL: "ReplyToMail",
    Operation.REPLY_TO_ALL: "ReplyToAll",
    Operation.REPLY_TO_MAIL_WITH_FIELDS: "ReplyToMailWithFields",
    Operation.REPLY_TO_ALL_WITH_FIELDS: "ReplyToAllWithFields",
    Operation.FORWARD_MAIL: "ForwardMail",
    Operation.MOVE_MESSAGE: "MoveMessage",
    Operation.MARK_MESSAGE: "MarkMessage",
    Operation.FETCH_MAIL_BY_ID: "FetchMail",
    Operation.FETCH_INBOX: "FetchInbox",
    Operation.FETCH_SENT: "FetchSent",
    Operation.FETCH_MAILS_BY_LABEL: "FetchMailByLabel",
    Operation.FETCH_MAILS_BY_QUERY: "FetchMailByQuery",
}


class FieldNames:
    """Host-facing names of operation inputs and outputs."""

    MESSAGE_ID = "Message ID"
    TO = "To"
    CC = "Cc"
    BCC = "Bcc"
    REPLY_TO = "Reply To"
    SUBJECT = "Subject"
    MESSAGE = "Message"
    ATTACHMENTS = "Attachments"
    FOLDER_NAME = "Folder Name"
    LABEL = "Label"
    PAGE_NUMBER = "Page Number"
    PAGE_SIZE = "Page Size"
    QUERY = "Query"
    STATE_ID = "stateId"
    REENTER = "Reenter"
    VALIDATION_RESULTS = "Validation Results"


SUCCESS = "success"
INVALID_ID = "Invalid message id"


__all__ = [
    "Operation",
    "FieldNames",
    "SUCCESS",
    "INVALID_ID",
]
