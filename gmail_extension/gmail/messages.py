"""Gmail message operations."""

from __future__ import annotations

import base64
import logging
from email import encoders
from email.mime.base import MIMEBase
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Any

from googleapiclient.discovery import Resource
from googleapiclient.errors import HttpError

from gmail_extension.gmail.client import to_api_error

logger = logging.getLogger(__name__)

# Largest page the messages.list endpoint accepts
LIST_PAGE_LIMIT = 500


def list_message_ids(
    service: Resource,
    query: str = "",
    label_ids: list[str] | None = None,
    max_results: int | None = None,
) -> list[str]:
    """List message ids matching a query and labels.

    Args:
        service: Gmail API resource.
        query: Gmail search syntax, empty for everything.
        label_ids: Only messages carrying all of these labels.
        max_results: Stop after this many ids; None walks every page.

    Returns:
        Message ids, newest first.
    """
    try:
        ids: list[str] = []
        page_size = LIST_PAGE_LIMIT if max_results is None else min(max_results, LIST_PAGE_LIMIT)
        kwargs: dict[str, Any] = {"userId": "me", "maxResults": page_size}
        if query:
            kwargs["q"] = query
        if label_ids:
            kwargs["labelIds"] = label_ids

        request = service.users().messages().list(**kwargs)
        while request is not None and (max_results is None or len(ids) < max_results):
            response = request.execute()
            ids.extend(m["id"] for m in response.get("messages", []))
            request = service.users().messages().list_next(request, response)

        logger.debug("Listed %d message ids", len(ids))
        return ids if max_results is None else ids[:max_results]

    except Exception as e:
        logger.error("Failed to list messages: %s", e)
        raise to_api_error(e, "list messages") from e


def get_message(
    service: Resource, message_id: str, format: str = "full"
) -> dict[str, Any] | None:
    """Get a specific message by ID, or None if Gmail does not know it."""
    try:
        message = (
            service.users()
            .messages()
            .get(userId="me", id=message_id, format=format)
            .execute()
        )
        logger.debug("Retrieved message %s", message_id)
        return message
    except HttpError as e:
        if e.resp.status in (400, 404):
            logger.info("No message found for id %s", message_id)
            return None
        logger.error("Failed to get message %s: %s", message_id, e)
        raise to_api_error(e, f"get message {message_id}") from e
    except Exception as e:
        logger.error("Failed to get message %s: %s", message_id, e)
        raise to_api_error(e, f"get message {message_id}") from e


def build_mime_message(
    to: list[str],
    subject: str,
    body: str,
    cc: list[str] | None = None,
    bcc: list[str] | None = None,
    reply_to: list[str] | None = None,
    html: bool = True,
    attachments: list[dict[str, Any]] | None = None,
    in_reply_to: str | None = None,
) -> MIMEText | MIMEMultipart:
    """Assemble an outgoing message.

    Args:
        to: Primary recipients.
        subject: Subject line.
        body: Message body (HTML unless html is False).
        cc: Carbon-copy recipients.
        bcc: Blind carbon-copy recipients.
        reply_to: Reply-To addresses.
        html: Send the body as text/html.
        attachments: Dicts with file_name, mime_type and content_base64.
        in_reply_to: RFC 822 Message-ID header of the message being answered.

    Returns:
        MIME message ready for send_message().
    """
    subtype = "html" if html else "plain"
    message: MIMEText | MIMEMultipart
    if attachments:
        message = MIMEMultipart("mixed")
        message.attach(MIMEText(body, subtype))
        for attachment in attachments:
            mime_type = attachment.get("mime_type") or "application/octet-stream"
            maintype, _, subtype_part = mime_type.partition("/")
            part = MIMEBase(maintype, subtype_part or "octet-stream")
            part.set_payload(base64.b64decode(attachment["content_base64"]))
            encoders.encode_base64(part)
            part.add_header(
                "Content-Disposition", "attachment", filename=attachment["file_name"]
            )
            message.attach(part)
    else:
        message = MIMEText(body, subtype)

    message["to"] = ", ".join(to)
    message["subject"] = subject
    if cc:
        message["cc"] = ", ".join(cc)
    if bcc:
        message["bcc"] = ", ".join(bcc)
    if reply_to:
        message["reply-to"] = ", ".join(reply_to)
    if in_reply_to:
        message["In-Reply-To"] = in_reply_to
        message["References"] = in_reply_to
    return message


def send_message(
    service: Resource,
    message: MIMEText | MIMEMultipart,
    thread_id: str | None = None,
) -> dict[str, Any]:
    """Send an assembled message."""
    try:
        raw = base64.urlsafe_b64encode(message.as_bytes()).decode()
        body: dict[str, Any] = {"raw": raw}
        if thread_id:
            body["threadId"] = thread_id

        sent = service.users().messages().send(userId="me", body=body).execute()
        logger.info("Sent message %s to %s", sent.get("id"), message["to"])
        return sent
    except Exception as e:
        logger.error("Failed to send message to %s: %s", message["to"], e)
        raise to_api_error(e, "send message") from e


def modify_message(
    service: Resource,
    message_id: str,
    add_labels: list[str] | None = None,
    remove_labels: list[str] | None = None,
) -> dict[str, Any]:
    """Modify message labels."""
    try:
        body = {"addLabelIds": add_labels or [], "removeLabelIds": remove_labels or []}
        modified = (
            service.users()
            .messages()
            .modify(userId="me", id=message_id, body=body)
            .execute()
        )
        logger.debug("Modified labels on message %s", message_id)
        return modified
    except Exception as e:
        logger.error("Failed to modify message %s: %s", message_id, e)
        raise to_api_error(e, f"modify message {message_id}") from e


def parse_headers(message: dict[str, Any]) -> dict[str, str]:
    """Extract the headers the mail details mapping needs."""
    wanted = {
        "from": "From",
        "to": "To",
        "cc": "Cc",
        "bcc": "Bcc",
        "subject": "Subject",
        "date": "Date",
        "reply-to": "Reply-To",
        "message-id": "Message-ID",
    }
    headers: dict[str, str] = {}
    for header in message.get("payload", {}).get("headers", []):
        name = wanted.get(header.get("name", "").lower())
        if name:
            headers[name] = header.get("value", "")
    return headers


def _safe_base64_decode(data: str) -> str:
    try:
        return base64.urlsafe_b64decode(data).decode("utf-8", errors="replace")
    except (ValueError, UnicodeDecodeError) as e:
        logger.warning("Failed to decode base64 body data: %s", e)
        return ""


def decode_body(message: dict[str, Any]) -> str:
    """Decode message body, preferring text/html then text/plain."""
    payload = message.get("payload", {})

    if payload.get("body", {}).get("data"):
        return _safe_base64_decode(payload["body"]["data"])

    parts = payload.get("parts", [])
    for mime_type in ("text/html", "text/plain"):
        for part in parts:
            if part.get("mimeType") == mime_type and part.get("body", {}).get("data"):
                return _safe_base64_decode(part["body"]["data"])

    for part in parts:
        if "parts" in part:
            result = decode_body({"payload": part})
            if result:
                return result

    return ""


def list_attachments(message: dict[str, Any]) -> list[dict[str, Any]]:
    """Describe the file attachments of a message (without downloading them)."""
    found: list[dict[str, Any]] = []

    def walk(part: dict[str, Any]) -> None:
        filename = part.get("filename")
        attachment_id = part.get("body", {}).get("attachmentId")
        if filename and attachment_id:
            found.append(
                {
                    "file_name": filename,
                    "mime_type": part.get("mimeType", "application/octet-stream"),
                    "size": part.get("body", {}).get("size", 0),
                    "attachment_id": attachment_id,
                }
            )
        for child in part.get("parts", []):
            walk(child)

    walk(message.get("payload", {}))
    return found
