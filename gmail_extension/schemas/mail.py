"""Mail entities returned to and accepted from the host."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field

from gmail_extension.gmail.account import split_addresses

if TYPE_CHECKING:
    from gmail_extension.gmail.account import Email

ADDRESS_DELIMITER = ","


class AttachmentInput(BaseModel):
    """A file to attach to an outgoing message."""

    file_name: str = Field(..., min_length=1, description="File name shown to recipients")
    mime_type: str = Field(
        default="application/octet-stream",
        description="MIME type of the content",
    )
    content_base64: str = Field(..., description="File content, base64 encoded")


class AttachmentInfo(BaseModel):
    """Metadata of a file attached to a received message."""

    file_name: str
    mime_type: str
    size: int = 0
    attachment_id: str


class MailDetails(BaseModel):
    """Host view of one message, keyed by host field names."""

    model_config = ConfigDict(populate_by_name=True)

    sender: str = Field(default="", alias="From")
    to: str = Field(default="", alias="To")
    message: str = Field(default="", alias="Message")
    subject: str = Field(default="", alias="Subject")
    file_attachment: list[AttachmentInfo] = Field(
        default_factory=list, alias="File Attachment"
    )
    message_id: str = Field(default="", alias="Message ID")
    cc: str = Field(default="", alias="Cc")
    bcc: str = Field(default="", alias="Bcc")
    is_read: bool = Field(default=False, alias="Is Read")
    reply_to: str = Field(default="", alias="ReplyTo")
    send_date_and_time: str | None = Field(default=None, alias="Send Date and Time")
    received_date_and_time: str | None = Field(default=None, alias="Received Date and Time")

    @classmethod
    def from_email(cls, email: Email) -> MailDetails:
        sender = split_addresses(email.sender)
        sent_at = email.sent_at
        received_at = email.received_at
        return cls(
            sender=sender[0] if sender else "",
            to=ADDRESS_DELIMITER.join(email.to),
            message=email.body,
            subject=email.subject,
            file_attachment=[AttachmentInfo(**a) for a in email.attachments],
            message_id=email.id,
            cc=ADDRESS_DELIMITER.join(email.cc),
            bcc=ADDRESS_DELIMITER.join(email.bcc),
            is_read=email.is_read,
            reply_to=ADDRESS_DELIMITER.join(email.reply_to),
            send_date_and_time=sent_at.isoformat() if sent_at else None,
            received_date_and_time=received_at.isoformat() if received_at else None,
        )

    def to_values(self) -> dict[str, Any]:
        """Serialize with host field names."""
        return self.model_dump(by_alias=True, mode="json")


def mail_values(emails: list[Email]) -> list[dict[str, Any]]:
    return [MailDetails.from_email(email).to_values() for email in emails]
