"""Pydantic parameter models for Gmail extension operations.

Fields carry the host field names as aliases ("Message ID", "Page Size",
...), so a model dumped with by_alias=True is exactly the input record
persisted for a retry, and a persisted record validates straight back into
the model on replay. Python callers use the snake_case field names.

Each model also knows which of its values the validation orchestrator
checks (validation_values).
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from gmail_extension.schemas.mail import AttachmentInput
from gmail_extension.validation.validators import ValidationField


def _number_text(value: float | None) -> str | None:
    return None if value is None else str(float(value))


def _present(value: str | None) -> bool:
    return value is not None and bool(value.strip())


class OperationParams(BaseModel):
    """Common behaviour of operation parameter models."""

    model_config = ConfigDict(populate_by_name=True)

    allow_retry: bool = Field(
        default=False,
        exclude=True,
        description="Offer a retry flow when validation fails",
    )

    def to_inputs(self) -> dict[str, Any]:
        """Inputs keyed by host field names (allow_retry excluded)."""
        return self.model_dump(by_alias=True, mode="json")

    def validation_values(self) -> dict[ValidationField, str | None]:
        """Raw values to validate; operations without checks return {}."""
        return {}


# =============================================================================
# Write Operation Parameter Models
# =============================================================================


class SendMailParams(OperationParams):
    """Parameters for Send Mail."""

    to: str | None = Field(None, alias="To", description="Comma-separated recipients")
    subject: str | None = Field(None, alias="Subject", description="Subject line")
    message: str | None = Field(None, alias="Message", description="Body text")
    attachments: list[AttachmentInput] = Field(
        default_factory=list, alias="Attachments", description="Files to attach"
    )
    cc: str | None = Field(None, alias="Cc", description="Comma-separated CC recipients")
    bcc: str | None = Field(None, alias="Bcc", description="Comma-separated BCC recipients")
    reply_to: str | None = Field(None, alias="Reply To", description="Reply-To addresses")

    def validation_values(self) -> dict[ValidationField, str | None]:
        return {
            ValidationField.TO: self.to or "",
            ValidationField.CC: self.cc or "",
            ValidationField.BCC: self.bcc or "",
            ValidationField.REPLY_TO: self.reply_to or "",
        }


class ReplyParams(OperationParams):
    """Parameters for Reply To Mail and Reply To All."""

    message_id: str | None = Field(None, alias="Message ID", description="Message to answer")
    message: str | None = Field(None, alias="Message", description="Reply text")
    attachments: list[AttachmentInput] = Field(
        default_factory=list, alias="Attachments", description="Files to attach"
    )

    def validation_values(self) -> dict[ValidationField, str | None]:
        return {ValidationField.MESSAGE_ID: self.message_id or ""}


class ReplyWithFieldsParams(ReplyParams):
    """Parameters for the reply operations with extra To/Cc/Bcc recipients."""

    to: str | None = Field(None, alias="To", description="Additional recipients")
    cc: str | None = Field(None, alias="Cc", description="Additional CC recipients")
    bcc: str | None = Field(None, alias="Bcc", description="Additional BCC recipients")

    def validation_values(self) -> dict[ValidationField, str | None]:
        values = super().validation_values()
        # To is optional here; only check it when supplied
        if _present(self.to):
            values[ValidationField.TO] = self.to
        values[ValidationField.CC] = self.cc or ""
        values[ValidationField.BCC] = self.bcc or ""
        return values


class ForwardMailParams(OperationParams):
    """Parameters for Forward Mail."""

    message_id: str | None = Field(None, alias="Message ID", description="Message to forward")
    message: str | None = Field(None, alias="Message", description="Text above the quote")
    to: str | None = Field(None, alias="To", description="Comma-separated recipients")

    def validation_values(self) -> dict[ValidationField, str | None]:
        return {
            ValidationField.MESSAGE_ID: self.message_id or "",
            ValidationField.TO: self.to or "",
        }


class MoveMessageParams(OperationParams):
    """Parameters for Move Message."""

    message_id: str | None = Field(None, alias="Message ID", description="Message to move")
    folder_name: str | None = Field(None, alias="Folder Name", description="Target folder")

    def validation_values(self) -> dict[ValidationField, str | None]:
        return {ValidationField.MESSAGE_ID: self.message_id or ""}


class MarkMessageParams(OperationParams):
    """Parameters for Mark Message."""

    message_id: str | None = Field(None, alias="Message ID", description="Message to mark")
    label: str | None = Field(None, alias="Label", description="'read' or 'unread'")

    def validation_values(self) -> dict[ValidationField, str | None]:
        return {ValidationField.MESSAGE_ID: self.message_id or ""}


# =============================================================================
# Read Operation Parameter Models
# =============================================================================


class FetchMailParams(OperationParams):
    """Parameters for Fetch Mail By Message Id."""

    message_id: str | None = Field(None, alias="Message ID", description="Message to fetch")

    def validation_values(self) -> dict[ValidationField, str | None]:
        return {ValidationField.MESSAGE_ID: self.message_id or ""}


class FetchPageParams(OperationParams):
    """Parameters for Fetch Inbox and Fetch Sent."""

    page_number: float | None = Field(None, alias="Page Number", description="1-based page")
    page_size: float | None = Field(None, alias="Page Size", description="Mails per page")

    def validation_values(self) -> dict[ValidationField, str | None]:
        values: dict[ValidationField, str | None] = {}
        if self.page_number is not None:
            values[ValidationField.PAGE_NUMBER] = _number_text(self.page_number)
        if self.page_size is not None:
            values[ValidationField.PAGE_SIZE] = _number_text(self.page_size)
        return values


class FetchByLabelParams(OperationParams):
    """Parameters for Fetch Mails By Label."""

    label: str | None = Field(None, alias="Label", description="Label (folder) name")
    page_number: float | None = Field(None, alias="Page Number", description="1-based page")
    page_size: float | None = Field(None, alias="Page Size", description="Mails per page")

    def validation_values(self) -> dict[ValidationField, str | None]:
        return {
            ValidationField.LABEL: self.label or "",
            ValidationField.PAGE_NUMBER: _number_text(self.page_number) or "1",
            ValidationField.PAGE_SIZE: _number_text(self.page_size) or "1",
        }


class QueryParams(OperationParams):
    """Parameters for Fetch Mail Details By Query."""

    query: str | None = Field(None, alias="Query", description="Gmail search syntax")

    def validation_values(self) -> dict[ValidationField, str | None]:
        return {ValidationField.QUERY: self.query or ""}


# =============================================================================
# Continuation Parameter Models
# =============================================================================


class ConfirmReenterParams(BaseModel):
    """Parameters for confirmReenter<Op>: the caller's yes/no decision."""

    model_config = ConfigDict(populate_by_name=True)

    state_id: str = Field(..., alias="stateId", min_length=1, description="Continuation id")
    reenter: bool = Field(..., alias="Reenter", description="Whether to re-enter values")
    inputs: dict[str, Any] = Field(
        default_factory=dict,
        description="Echoed inputs keyed by host field name",
    )


class HandleReenterParams(BaseModel):
    """Parameters for handleReenter<Op>: corrected values to replay with."""

    model_config = ConfigDict(populate_by_name=True)

    state_id: str = Field(..., alias="stateId", min_length=1, description="Continuation id")
    inputs: dict[str, Any] = Field(
        default_factory=dict,
        description="Corrected inputs keyed by host field name",
    )


__all__ = [
    "OperationParams",
    "SendMailParams",
    "ReplyParams",
    "ReplyWithFieldsParams",
    "ForwardMailParams",
    "MoveMessageParams",
    "MarkMessageParams",
    "FetchMailParams",
    "FetchPageParams",
    "FetchByLabelParams",
    "QueryParams",
    "ConfirmReenterParams",
    "HandleReenterParams",
]
