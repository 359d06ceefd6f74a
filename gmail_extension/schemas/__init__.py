"""Pydantic schemas for the Gmail extension.

This module exports the operation parameter models, the mail entities and
the operation result model.
"""

from gmail_extension.schemas.mail import (
    AttachmentInfo,
    AttachmentInput,
    MailDetails,
    mail_values,
)
from gmail_extension.schemas.responses import (
    ActionKind,
    Audience,
    ErrorKind,
    OperationResult,
    PromptField,
    RemediationAction,
)
from gmail_extension.schemas.tools import (
    ConfirmReenterParams,
    FetchByLabelParams,
    FetchMailParams,
    FetchPageParams,
    ForwardMailParams,
    HandleReenterParams,
    MarkMessageParams,
    MoveMessageParams,
    OperationParams,
    QueryParams,
    ReplyParams,
    ReplyWithFieldsParams,
    SendMailParams,
)

__all__ = [
    # Mail entities
    "AttachmentInfo",
    "AttachmentInput",
    "MailDetails",
    "mail_values",
    # Results
    "ActionKind",
    "Audience",
    "ErrorKind",
    "OperationResult",
    "PromptField",
    "RemediationAction",
    # Operation params
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
    # Continuation params
    "ConfirmReenterParams",
    "HandleReenterParams",
]
