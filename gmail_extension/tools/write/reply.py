"""Reply operations: reply, reply all, and both with extra recipients."""

from __future__ import annotations

import logging
from typing import Any

from gmail_extension.catalog import INVALID_ID, SUCCESS, FieldNames, Operation
from gmail_extension.gmail.account import split_addresses
from gmail_extension.schemas.responses import OperationResult
from gmail_extension.schemas.tools import ReplyParams, ReplyWithFieldsParams
from gmail_extension.tools.base import (
    OperationHandler,
    business_miss,
    current_account,
    run_operation,
    to_html,
)

logger = logging.getLogger(__name__)

IS_SUCCESSFUL = "Is Successful"
REPLY_FAILED = "Failed to reply to mail"

REPLY_SYSTEM_ERROR = "Error occurred while replying to mail"
REPLY_ALL_SYSTEM_ERROR = "Error occurred while replying to all"
REPLY_REPLAY_ERROR = "Failed to Reply Mail"
REPLY_ALL_REPLAY_ERROR = "Failed to reply all Message"


def _reply(
    params: ReplyParams,
    reply_all: bool,
    to: str | None = None,
    cc: str | None = None,
    bcc: str | None = None,
) -> OperationResult:
    email = current_account().get_email(params.message_id)
    if email is None:
        logger.info("Reply target %s not found", params.message_id)
        if reply_all:
            return business_miss({IS_SUCCESSFUL: False}, INVALID_ID)
        return business_miss({FieldNames.MESSAGE: INVALID_ID}, INVALID_ID)

    try:
        email.reply(
            to_html(params.message),
            attachments=[a.model_dump() for a in params.attachments],
            reply_all=reply_all,
            to=split_addresses(to),
            cc=split_addresses(cc),
            bcc=split_addresses(bcc),
        )
    except ValueError as e:
        logger.error("Could not build reply to %s: %s", params.message_id, e)
        if reply_all:
            return business_miss({IS_SUCCESSFUL: False}, REPLY_FAILED)
        return business_miss({FieldNames.MESSAGE: REPLY_FAILED}, REPLY_FAILED)

    logger.info("Replied to %s (reply_all=%s)", params.message_id, reply_all)
    if reply_all:
        return OperationResult.success({IS_SUCCESSFUL: True})
    return OperationResult.success({FieldNames.MESSAGE: SUCCESS})


def execute_reply_to_mail(params: ReplyParams) -> OperationResult:
    return _reply(params, reply_all=False)


def execute_reply_to_all(params: ReplyParams) -> OperationResult:
    return _reply(params, reply_all=True)


def execute_reply_to_mail_with_fields(params: ReplyWithFieldsParams) -> OperationResult:
    return _reply(params, reply_all=False, to=params.to, cc=params.cc, bcc=params.bcc)


def execute_reply_to_all_with_fields(params: ReplyWithFieldsParams) -> OperationResult:
    return _reply(params, reply_all=True, to=params.to, cc=params.cc, bcc=params.bcc)


REPLY_TO_MAIL = OperationHandler(
    operation=Operation.REPLY_TO_MAIL,
    params_model=ReplyParams,
    execute=execute_reply_to_mail,
    system_error_message=REPLY_SYSTEM_ERROR,
    replay_error_message=REPLY_REPLAY_ERROR,
)

REPLY_TO_ALL = OperationHandler(
    operation=Operation.REPLY_TO_ALL,
    params_model=ReplyParams,
    execute=execute_reply_to_all,
    system_error_message=REPLY_ALL_SYSTEM_ERROR,
    replay_error_message=REPLY_ALL_REPLAY_ERROR,
)

REPLY_TO_MAIL_WITH_FIELDS = OperationHandler(
    operation=Operation.REPLY_TO_MAIL_WITH_FIELDS,
    params_model=ReplyWithFieldsParams,
    execute=execute_reply_to_mail_with_fields,
    system_error_message=REPLY_SYSTEM_ERROR,
    replay_error_message=REPLY_REPLAY_ERROR,
)

REPLY_TO_ALL_WITH_FIELDS = OperationHandler(
    operation=Operation.REPLY_TO_ALL_WITH_FIELDS,
    params_model=ReplyWithFieldsParams,
    execute=execute_reply_to_all_with_fields,
    system_error_message=REPLY_ALL_SYSTEM_ERROR,
    replay_error_message=REPLY_ALL_REPLAY_ERROR,
)


async def gmail_reply_to_mail(params: ReplyParams) -> dict[str, Any]:
    """Reply to the sender of a message."""
    return await run_operation(REPLY_TO_MAIL, params)


async def gmail_reply_to_all(params: ReplyParams) -> dict[str, Any]:
    """Reply to the sender and every other recipient of a message."""
    return await run_operation(REPLY_TO_ALL, params)


async def gmail_reply_to_mail_with_fields(params: ReplyWithFieldsParams) -> dict[str, Any]:
    """Reply to the sender, adding To/Cc/Bcc recipients."""
    return await run_operation(REPLY_TO_MAIL_WITH_FIELDS, params)


async def gmail_reply_to_all_with_fields(params: ReplyWithFieldsParams) -> dict[str, Any]:
    """Reply to everyone on a message, adding To/Cc/Bcc recipients."""
    return await run_operation(REPLY_TO_ALL_WITH_FIELDS, params)
