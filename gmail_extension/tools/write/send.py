"""Send Mail operation."""

from __future__ import annotations

import logging
from typing import Any

from gmail_extension.catalog import SUCCESS, FieldNames, Operation
from gmail_extension.gmail.account import split_addresses
from gmail_extension.schemas.responses import OperationResult
from gmail_extension.schemas.tools import SendMailParams
from gmail_extension.tools.base import (
    OperationHandler,
    business_miss,
    current_account,
    run_operation,
    to_html,
)

logger = logging.getLogger(__name__)

SEND_FAILED = "Failed to send mail"


def execute_send_mail(params: SendMailParams) -> OperationResult:
    """Send a new message.

    Returns:
        {"Message": "success"}, or {"Message": "Failed to send mail"} when
        an attachment cannot be decoded.
    """
    try:
        current_account().send_email(
            to=split_addresses(params.to),
            subject=params.subject or "",
            body=to_html(params.message),
            cc=split_addresses(params.cc),
            bcc=split_addresses(params.bcc),
            reply_to=split_addresses(params.reply_to),
            attachments=[a.model_dump() for a in params.attachments],
        )
    except ValueError as e:
        logger.error("Could not build message for %s: %s", params.to, e)
        return business_miss({FieldNames.MESSAGE: SEND_FAILED}, SEND_FAILED)

    logger.info("Mail sent to %s", params.to)
    return OperationResult.success({FieldNames.MESSAGE: SUCCESS})


SEND_MAIL = OperationHandler(
    operation=Operation.SEND_MAIL,
    params_model=SendMailParams,
    execute=execute_send_mail,
    system_error_message="Error occurred while sending mail",
    replay_error_message="Failed to Send Mail",
)


async def gmail_send_mail(params: SendMailParams) -> dict[str, Any]:
    """Send an email to To (and Cc/Bcc), optionally with attachments.

    Args:
        params: SendMailParams; allow_retry enables the re-entry flow for
            invalid addresses.

    Returns:
        Serialized OperationResult.
    """
    return await run_operation(SEND_MAIL, params)
