"""Forward Mail operation."""

from __future__ import annotations

import logging
from typing import Any

from gmail_extension.catalog import INVALID_ID, Operation
from gmail_extension.gmail.account import split_addresses
from gmail_extension.schemas.responses import OperationResult
from gmail_extension.schemas.tools import ForwardMailParams
from gmail_extension.tools.base import (
    OperationHandler,
    business_miss,
    current_account,
    run_operation,
    to_html,
)

logger = logging.getLogger(__name__)

IS_FORWARDED = "Is Forwarded"


def execute_forward_mail(params: ForwardMailParams) -> OperationResult:
    email = current_account().get_email(params.message_id)
    if email is None:
        logger.info("Forward source %s not found", params.message_id)
        return business_miss({IS_FORWARDED: False}, INVALID_ID)

    email.forward(to_html(params.message), split_addresses(params.to))
    logger.info("Forwarded %s to %s", params.message_id, params.to)
    return OperationResult.success({IS_FORWARDED: True})


FORWARD_MAIL = OperationHandler(
    operation=Operation.FORWARD_MAIL,
    params_model=ForwardMailParams,
    execute=execute_forward_mail,
    system_error_message="Error occurred while forwarding mail",
    replay_error_message=(
        "We couldn't forward the email because the message ID or recipient email "
        "address seems to be incorrect. Please double-check and try again."
    ),
)


async def gmail_forward_mail(params: ForwardMailParams) -> dict[str, Any]:
    """Forward a message to new recipients with an optional note."""
    return await run_operation(FORWARD_MAIL, params)
