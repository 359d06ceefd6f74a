"""Move Message and Mark Message operations."""

from __future__ import annotations

import logging
from typing import Any

from gmail_extension.catalog import INVALID_ID, SUCCESS, Operation
from gmail_extension.schemas.responses import OperationResult
from gmail_extension.schemas.tools import MarkMessageParams, MoveMessageParams
from gmail_extension.tools.base import (
    OperationHandler,
    business_miss,
    current_account,
    run_operation,
)

logger = logging.getLogger(__name__)

RESPONSE = "Response"
FOLDER_NOT_FOUND = "failed."
INVALID_LABEL = "Invalid label"


def execute_move_message(params: MoveMessageParams) -> OperationResult:
    """File a message under another folder.

    Returns:
        {"Response": "success"}, {"Response": "Invalid message id"} or
        {"Response": "failed."} when the folder does not exist.
    """
    account = current_account()
    email = account.get_email(params.message_id)
    if email is None:
        return business_miss({RESPONSE: INVALID_ID}, INVALID_ID)

    folder = account.get_folder_by_name(params.folder_name)
    if folder is None:
        logger.info("Folder %s not found, message %s not moved", params.folder_name, params.message_id)
        return business_miss({RESPONSE: FOLDER_NOT_FOUND}, "Folder not found")

    email.move_to_folder(folder)
    return OperationResult.success({RESPONSE: SUCCESS})


def execute_mark_message(params: MarkMessageParams) -> OperationResult:
    """Mark a message read or unread ("read"/"unread", any case)."""
    email = current_account().get_email(params.message_id)
    if email is None:
        return business_miss({RESPONSE: INVALID_ID}, INVALID_ID)

    label = (params.label or "").strip().lower()
    if label == "read":
        email.mark_as_read()
    elif label == "unread":
        email.mark_as_unread()
    else:
        logger.info("Unsupported mark label: %s", params.label)
        return business_miss({RESPONSE: INVALID_LABEL}, INVALID_LABEL)
    return OperationResult.success({RESPONSE: SUCCESS})


MOVE_MESSAGE = OperationHandler(
    operation=Operation.MOVE_MESSAGE,
    params_model=MoveMessageParams,
    execute=execute_move_message,
    system_error_message="Error occurred while moving message to folder",
    replay_error_message=(
        "We couldn't move the message because either the message ID is incorrect "
        "or the folder doesn't exist. Please check and try again."
    ),
)

MARK_MESSAGE = OperationHandler(
    operation=Operation.MARK_MESSAGE,
    params_model=MarkMessageParams,
    execute=execute_mark_message,
    system_error_message="Error occurred while marking message",
    replay_error_message=(
        "We couldn't process the message because it seems the message ID is "
        "incorrect or missing"
    ),
)


async def gmail_move_message(params: MoveMessageParams) -> dict[str, Any]:
    """Move a message to a folder (label)."""
    return await run_operation(MOVE_MESSAGE, params)


async def gmail_mark_message(params: MarkMessageParams) -> dict[str, Any]:
    """Mark a message as read or unread."""
    return await run_operation(MARK_MESSAGE, params)
