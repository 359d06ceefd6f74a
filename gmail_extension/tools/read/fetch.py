"""Fetch operations: by message id, inbox and sent pages, latest mail."""

from __future__ import annotations

import logging
from typing import Any

from gmail_extension.catalog import Operation
from gmail_extension.gmail.account import Folder
from gmail_extension.schemas.mail import MailDetails, mail_values
from gmail_extension.schemas.responses import OperationResult
from gmail_extension.schemas.tools import FetchMailParams, FetchPageParams
from gmail_extension.tools.base import (
    OperationHandler,
    current_account,
    logic_error,
    run_operation,
    run_unvalidated,
)

logger = logging.getLogger(__name__)

MAIL_NOT_FOUND = (
    "We couldn't fetch the email because the message ID appears to be incorrect. "
    "Please check the message ID and try again."
)


def page_emails(
    folder: Folder | None, page_number: float | None, page_size: float | None
) -> list[dict[str, Any]]:
    """One page of a folder as MailDetails values ([] for a missing folder)."""
    if folder is None:
        return []
    emails = folder.get_emails(
        int(page_number) if page_number is not None else None,
        int(page_size) if page_size is not None else None,
    )
    return mail_values(emails)


def execute_fetch_mail(params: FetchMailParams) -> OperationResult:
    email = current_account().get_email(params.message_id)
    if email is None:
        logger.info("Message %s not found", params.message_id)
        return logic_error(MAIL_NOT_FOUND)
    return OperationResult.success({"Mail": MailDetails.from_email(email).to_values()})


def execute_fetch_inbox(params: FetchPageParams) -> OperationResult:
    folder = current_account().get_inbox_folder()
    return OperationResult.success(
        {"Inbox Mails": page_emails(folder, params.page_number, params.page_size)}
    )


def execute_fetch_sent(params: FetchPageParams) -> OperationResult:
    folder = current_account().get_sent_folder()
    return OperationResult.success(
        {"Sent Mails": page_emails(folder, params.page_number, params.page_size)}
    )


def execute_fetch_latest_mail() -> OperationResult:
    folder = current_account().get_inbox_folder()
    emails = folder.get_emails(1, 1) if folder is not None else []
    if not emails:
        logger.info("No emails found in inbox")
        return OperationResult.success({"New Email": None})
    details = MailDetails.from_email(emails[0])
    logger.info("Latest email: %s", details.message_id)
    return OperationResult.success({"New Email": details.to_values()})


FETCH_MAIL = OperationHandler(
    operation=Operation.FETCH_MAIL_BY_ID,
    params_model=FetchMailParams,
    execute=execute_fetch_mail,
    system_error_message="Error occurred while fetching mail by message id",
    replay_error_message=MAIL_NOT_FOUND,
)

FETCH_INBOX = OperationHandler(
    operation=Operation.FETCH_INBOX,
    params_model=FetchPageParams,
    execute=execute_fetch_inbox,
    system_error_message="Error occurred while fetching inbox",
    replay_error_message=(
        "We couldn't fetch your inbox because the page number or page size is "
        "invalid. Please enter a number between 1 and 15."
    ),
)

FETCH_SENT = OperationHandler(
    operation=Operation.FETCH_SENT,
    params_model=FetchPageParams,
    execute=execute_fetch_sent,
    system_error_message="Error occurred while fetch sent",
    replay_error_message="Failed to fetch Sent Mails",
)


async def gmail_fetch_mail_by_message_id(params: FetchMailParams) -> dict[str, Any]:
    """Fetch one message by its Gmail id."""
    return await run_operation(FETCH_MAIL, params)


async def gmail_fetch_inbox(params: FetchPageParams) -> dict[str, Any]:
    """Fetch one page of the inbox (defaults: page 1, 15 mails)."""
    return await run_operation(FETCH_INBOX, params)


async def gmail_fetch_sent(params: FetchPageParams) -> dict[str, Any]:
    """Fetch one page of sent mail (defaults: page 1, 15 mails)."""
    return await run_operation(FETCH_SENT, params)


async def gmail_fetch_latest_mail() -> dict[str, Any]:
    """Fetch the newest inbox message, or null when the inbox is empty."""
    return await run_unvalidated(
        Operation.FETCH_LATEST_MAIL,
        execute_fetch_latest_mail,
        "Error occurred while Fetch Latest Mail",
    )
