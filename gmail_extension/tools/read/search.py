"""Fetch Mail Details By Query operation."""

from __future__ import annotations

import logging
from typing import Any

from gmail_extension.catalog import Operation
from gmail_extension.schemas.mail import mail_values
from gmail_extension.schemas.responses import OperationResult
from gmail_extension.schemas.tools import QueryParams
from gmail_extension.tools.base import OperationHandler, current_account, run_operation

logger = logging.getLogger(__name__)

# Search returns at most this many messages
SEARCH_RESULT_LIMIT = 10


def execute_fetch_mails_by_query(params: QueryParams) -> OperationResult:
    emails = current_account().search_emails(params.query or "", max_results=SEARCH_RESULT_LIMIT)
    logger.info("Query matched %d mails", len(emails))
    return OperationResult.success({"Mails": mail_values(emails)})


FETCH_MAILS_BY_QUERY = OperationHandler(
    operation=Operation.FETCH_MAILS_BY_QUERY,
    params_model=QueryParams,
    execute=execute_fetch_mails_by_query,
    system_error_message="Error occurred while fetching mail details by query",
    replay_error_message="Failed to search emails with the provided query",
)


async def gmail_fetch_mail_details_by_query(params: QueryParams) -> dict[str, Any]:
    """Search mail with Gmail query syntax (e.g. 'from:jane@acme.io')."""
    return await run_operation(FETCH_MAILS_BY_QUERY, params)
