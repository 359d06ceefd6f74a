"""Label operations: mails under a label, and all label names."""

from __future__ import annotations

import logging
from typing import Any

from gmail_extension.catalog import Operation
from gmail_extension.schemas.responses import OperationResult
from gmail_extension.schemas.tools import FetchByLabelParams
from gmail_extension.tools.base import (
    OperationHandler,
    business_miss,
    current_account,
    run_operation,
    run_unvalidated,
)
from gmail_extension.tools.read.fetch import page_emails

logger = logging.getLogger(__name__)


def execute_fetch_mails_by_label(params: FetchByLabelParams) -> OperationResult:
    folder = current_account().get_folder_by_name(params.label)
    if folder is None:
        # Validated, then removed before we got here
        logger.info("Label %s no longer exists", params.label)
        return business_miss({"Mails": []}, "Label not found")
    return OperationResult.success(
        {"Mails": page_emails(folder, params.page_number, params.page_size)}
    )


def execute_fetch_all_labels() -> OperationResult:
    return OperationResult.success({"Labels": current_account().get_folder_names()})


FETCH_MAILS_BY_LABEL = OperationHandler(
    operation=Operation.FETCH_MAILS_BY_LABEL,
    params_model=FetchByLabelParams,
    execute=execute_fetch_mails_by_label,
    system_error_message="Error occurred while fetching mails by label",
    replay_error_message="Failed to fetch mail by label",
)


async def gmail_fetch_mails_by_label(params: FetchByLabelParams) -> dict[str, Any]:
    """Fetch one page of the mails carrying a label."""
    return await run_operation(FETCH_MAILS_BY_LABEL, params)


async def gmail_fetch_all_labels() -> dict[str, Any]:
    """List the names of every label in the mailbox."""
    return await run_unvalidated(
        Operation.FETCH_ALL_LABELS,
        execute_fetch_all_labels,
        "Error occurred while fetching labels",
    )
