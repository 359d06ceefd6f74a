"""FastMCP server for the Gmail extension.

This module provides the FastMCP server instance with tool registrations:

- Read Tools (7): fetch by id, inbox, sent, by label, by query, all labels
  and latest mail
- Write Tools (8): send, the four reply variants, forward, move and mark
- Continuation Tools (26): confirmReenter<Op> and handleReenter<Op> for each
  of the 13 operations that support the retry flow

The server uses a lifespan context manager to purge expired continuation
records at startup.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from mcp.server.fastmcp import FastMCP
from mcp.types import ToolAnnotations

from gmail_extension.catalog import Operation
from gmail_extension.continuation.store import continuation_store
from gmail_extension.schemas.tools import (
    ConfirmReenterParams,
    FetchByLabelParams,
    FetchMailParams,
    FetchPageParams,
    ForwardMailParams,
    HandleReenterParams,
    MarkMessageParams,
    MoveMessageParams,
    QueryParams,
    ReplyParams,
    ReplyWithFieldsParams,
    SendMailParams,
)
from gmail_extension.tools import (
    RETRYABLE_HANDLERS,
    confirm_reenter,
    gmail_fetch_all_labels,
    gmail_fetch_inbox,
    gmail_fetch_latest_mail,
    gmail_fetch_mail_by_message_id,
    gmail_fetch_mail_details_by_query,
    gmail_fetch_mails_by_label,
    gmail_fetch_sent,
    gmail_forward_mail,
    gmail_mark_message,
    gmail_move_message,
    gmail_reply_to_all,
    gmail_reply_to_all_with_fields,
    gmail_reply_to_mail,
    gmail_reply_to_mail_with_fields,
    gmail_send_mail,
    handle_reenter,
    with_params,
)

logger = logging.getLogger(__name__)

READ_ONLY = ToolAnnotations(readOnlyHint=True, destructiveHint=False, idempotentHint=True)
SENDS_MAIL = ToolAnnotations(readOnlyHint=False, destructiveHint=False, idempotentHint=False)
MODIFIES_MAIL = ToolAnnotations(readOnlyHint=False, destructiveHint=False, idempotentHint=True)

READ_OPERATIONS = frozenset(
    {
        Operation.FETCH_MAIL_BY_ID,
        Operation.FETCH_INBOX,
        Operation.FETCH_SENT,
        Operation.FETCH_MAILS_BY_LABEL,
        Operation.FETCH_MAILS_BY_QUERY,
    }
)


# =============================================================================
# Cleanup Resources Helper
# =============================================================================


async def cleanup_resources() -> None:
    """Remove expired and unreadable continuation records.

    Called during server startup via the lifespan context manager. It can
    also be called directly for testing or manual cleanup.
    """
    try:
        expired_count = continuation_store.cleanup_expired()
        if expired_count > 0:
            logger.info("Cleaned up %d expired continuation records", expired_count)
    except Exception as e:
        logger.warning("Error cleaning up expired continuations: %s", e)


# =============================================================================
# Lifespan Context Manager
# =============================================================================


@asynccontextmanager
async def server_lifespan(server: FastMCP) -> AsyncIterator[dict[str, Any]]:
    """Lifespan context manager for server startup/shutdown.

    Args:
        server: The FastMCP server instance.

    Yields:
        Empty context dict (no shared state needed).
    """
    logger.info("Gmail extension server starting up...")
    await cleanup_resources()
    logger.info("Gmail extension server ready")

    yield {}

    logger.info("Gmail extension server shutting down...")


# =============================================================================
# Read Tool Wrappers
# =============================================================================


def _register_read_tools(mcp: FastMCP) -> None:
    """Register the fetch and search tools with the FastMCP server.

    Args:
        mcp: The FastMCP server instance.
    """

    @mcp.tool(name="gmail_fetch_mail_by_message_id", annotations=READ_ONLY)
    async def gmail_fetch_mail_by_message_id_tool(
        message_id: str | None = None,
        allow_retry: bool = False,
    ) -> dict[str, Any]:
        """Fetch one mail by its Gmail message id.

        Args:
            message_id: Gmail message id.
            allow_retry: Offer to re-enter the id when it does not exist.

        Returns:
            Success: {status, values: {"Mail": {...}}}
            Error: {status, error_message, error_kind, remediation_actions, ...}
        """
        return await with_params(
            FetchMailParams,
            gmail_fetch_mail_by_message_id,
            message_id=message_id,
            allow_retry=allow_retry,
        )

    @mcp.tool(name="gmail_fetch_inbox", annotations=READ_ONLY)
    async def gmail_fetch_inbox_tool(
        page_number: float | None = None,
        page_size: float | None = None,
        allow_retry: bool = False,
    ) -> dict[str, Any]:
        """Fetch one page of the inbox, newest first.

        Args:
            page_number: Page to fetch, 1 to 15 (default 1).
            page_size: Mails per page, 1 to 15 (default 15).
            allow_retry: Offer to re-enter invalid paging values.
        """
        return await with_params(
            FetchPageParams,
            gmail_fetch_inbox,
            page_number=page_number,
            page_size=page_size,
            allow_retry=allow_retry,
        )

    @mcp.tool(name="gmail_fetch_sent", annotations=READ_ONLY)
    async def gmail_fetch_sent_tool(
        page_number: float | None = None,
        page_size: float | None = None,
        allow_retry: bool = False,
    ) -> dict[str, Any]:
        """Fetch one page of sent mail, newest first.

        Args:
            page_number: Page to fetch, 1 to 15 (default 1).
            page_size: Mails per page, 1 to 15 (default 15).
            allow_retry: Offer to re-enter invalid paging values.
        """
        return await with_params(
            FetchPageParams,
            gmail_fetch_sent,
            page_number=page_number,
            page_size=page_size,
            allow_retry=allow_retry,
        )

    @mcp.tool(name="gmail_fetch_mails_by_label", annotations=READ_ONLY)
    async def gmail_fetch_mails_by_label_tool(
        label: str | None = None,
        page_number: float | None = None,
        page_size: float | None = None,
        allow_retry: bool = False,
    ) -> dict[str, Any]:
        """Fetch one page of the mails carrying a label.

        Args:
            label: Label (folder) name, case-sensitive.
            page_number: Page to fetch, 1 to 15 (default 1).
            page_size: Mails per page, 1 to 15 (default 15).
            allow_retry: Offer to re-enter an unknown label or invalid paging.
        """
        return await with_params(
            FetchByLabelParams,
            gmail_fetch_mails_by_label,
            label=label,
            page_number=page_number,
            page_size=page_size,
            allow_retry=allow_retry,
        )

    @mcp.tool(name="gmail_fetch_mail_details_by_query", annotations=READ_ONLY)
    async def gmail_fetch_mail_details_by_query_tool(
        query: str | None = None,
        allow_retry: bool = False,
    ) -> dict[str, Any]:
        """Search mail using Gmail query syntax.

        Returns at most 10 mails. Examples: "from:jane@acme.io",
        "subject:invoice is:unread".

        Args:
            query: Gmail search query.
            allow_retry: Offer to re-enter a blank query.
        """
        return await with_params(
            QueryParams,
            gmail_fetch_mail_details_by_query,
            query=query,
            allow_retry=allow_retry,
        )

    @mcp.tool(name="gmail_fetch_all_labels", annotations=READ_ONLY)
    async def gmail_fetch_all_labels_tool() -> dict[str, Any]:
        """List the names of every label in the mailbox."""
        return await gmail_fetch_all_labels()

    @mcp.tool(name="gmail_fetch_latest_mail", annotations=READ_ONLY)
    async def gmail_fetch_latest_mail_tool() -> dict[str, Any]:
        """Fetch the newest inbox mail ("New Email" is null for an empty inbox)."""
        return await gmail_fetch_latest_mail()


# =============================================================================
# Write Tool Wrappers
# =============================================================================


def _register_write_tools(mcp: FastMCP) -> None:
    """Register the tools that send or change mail.

    Args:
        mcp: The FastMCP server instance.
    """

    @mcp.tool(name="gmail_send_mail", annotations=SENDS_MAIL)
    async def gmail_send_mail_tool(
        to: str | None = None,
        subject: str | None = None,
        message: str | None = None,
        attachments: list[dict[str, str]] | None = None,
        cc: str | None = None,
        bcc: str | None = None,
        reply_to: str | None = None,
        allow_retry: bool = False,
    ) -> dict[str, Any]:
        """Send a new mail.

        Args:
            to: Comma-separated recipients (required).
            subject: Subject line.
            message: Body text; line breaks are kept.
            attachments: Files as {file_name, mime_type, content_base64}.
            cc: Comma-separated CC recipients.
            bcc: Comma-separated BCC recipients.
            reply_to: Comma-separated Reply-To addresses.
            allow_retry: Offer to re-enter invalid addresses.

        Returns:
            Success: {status, values: {"Message": "success"}}
            Error: {status, error_message, error_kind, remediation_actions, ...}
        """
        return await with_params(
            SendMailParams,
            gmail_send_mail,
            to=to,
            subject=subject,
            message=message,
            attachments=attachments or [],
            cc=cc,
            bcc=bcc,
            reply_to=reply_to,
            allow_retry=allow_retry,
        )

    @mcp.tool(name="gmail_reply_to_mail", annotations=SENDS_MAIL)
    async def gmail_reply_to_mail_tool(
        message_id: str | None = None,
        message: str | None = None,
        attachments: list[dict[str, str]] | None = None,
        allow_retry: bool = False,
    ) -> dict[str, Any]:
        """Reply to the sender of a mail.

        Args:
            message_id: Mail to answer.
            message: Reply text.
            attachments: Files as {file_name, mime_type, content_base64}.
            allow_retry: Offer to re-enter an unknown message id.
        """
        return await with_params(
            ReplyParams,
            gmail_reply_to_mail,
            message_id=message_id,
            message=message,
            attachments=attachments or [],
            allow_retry=allow_retry,
        )

    @mcp.tool(name="gmail_reply_to_all", annotations=SENDS_MAIL)
    async def gmail_reply_to_all_tool(
        message_id: str | None = None,
        message: str | None = None,
        attachments: list[dict[str, str]] | None = None,
        allow_retry: bool = False,
    ) -> dict[str, Any]:
        """Reply to the sender and every other recipient of a mail.

        Args:
            message_id: Mail to answer.
            message: Reply text.
            attachments: Files as {file_name, mime_type, content_base64}.
            allow_retry: Offer to re-enter an unknown message id.
        """
        return await with_params(
            ReplyParams,
            gmail_reply_to_all,
            message_id=message_id,
            message=message,
            attachments=attachments or [],
            allow_retry=allow_retry,
        )

    @mcp.tool(name="gmail_reply_to_mail_with_cc_and_bcc", annotations=SENDS_MAIL)
    async def gmail_reply_to_mail_with_fields_tool(
        message_id: str | None = None,
        message: str | None = None,
        attachments: list[dict[str, str]] | None = None,
        to: str | None = None,
        cc: str | None = None,
        bcc: str | None = None,
        allow_retry: bool = False,
    ) -> dict[str, Any]:
        """Reply to the sender, adding To/CC/BCC recipients.

        Args:
            message_id: Mail to answer.
            message: Reply text.
            attachments: Files as {file_name, mime_type, content_base64}.
            to: Additional recipients.
            cc: Additional CC recipients.
            bcc: Additional BCC recipients.
            allow_retry: Offer to re-enter invalid values.
        """
        return await with_params(
            ReplyWithFieldsParams,
            gmail_reply_to_mail_with_fields,
            message_id=message_id,
            message=message,
            attachments=attachments or [],
            to=to,
            cc=cc,
            bcc=bcc,
            allow_retry=allow_retry,
        )

    @mcp.tool(name="gmail_reply_to_all_with_cc_and_bcc", annotations=SENDS_MAIL)
    async def gmail_reply_to_all_with_fields_tool(
        message_id: str | None = None,
        message: str | None = None,
        attachments: list[dict[str, str]] | None = None,
        to: str | None = None,
        cc: str | None = None,
        bcc: str | None = None,
        allow_retry: bool = False,
    ) -> dict[str, Any]:
        """Reply to everyone on a mail, adding To/CC/BCC recipients.

        Args:
            message_id: Mail to answer.
            message: Reply text.
            attachments: Files as {file_name, mime_type, content_base64}.
            to: Additional recipients.
            cc: Additional CC recipients.
            bcc: Additional BCC recipients.
            allow_retry: Offer to re-enter invalid values.
        """
        return await with_params(
            ReplyWithFieldsParams,
            gmail_reply_to_all_with_fields,
            message_id=message_id,
            message=message,
            attachments=attachments or [],
            to=to,
            cc=cc,
            bcc=bcc,
            allow_retry=allow_retry,
        )

    @mcp.tool(name="gmail_forward_mail", annotations=SENDS_MAIL)
    async def gmail_forward_mail_tool(
        message_id: str | None = None,
        to: str | None = None,
        message: str | None = None,
        allow_retry: bool = False,
    ) -> dict[str, Any]:
        """Forward a mail, quoting the original.

        Args:
            message_id: Mail to forward.
            to: Comma-separated recipients (required).
            message: Text placed above the quoted mail.
            allow_retry: Offer to re-enter invalid values.
        """
        return await with_params(
            ForwardMailParams,
            gmail_forward_mail,
            message_id=message_id,
            to=to,
            message=message,
            allow_retry=allow_retry,
        )

    @mcp.tool(name="gmail_move_message", annotations=MODIFIES_MAIL)
    async def gmail_move_message_tool(
        message_id: str | None = None,
        folder_name: str | None = None,
        allow_retry: bool = False,
    ) -> dict[str, Any]:
        """Move a mail to another folder (label).

        The mail leaves the inbox and any other user folder it was in.

        Args:
            message_id: Mail to move.
            folder_name: Target folder name.
            allow_retry: Offer to re-enter an unknown message id.
        """
        return await with_params(
            MoveMessageParams,
            gmail_move_message,
            message_id=message_id,
            folder_name=folder_name,
            allow_retry=allow_retry,
        )

    @mcp.tool(name="gmail_mark_message", annotations=MODIFIES_MAIL)
    async def gmail_mark_message_tool(
        message_id: str | None = None,
        label: str | None = None,
        allow_retry: bool = False,
    ) -> dict[str, Any]:
        """Mark a mail as read or unread.

        Args:
            message_id: Mail to mark.
            label: "read" or "unread".
            allow_retry: Offer to re-enter an unknown message id.
        """
        return await with_params(
            MarkMessageParams,
            gmail_mark_message,
            message_id=message_id,
            label=label,
            allow_retry=allow_retry,
        )


# =============================================================================
# Continuation Tool Wrappers
# =============================================================================


def _register_continuation_pair(mcp: FastMCP, operation: Operation) -> None:
    """Register confirmReenter<Op> and handleReenter<Op> for one operation."""

    @mcp.tool(
        name=operation.confirm_continuation,
        description=(
            f"Answer whether to re-enter the invalid values of a suspended "
            f"'{operation.value}' request. No returns the validation errors; "
            f"yes returns a form for the corrected values."
        ),
        annotations=READ_ONLY,
    )
    async def confirm_tool(
        state_id: str,
        reenter: bool,
        inputs: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        return await with_params(
            ConfirmReenterParams,
            lambda params: confirm_reenter(operation, params),
            state_id=state_id,
            reenter=reenter,
            inputs=inputs or {},
        )

    annotations = READ_ONLY if operation in READ_OPERATIONS else SENDS_MAIL

    @mcp.tool(
        name=operation.handle_continuation,
        description=(
            f"Replay a suspended '{operation.value}' request with corrected "
            f"values keyed by field name."
        ),
        annotations=annotations,
    )
    async def handle_tool(
        state_id: str,
        inputs: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        return await with_params(
            HandleReenterParams,
            lambda params: handle_reenter(operation, params),
            state_id=state_id,
            inputs=inputs or {},
        )


def _register_continuation_tools(mcp: FastMCP) -> None:
    """Register the continuation pair of every retryable operation.

    Args:
        mcp: The FastMCP server instance.
    """
    for operation in RETRYABLE_HANDLERS:
        _register_continuation_pair(mcp, operation)


# =============================================================================
# Server Factory
# =============================================================================


def create_server() -> FastMCP:
    """Create and configure the FastMCP server instance.

    Returns:
        Configured FastMCP server instance.
    """
    server = FastMCP(
        name="gmail-extension",
        lifespan=server_lifespan,
    )

    _register_read_tools(server)
    _register_write_tools(server)
    _register_continuation_tools(server)

    # 7 read + 8 write + a pair per retryable operation
    tool_count = 15 + 2 * len(RETRYABLE_HANDLERS)
    logger.info("Gmail extension server created with %d tools registered", tool_count)

    return server


# =============================================================================
# Global Server Instance
# =============================================================================

mcp = create_server()
