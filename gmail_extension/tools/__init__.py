"""Gmail extension operations package.

This package contains the operation implementations and the continuation
operations of the retry flow:

- Read Tools: fetch, search and label listing
- Write Tools: send, reply, forward, move and mark
- Continuations: confirmReenter<Op> / handleReenter<Op>
"""

from gmail_extension.tools.base import (
    OperationHandler,
    logic_error,
    run_operation,
    system_error,
    with_params,
)
from gmail_extension.tools.continuations import (
    RETRYABLE_HANDLERS,
    confirm_reenter,
    handle_reenter,
)
from gmail_extension.tools.read import (
    gmail_fetch_all_labels,
    gmail_fetch_inbox,
    gmail_fetch_latest_mail,
    gmail_fetch_mail_by_message_id,
    gmail_fetch_mail_details_by_query,
    gmail_fetch_mails_by_label,
    gmail_fetch_sent,
)
from gmail_extension.tools.write import (
    gmail_forward_mail,
    gmail_mark_message,
    gmail_move_message,
    gmail_reply_to_all,
    gmail_reply_to_all_with_fields,
    gmail_reply_to_mail,
    gmail_reply_to_mail_with_fields,
    gmail_send_mail,
)

__all__ = [
    # Base utilities
    "OperationHandler",
    "logic_error",
    "run_operation",
    "system_error",
    "with_params",
    # Continuations
    "RETRYABLE_HANDLERS",
    "confirm_reenter",
    "handle_reenter",
    # Read tools
    "gmail_fetch_all_labels",
    "gmail_fetch_inbox",
    "gmail_fetch_latest_mail",
    "gmail_fetch_mail_by_message_id",
    "gmail_fetch_mail_details_by_query",
    "gmail_fetch_mails_by_label",
    "gmail_fetch_sent",
    # Write tools
    "gmail_forward_mail",
    "gmail_mark_message",
    "gmail_move_message",
    "gmail_reply_to_all",
    "gmail_reply_to_all_with_fields",
    "gmail_reply_to_mail",
    "gmail_reply_to_mail_with_fields",
    "gmail_send_mail",
]
