"""Gmail operations that send or change mail."""

from gmail_extension.tools.write.forward import gmail_forward_mail
from gmail_extension.tools.write.organize import gmail_mark_message, gmail_move_message
from gmail_extension.tools.write.reply import (
    gmail_reply_to_all,
    gmail_reply_to_all_with_fields,
    gmail_reply_to_mail,
    gmail_reply_to_mail_with_fields,
)
from gmail_extension.tools.write.send import gmail_send_mail

__all__ = [
    "gmail_send_mail",
    "gmail_reply_to_mail",
    "gmail_reply_to_all",
    "gmail_reply_to_mail_with_fields",
    "gmail_reply_to_all_with_fields",
    "gmail_forward_mail",
    "gmail_move_message",
    "gmail_mark_message",
]
