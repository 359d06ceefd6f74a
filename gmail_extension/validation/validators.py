"""Field validators.

Every validator checks one kind of raw input string and phrases the three
messages the retry flow needs: a prompt asking for a corrected value, a
confirmation explaining what was wrong, and a terminal error message.

Validators keep no per-call state; the invalid entries found by a check are
returned in the ValidationCheck, never stored on the validator.
"""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from collections.abc import Mapping
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import TYPE_CHECKING, NamedTuple

from email_validator import EmailNotValidError, validate_email

from gmail_extension.catalog import FieldNames
from gmail_extension.utils.errors import MustAuthorizeError

if TYPE_CHECKING:
    from gmail_extension.gmail.account import MailAccount

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")

MIN_PAGE_VALUE = 1
MAX_PAGE_VALUE = 15


class ValidationField(str, Enum):
    """Validatable fields, in the order the orchestrator checks them."""

    MESSAGE_ID = "MessageId"
    TO = "ToAddresses"
    CC = "CcAddresses"
    BCC = "BccAddresses"
    REPLY_TO = "ReplyToAddress"
    FOLDER_NAME = "FolderName"
    LABEL = "Label"
    PAGE_NUMBER = "PageNumber"
    PAGE_SIZE = "PageSize"
    QUERY = "Query"


class FieldType(str, Enum):
    """Host form field types."""

    TEXT = "com.krista.fields.Text"
    NUMBER = "com.krista.fields.Number"
    SWITCH = "com.krista.fields.Switch"


class ValidationCheck(NamedTuple):
    """Result of checking one raw value."""

    is_valid: bool
    invalid_entries: tuple[str, ...] = ()


Context = Mapping[ValidationField, "str | None"]


# =============================================================================
# Helpers
# =============================================================================


def is_blank(value: str | None) -> bool:
    return value is None or not value.strip()


def strip_trailing_zeros(raw: str | None) -> str:
    """Render a numeric string without trailing zeros ("5.0" -> "5").

    Non-numeric input is returned unchanged.
    """
    if raw is None:
        return ""
    try:
        value = Decimal(str(float(raw)))
    except (TypeError, ValueError, InvalidOperation):
        return str(raw)
    if not value.is_finite():
        return str(raw)
    return format(value.normalize(), "f")


def is_email_valid(segment: str) -> bool:
    """Check one address segment such as "Jane <jane@acme.io>"."""
    match = EMAIL_PATTERN.search(segment)
    if match is None:
        return False
    try:
        validate_email(match.group(), check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


def find_invalid_addresses(raw: str | None) -> list[str]:
    """Return the non-blank comma-separated segments that are not addresses."""
    if is_blank(raw):
        return []
    return [
        segment.strip()
        for segment in raw.split(",")
        if segment.strip() and not is_email_valid(segment)
    ]


# =============================================================================
# Base class
# =============================================================================


class Validator(ABC):
    """Checks one field kind and phrases its messages."""

    field: ValidationField
    fetch_field_name: str
    field_type: FieldType = FieldType.TEXT

    @abstractmethod
    def validate(self, raw: str | None, context: Context) -> ValidationCheck:
        """Check a raw value.

        Args:
            raw: The value as supplied by the caller.
            context: All values supplied for the operation.

        Returns:
            ValidationCheck; malformed input is reported, never raised.

        Raises:
            MustAuthorizeError: An account lookup needs re-authorization.
        """

    @abstractmethod
    def fetch_prompt_message(self) -> str:
        """Prompt asking the caller for a corrected value."""

    @abstractmethod
    def confirmation_message(
        self, raw: str | None, context: Context, check: ValidationCheck
    ) -> str:
        """Explanation shown when asking whether to re-enter the value."""

    @abstractmethod
    def error_message(self, raw: str | None, check: ValidationCheck) -> str:
        """Terminal error text for the value."""


class AccountValidator(Validator):
    """Validator that looks values up in the mailbox."""

    def __init__(self, account: MailAccount) -> None:
        self._account = account

    def validate(self, raw: str | None, context: Context) -> ValidationCheck:
        if is_blank(raw):
            return ValidationCheck(False)
        try:
            return ValidationCheck(self._exists(raw.strip()))
        except MustAuthorizeError:
            raise
        except Exception as e:
            logger.warning("Lookup for %s '%s' failed: %s", self.field.value, raw, e)
            return ValidationCheck(False)

    @abstractmethod
    def _exists(self, value: str) -> bool:
        """Whether value names something in the mailbox."""


# =============================================================================
# Mailbox lookups
# =============================================================================


class MessageIdValidator(AccountValidator):
    field = ValidationField.MESSAGE_ID
    fetch_field_name = FieldNames.MESSAGE_ID

    def _exists(self, value: str) -> bool:
        return value in self._account.fetch_all_message_ids()

    def fetch_prompt_message(self) -> str:
        return "Please enter a valid Gmail message ID (a unique identifier for the email)."

    def confirmation_message(self, raw, context, check) -> str:
        return (
            f"No email found with Message ID: {raw or ''}. Please verify the ID is "
            "correct and the email exists in your account."
        )

    def error_message(self, raw, check) -> str:
        return f"The Message ID '{raw or ''}' is not valid or does not exist in your Gmail account."


class FolderNameValidator(AccountValidator):
    field = ValidationField.FOLDER_NAME
    fetch_field_name = FieldNames.FOLDER_NAME

    def _exists(self, value: str) -> bool:
        return self._account.get_folder_by_name(value, case_sensitive=True) is not None

    def fetch_prompt_message(self) -> str:
        return (
            "Please enter a valid Gmail folder name "
            "(e.g., INBOX, SENT, DRAFT, or a custom folder name)."
        )

    def confirmation_message(self, raw, context, check) -> str:
        return (
            f"The folder '{raw or ''}' does not exist in your Gmail account. "
            "Please check the name and try again."
        )

    def error_message(self, raw, check) -> str:
        return (
            f"The folder name '{raw or ''}' is not valid or does not exist "
            "in your Gmail account."
        )


class LabelValidator(AccountValidator):
    field = ValidationField.LABEL
    fetch_field_name = FieldNames.LABEL

    def _exists(self, value: str) -> bool:
        return self._account.get_folder_by_name(value, case_sensitive=True) is not None

    def fetch_prompt_message(self) -> str:
        return (
            "Please enter a valid Gmail label name "
            "(e.g., Important, Work, or a custom label you've created)."
        )

    def confirmation_message(self, raw, context, check) -> str:
        return f"The provided label '{raw or ''}' does not exist in your Gmail account."

    def error_message(self, raw, check) -> str:
        return (
            f"Invalid label name: '{raw or ''}'. "
            "Please check that the label exists in your Gmail account."
        )


# =============================================================================
# Address lists
# =============================================================================


class AddressListValidator(Validator):
    """Comma-separated address list; blank is valid unless required."""

    required = False
    # How the field is named inside messages, e.g. "CC"
    display_name = ""

    def validate(self, raw: str | None, context: Context) -> ValidationCheck:
        if is_blank(raw):
            return ValidationCheck(not self.required)
        invalid = find_invalid_addresses(raw)
        return ValidationCheck(not invalid, tuple(invalid))

    def _entries(self, raw: str | None, check: ValidationCheck) -> str:
        if check.invalid_entries:
            return ", ".join(check.invalid_entries)
        return raw or ""

    def fetch_prompt_message(self) -> str:
        return (
            f"Please enter a valid email address for {self.display_name} recipients "
            "in the format: user@domain.com"
        )

    def confirmation_message(self, raw, context, check) -> str:
        return (
            f"The {self.display_name} email address '{self._entries(raw, check)}' could not "
            "be validated. Please verify the address and try again."
        )

    def error_message(self, raw, check) -> str:
        return (
            f"The '{self.display_name}' email addresses are not valid: "
            f"{self._entries(raw, check)}. Please check the format and try again."
        )


class ToAddressValidator(AddressListValidator):
    field = ValidationField.TO
    fetch_field_name = FieldNames.TO
    required = True
    display_name = "To"

    def fetch_prompt_message(self) -> str:
        return "Please enter a valid email address in the format: user@domain.com"

    def confirmation_message(self, raw, context, check) -> str:
        return (
            f"The email address '{self._entries(raw, check)}' could not be validated. "
            "Please verify the address and try again."
        )


class CcAddressValidator(AddressListValidator):
    field = ValidationField.CC
    fetch_field_name = FieldNames.CC
    display_name = "CC"


class BccAddressValidator(AddressListValidator):
    field = ValidationField.BCC
    fetch_field_name = FieldNames.BCC
    display_name = "BCC"


class ReplyToAddressValidator(AddressListValidator):
    field = ValidationField.REPLY_TO
    fetch_field_name = FieldNames.REPLY_TO
    display_name = "Reply To"


# =============================================================================
# Paging and search
# =============================================================================


class PageValueValidator(Validator):
    """Numeric value within [1, 15]."""

    field_type = FieldType.NUMBER
    # "Page number" / "Page size" as used in messages
    label = ""

    def validate(self, raw: str | None, context: Context) -> ValidationCheck:
        if is_blank(raw):
            return ValidationCheck(False)
        try:
            value = float(raw)
        except ValueError:
            return ValidationCheck(False)
        return ValidationCheck(MIN_PAGE_VALUE <= value <= MAX_PAGE_VALUE)

    def confirmation_message(self, raw, context, check) -> str:
        return (
            f"The provided {self.label} : {strip_trailing_zeros(raw)} should be "
            f"greater than 0 and less than or equal to {MAX_PAGE_VALUE}."
        )

    def error_message(self, raw, check) -> str:
        return self.confirmation_message(raw, {}, check)


class PageNumberValidator(PageValueValidator):
    field = ValidationField.PAGE_NUMBER
    fetch_field_name = FieldNames.PAGE_NUMBER
    label = "Page number"

    def fetch_prompt_message(self) -> str:
        return (
            "Please enter a valid page number (1-15). "
            "This determines which page of results to retrieve."
        )


class PageSizeValidator(PageValueValidator):
    field = ValidationField.PAGE_SIZE
    fetch_field_name = FieldNames.PAGE_SIZE
    label = "Page size"

    def fetch_prompt_message(self) -> str:
        return "Please enter valid Page Size."


class QueryValidator(Validator):
    field = ValidationField.QUERY
    fetch_field_name = FieldNames.QUERY

    def validate(self, raw: str | None, context: Context) -> ValidationCheck:
        return ValidationCheck(not is_blank(raw))

    def fetch_prompt_message(self) -> str:
        return "Please enter a valid search query."

    def confirmation_message(self, raw, context, check) -> str:
        return "The search query cannot be empty. Please provide a valid search query."

    def error_message(self, raw, check) -> str:
        return "Invalid query: Query cannot be empty or null."


__all__ = [
    "ValidationField",
    "FieldType",
    "ValidationCheck",
    "Validator",
    "AccountValidator",
    "MessageIdValidator",
    "FolderNameValidator",
    "LabelValidator",
    "AddressListValidator",
    "ToAddressValidator",
    "CcAddressValidator",
    "BccAddressValidator",
    "ReplyToAddressValidator",
    "PageNumberValidator",
    "PageSizeValidator",
    "QueryValidator",
    "find_invalid_addresses",
    "is_email_valid",
    "strip_trailing_zeros",
]
