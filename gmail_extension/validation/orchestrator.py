"""Runs the validators an operation needs and collects every failure."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from gmail_extension.catalog import Operation
from gmail_extension.validation.validators import (
    BccAddressValidator,
    CcAddressValidator,
    FieldType,
    FolderNameValidator,
    LabelValidator,
    MessageIdValidator,
    PageNumberValidator,
    PageSizeValidator,
    QueryValidator,
    ReplyToAddressValidator,
    ToAddressValidator,
    ValidationField,
    Validator,
)

if TYPE_CHECKING:
    from gmail_extension.gmail.account import MailAccount

logger = logging.getLogger(__name__)


class ValidationOutcome(BaseModel):
    """A failed (or passed) check of one field, with its phrased messages.

    Serialized with camelCase keys inside persisted continuation records.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    field: ValidationField = Field(..., description="Field that was checked")
    passed: bool = Field(default=False, description="Whether the value is valid")
    error_message: str = Field(..., description="Terminal error text")
    fetch_prompt_message: str = Field(..., description="Prompt for a corrected value")
    confirmation_message: str = Field(..., description="Why a re-entry is needed")
    fetch_field_name: str = Field(..., description="Host field name to re-enter")
    field_type: FieldType = Field(default=FieldType.TEXT, description="Host field type")
    invalid_entries: list[str] = Field(
        default_factory=list,
        description="Offending segments for list-valued fields",
    )


# Fields each operation validates, in check order
OPERATION_FIELDS: dict[Operation, tuple[ValidationField, ...]] = {
    Operation.SEND_MAIL: (
        ValidationField.TO,
        ValidationField.CC,
        ValidationField.BCC,
        ValidationField.REPLY_TO,
    ),
    Operation.REPLY_TO_MAIL: (ValidationField.MESSAGE_ID,),
    Operation.REPLY_TO_ALL: (ValidationField.MESSAGE_ID,),
    Operation.REPLY_TO_MAIL_WITH_FIELDS: (
        ValidationField.MESSAGE_ID,
        ValidationField.TO,
        ValidationField.CC,
        ValidationField.BCC,
    ),
    Operation.REPLY_TO_ALL_WITH_FIELDS: (
        ValidationField.MESSAGE_ID,
        ValidationField.TO,
        ValidationField.CC,
        ValidationField.BCC,
    ),
    Operation.FORWARD_MAIL: (ValidationField.MESSAGE_ID, ValidationField.TO),
    Operation.MOVE_MESSAGE: (ValidationField.MESSAGE_ID,),
    Operation.MARK_MESSAGE: (ValidationField.MESSAGE_ID,),
    Operation.FETCH_MAIL_BY_ID: (ValidationField.MESSAGE_ID,),
    Operation.FETCH_INBOX: (ValidationField.PAGE_NUMBER, ValidationField.PAGE_SIZE),
    Operation.FETCH_SENT: (ValidationField.PAGE_NUMBER, ValidationField.PAGE_SIZE),
    Operation.FETCH_MAILS_BY_LABEL: (
        ValidationField.LABEL,
        ValidationField.PAGE_NUMBER,
        ValidationField.PAGE_SIZE,
    ),
    Operation.FETCH_MAILS_BY_QUERY: (ValidationField.QUERY,),
}


class ValidationOrchestrator:
    """Validates operation inputs against the field registry.

    Example:
        >>> orchestrator = ValidationOrchestrator(account)
        >>> failures = orchestrator.validate_operation(
        ...     Operation.SEND_MAIL, {ValidationField.TO: "bad"}
        ... )
        >>> [f.fetch_field_name for f in failures]
        ['To']
    """

    def __init__(self, account: MailAccount) -> None:
        validators: list[Validator] = [
            MessageIdValidator(account),
            ToAddressValidator(),
            CcAddressValidator(),
            BccAddressValidator(),
            ReplyToAddressValidator(),
            FolderNameValidator(account),
            LabelValidator(account),
            PageNumberValidator(),
            PageSizeValidator(),
            QueryValidator(),
        ]
        self._validators = {v.field: v for v in validators}

    def validator_for(self, field: ValidationField) -> Validator:
        return self._validators[field]

    def validate(
        self,
        values: Mapping[ValidationField, str | None],
        fields: Sequence[ValidationField] | None = None,
    ) -> list[ValidationOutcome]:
        """Check every supplied field and return the failures.

        Args:
            values: Raw values keyed by field; fields absent here are skipped.
            fields: Fields to check, in order. Defaults to every field in
                declaration order.

        Returns:
            Failed outcomes, in check order.

        Raises:
            MustAuthorizeError: A mailbox lookup needs re-authorization.
        """
        order = fields if fields is not None else list(ValidationField)
        failures: list[ValidationOutcome] = []
        for field in order:
            if field not in values:
                continue
            validator = self._validators[field]
            raw = values[field]
            check = validator.validate(raw, values)
            if check.is_valid:
                continue
            logger.info("Validation failed for %s", field.value)
            failures.append(
                ValidationOutcome(
                    field=field,
                    passed=False,
                    error_message=validator.error_message(raw, check),
                    fetch_prompt_message=validator.fetch_prompt_message(),
                    confirmation_message=validator.confirmation_message(raw, values, check),
                    fetch_field_name=validator.fetch_field_name,
                    field_type=validator.field_type,
                    invalid_entries=list(check.invalid_entries),
                )
            )
        return failures

    def validate_operation(
        self, operation: Operation, values: Mapping[ValidationField, str | None]
    ) -> list[ValidationOutcome]:
        """Validate the fields registered for operation."""
        return self.validate(values, OPERATION_FIELDS.get(operation, ()))


__all__ = [
    "ValidationOutcome",
    "ValidationOrchestrator",
    "OPERATION_FIELDS",
]
