"""Tests for validation/orchestrator.py."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from gmail_extension.catalog import Operation
from gmail_extension.utils.errors import MustAuthorizeError
from gmail_extension.validation.orchestrator import (
    OPERATION_FIELDS,
    ValidationOrchestrator,
    ValidationOutcome,
)
from gmail_extension.validation.validators import FieldType, ValidationField


@pytest.fixture
def account() -> MagicMock:
    account = MagicMock()
    account.fetch_all_message_ids.return_value = {"msg-1"}
    account.get_folder_by_name.side_effect = lambda name, case_sensitive=False: (
        object() if name == "Work" else None
    )
    return account


@pytest.fixture
def orchestrator(account: MagicMock) -> ValidationOrchestrator:
    return ValidationOrchestrator(account)


class TestValidate:
    """Tests for ValidationOrchestrator.validate."""

    def test_all_valid_returns_empty(self, orchestrator) -> None:
        failures = orchestrator.validate(
            {ValidationField.TO: "a@example.com", ValidationField.MESSAGE_ID: "msg-1"}
        )
        assert failures == []

    def test_reports_every_failure(self, orchestrator) -> None:
        failures = orchestrator.validate_operation(
            Operation.SEND_MAIL,
            {
                ValidationField.TO: "bad",
                ValidationField.CC: "also-bad",
                ValidationField.BCC: "",
                ValidationField.REPLY_TO: "",
            },
        )

        assert [f.field for f in failures] == [ValidationField.TO, ValidationField.CC]
        assert [f.fetch_field_name for f in failures] == ["To", "Cc"]
        assert all(not f.passed for f in failures)

    def test_skips_absent_fields(self, orchestrator, account) -> None:
        failures = orchestrator.validate_operation(
            Operation.FETCH_MAILS_BY_LABEL, {ValidationField.PAGE_NUMBER: "20"}
        )
        assert [f.field for f in failures] == [ValidationField.PAGE_NUMBER]
        account.get_folder_by_name.assert_not_called()

    def test_check_order_follows_operation_table(self, orchestrator) -> None:
        failures = orchestrator.validate_operation(
            Operation.FETCH_MAILS_BY_LABEL,
            {
                ValidationField.PAGE_SIZE: "0",
                ValidationField.PAGE_NUMBER: "99",
                ValidationField.LABEL: "Missing",
            },
        )
        assert [f.field for f in failures] == [
            ValidationField.LABEL,
            ValidationField.PAGE_NUMBER,
            ValidationField.PAGE_SIZE,
        ]

    def test_outcome_carries_messages(self, orchestrator) -> None:
        (failure,) = orchestrator.validate_operation(
            Operation.FETCH_INBOX, {ValidationField.PAGE_NUMBER: "20.0"}
        )
        assert failure.field_type is FieldType.NUMBER
        assert failure.fetch_field_name == "Page Number"
        assert failure.error_message.startswith("The provided Page number : 20 ")
        assert failure.fetch_prompt_message.startswith("Please enter a valid page number")

    def test_invalid_entries_listed(self, orchestrator) -> None:
        (failure,) = orchestrator.validate_operation(
            Operation.FORWARD_MAIL,
            {
                ValidationField.MESSAGE_ID: "msg-1",
                ValidationField.TO: "good@x.com,bad-email,also@good.com",
            },
        )
        assert failure.invalid_entries == ["bad-email"]

    def test_operation_without_checks(self, orchestrator) -> None:
        assert orchestrator.validate_operation(Operation.FETCH_ALL_LABELS, {}) == []

    def test_authorization_failure_propagates(self, orchestrator, account) -> None:
        account.fetch_all_message_ids.side_effect = MustAuthorizeError("authorize")
        with pytest.raises(MustAuthorizeError):
            orchestrator.validate_operation(
                Operation.FETCH_MAIL_BY_ID, {ValidationField.MESSAGE_ID: "msg-1"}
            )


class TestOperationTable:
    """Tests for the per-operation field table."""

    def test_every_retryable_operation_has_fields(self) -> None:
        for operation in Operation:
            if operation.retryable:
                assert OPERATION_FIELDS[operation], operation

    def test_move_checks_message_id_only(self) -> None:
        assert OPERATION_FIELDS[Operation.MOVE_MESSAGE] == (ValidationField.MESSAGE_ID,)


class TestValidationOutcome:
    """Tests for outcome serialization."""

    def test_camel_case_round_trip(self) -> None:
        outcome = ValidationOutcome(
            field=ValidationField.TO,
            error_message="e",
            fetch_prompt_message="p",
            confirmation_message="c",
            fetch_field_name="To",
            invalid_entries=["bad"],
        )
        data = outcome.model_dump(by_alias=True, mode="json")

        assert data["fetchFieldName"] == "To"
        assert data["invalidEntries"] == ["bad"]
        assert data["field"] == "ToAddresses"
        assert ValidationOutcome.model_validate(data) == outcome
