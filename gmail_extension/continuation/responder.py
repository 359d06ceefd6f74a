"""Responses of the validation retry flow.

A failed validation produces one of four shapes:

- confirm_retry: ask the caller whether to re-enter the invalid values
  (persists a continuation record first).
- fetch_corrections: the caller said yes; ask for one field per failure.
- deny_retry: the caller said no; report the values that were not provided.
- plain_validation_error: the caller did not allow a retry.
"""

from __future__ import annotations

import logging
from typing import Any

from gmail_extension.catalog import FieldNames, Operation
from gmail_extension.continuation.models import ContinuationRecord
from gmail_extension.continuation.store import ContinuationStore, continuation_store
from gmail_extension.schemas.responses import (
    ActionKind,
    Audience,
    ErrorKind,
    OperationResult,
    PromptField,
    RemediationAction,
)
from gmail_extension.validation.orchestrator import ValidationOutcome
from gmail_extension.validation.validators import FieldType

logger = logging.getLogger(__name__)


def _lines(messages: list[str]) -> str:
    """Each message followed by a newline."""
    return "".join(f"{message}\n" for message in messages)


class RetryDecisionResponder:
    """Builds the retry-flow responses, persisting state where needed."""

    def __init__(self, store: ContinuationStore | None = None) -> None:
        self._store = store or continuation_store

    def confirm_retry(
        self,
        outcomes: list[ValidationOutcome],
        operation: Operation,
        inputs: dict[str, Any],
    ) -> OperationResult:
        """Persist the request and ask whether to re-enter the invalid values.

        Args:
            outcomes: Failed validation outcomes, in check order.
            operation: Operation being suspended.
            inputs: Original inputs keyed by host field name.

        Returns:
            INPUT_ERROR failure pointing at confirmReenter<Op>, with the new
            continuation id as stateId next to the echoed inputs.
        """
        record = ContinuationRecord(
            operation=operation,
            original_inputs=inputs,
            pending_failures=outcomes,
        )
        state_id = self._store.put(record)
        logger.info(
            "Suspended %s as continuation %s (%d invalid fields)",
            operation.value,
            state_id,
            len(outcomes),
        )

        return OperationResult.failure(
            error_message=_lines([o.error_message for o in outcomes]),
            error_kind=ErrorKind.INPUT_ERROR,
            remediation_actions=[
                RemediationAction(
                    kind=ActionKind.ASK,
                    audience=Audience.ACTIVE_USER,
                    message=_lines([o.confirmation_message for o in outcomes]),
                    fields=[PromptField(name=FieldNames.REENTER, field_type=FieldType.SWITCH)],
                )
            ],
            continuation_operation=operation.confirm_continuation,
            continuation_inputs={FieldNames.STATE_ID: state_id, **inputs},
        )

    def fetch_corrections(
        self,
        outcomes: list[ValidationOutcome],
        operation: Operation,
        state_id: str,
        echoed: dict[str, Any],
    ) -> OperationResult:
        """Ask for a corrected value for every failed field."""
        return OperationResult.failure(
            error_message=_lines([o.error_message for o in outcomes]),
            error_kind=ErrorKind.INPUT_ERROR,
            remediation_actions=[
                RemediationAction(
                    kind=ActionKind.ASK,
                    audience=Audience.ACTIVE_USER,
                    message=_lines([o.fetch_prompt_message for o in outcomes]),
                    fields=[
                        PromptField(name=o.fetch_field_name, field_type=o.field_type)
                        for o in outcomes
                    ],
                )
            ],
            continuation_operation=operation.handle_continuation,
            continuation_inputs={FieldNames.STATE_ID: state_id, **echoed},
        )

    def deny_retry(self, outcomes: list[ValidationOutcome]) -> OperationResult:
        """Report the stored failures after the caller declined to re-enter."""
        names = ", ".join(f"'{o.fetch_field_name}'" for o in outcomes)
        return OperationResult.failure(
            error_message=_lines([o.error_message for o in outcomes]),
            error_kind=ErrorKind.INPUT_ERROR,
            remediation_actions=[
                RemediationAction(
                    kind=ActionKind.INFORM,
                    audience=Audience.ALL_PARTICIPANTS,
                    message=(
                        f"Required values for {names} were not provided. "
                        "Please provide the missing information to continue."
                    ),
                )
            ],
        )

    def plain_validation_error(self, outcomes: list[ValidationOutcome]) -> OperationResult:
        """Validation failure without a retry flow."""
        message = " ".join(o.error_message for o in outcomes).strip()
        return OperationResult.failure(
            error_message=message,
            error_kind=ErrorKind.INPUT_ERROR,
            remediation_actions=[
                RemediationAction(
                    kind=ActionKind.INFORM,
                    audience=Audience.ACTIVE_USER,
                    message=message,
                )
            ],
        )
