"""Pydantic model for suspended requests awaiting corrected input.

When validation fails and the caller allowed a retry, the original inputs and
the failed outcomes are persisted as a ContinuationRecord. The continuation
operations read the record back to re-prompt the caller and to replay the
request with corrected values.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, Field

from gmail_extension.catalog import FieldNames, Operation
from gmail_extension.validation.orchestrator import ValidationOutcome

# Reserved keys of the persisted state, next to the operation's own fields
OPERATION_KEY = "Operation"
CREATED_AT_KEY = "Created At"
RESERVED_KEYS = {FieldNames.VALIDATION_RESULTS, OPERATION_KEY, CREATED_AT_KEY}


class ContinuationRecord(BaseModel):
    """A suspended request.

    Attributes:
        id: Continuation id handed to the caller as stateId (UUID4).
        operation: Operation the record resumes.
        original_inputs: Inputs as first supplied, keyed by host field name.
        pending_failures: Failed validation outcomes, in check order.
        created_at: When the record was created (UTC).

    Example:
        >>> record = ContinuationRecord(
        ...     operation=Operation.MOVE_MESSAGE,
        ...     original_inputs={"Message ID": "", "Folder Name": "Work"},
        ...     pending_failures=[outcome],
        ... )
        >>> state = record.to_state()
        >>> sorted(state)
        ['Created At', 'Folder Name', 'Message ID', 'Operation', 'Validation Results']
    """

    id: str = Field(
        default_factory=lambda: str(uuid4()),
        description="Unique identifier for this continuation",
    )
    operation: Operation = Field(..., description="Operation the record resumes")
    original_inputs: dict[str, Any] = Field(
        default_factory=dict,
        description="Inputs keyed by host field name",
    )
    pending_failures: list[ValidationOutcome] = Field(
        default_factory=list,
        description="Failed validation outcomes in check order",
    )
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        description="Timestamp when the record was created (UTC)",
    )

    def is_expired(self, ttl: timedelta | None) -> bool:
        """Check whether the record is older than ttl (None never expires)."""
        if ttl is None:
            return False
        created_at = self.created_at
        if created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=UTC)
        return datetime.now(UTC) > created_at + ttl

    def to_state(self) -> dict[str, Any]:
        """Flatten into the persisted JSON object."""
        state = dict(self.original_inputs)
        state[OPERATION_KEY] = self.operation.value
        state[CREATED_AT_KEY] = self.created_at.isoformat()
        state[FieldNames.VALIDATION_RESULTS] = [
            outcome.model_dump(by_alias=True, mode="json")
            for outcome in self.pending_failures
        ]
        return state

    @classmethod
    def from_state(cls, continuation_id: str, state: dict[str, Any]) -> ContinuationRecord:
        """Rebuild a record from its persisted JSON object.

        Raises:
            pydantic.ValidationError: If the state does not describe a record.
        """
        return cls.model_validate(
            {
                "id": continuation_id,
                "operation": state.get(OPERATION_KEY),
                "original_inputs": {
                    k: v for k, v in state.items() if k not in RESERVED_KEYS
                },
                "pending_failures": state.get(FieldNames.VALIDATION_RESULTS) or [],
                "created_at": state.get(CREATED_AT_KEY),
            }
        )
