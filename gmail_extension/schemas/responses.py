"""Operation results returned to the host.

Every operation and continuation returns an OperationResult. A failure may
carry remediation actions (prompts for the caller) and a pointer to the
continuation operation that resumes the request.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, Field

from gmail_extension.validation.validators import FieldType


class ErrorKind(str, Enum):
    """Failure taxonomy.

    Attributes:
        INPUT_ERROR: The caller supplied invalid values.
        LOGIC_ERROR: The request was well formed but could not be carried out.
        SYSTEM_ERROR: An unexpected failure inside the extension or Gmail.
    """

    INPUT_ERROR = "INPUT_ERROR"
    LOGIC_ERROR = "LOGIC_ERROR"
    SYSTEM_ERROR = "SYSTEM_ERROR"


class ActionKind(str, Enum):
    ASK = "ask"
    INFORM = "inform"


class Audience(str, Enum):
    ACTIVE_USER = "active_user"
    ALL_PARTICIPANTS = "all_participants"


class PromptField(BaseModel):
    """A form field the caller is asked to fill in."""

    name: str = Field(..., description="Host field name")
    field_type: FieldType = Field(default=FieldType.TEXT, description="Host field type")


class RemediationAction(BaseModel):
    """Something the caller should do about a failure."""

    kind: ActionKind = Field(..., description="Ask for input or just inform")
    audience: Audience = Field(..., description="Who sees the action")
    message: str = Field(..., description="Text shown to the audience")
    fields: list[PromptField] = Field(
        default_factory=list,
        description="Fields to collect (ASK actions only)",
    )


class OperationResult(BaseModel):
    """Success(values) or Failure(error_message, error_kind, ...)."""

    status: Literal["success", "error"] = Field(..., description="Outcome tag")
    values: dict[str, Any] | None = Field(default=None, description="Success payload")
    error_message: str | None = Field(default=None, description="User-facing error text")
    error_kind: ErrorKind | None = Field(default=None, description="Failure taxonomy")
    remediation_actions: list[RemediationAction] = Field(
        default_factory=list,
        description="Prompts or notices for the caller",
    )
    continuation_operation: str | None = Field(
        default=None,
        description="Operation to invoke to resume the request",
    )
    continuation_inputs: dict[str, Any] | None = Field(
        default=None,
        description="Inputs to pass to the continuation operation",
    )
    detail: str | None = Field(
        default=None,
        exclude=True,
        description="Operator-only diagnostics, never serialized",
    )

    @classmethod
    def success(cls, values: dict[str, Any]) -> OperationResult:
        return cls(status="success", values=values)

    @classmethod
    def failure(
        cls,
        error_message: str,
        error_kind: ErrorKind,
        remediation_actions: list[RemediationAction] | None = None,
        continuation_operation: str | None = None,
        continuation_inputs: dict[str, Any] | None = None,
        detail: str | None = None,
    ) -> OperationResult:
        return cls(
            status="error",
            error_message=error_message,
            error_kind=error_kind,
            remediation_actions=remediation_actions or [],
            continuation_operation=continuation_operation,
            continuation_inputs=continuation_inputs,
            detail=detail,
        )

    @property
    def is_success(self) -> bool:
        return self.status == "success"

    def to_response(self) -> dict[str, Any]:
        """Serialize for the host.

        Success: {"status": "success", "values": {...}}
        Failure: {"status": "error", "error_message", "error_kind",
        "remediation_actions", and the continuation keys when set}
        """
        if self.is_success:
            return {"status": self.status, "values": self.values or {}}

        data = self.model_dump(mode="json", exclude={"values"})
        if self.continuation_operation is None:
            data.pop("continuation_operation")
            data.pop("continuation_inputs")
        return data


__all__ = [
    "ErrorKind",
    "ActionKind",
    "Audience",
    "PromptField",
    "RemediationAction",
    "OperationResult",
]
