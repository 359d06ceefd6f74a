"""Input validation for Gmail operations."""

from gmail_extension.validation.orchestrator import (
    OPERATION_FIELDS,
    ValidationOrchestrator,
    ValidationOutcome,
)
from gmail_extension.validation.validators import (
    FieldType,
    ValidationCheck,
    ValidationField,
    Validator,
    find_invalid_addresses,
    strip_trailing_zeros,
)

__all__ = [
    "OPERATION_FIELDS",
    "ValidationOrchestrator",
    "ValidationOutcome",
    "FieldType",
    "ValidationCheck",
    "ValidationField",
    "Validator",
    "find_invalid_addresses",
    "strip_trailing_zeros",
]
