"""Base utilities for Gmail extension operations.

This module provides shared utilities used by all operation tools including:
- Standardized failure builders
- The validate / execute / retry-prompt pipeline with telemetry
- Parameter parsing for the server wrappers
"""

from __future__ import annotations

import logging
import time
import traceback
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from pydantic import ValidationError as PydanticValidationError

from gmail_extension.catalog import Operation
from gmail_extension.continuation.responder import RetryDecisionResponder
from gmail_extension.continuation.store import continuation_store
from gmail_extension.gmail.account import MailAccount, mail_account
from gmail_extension.middleware.telemetry import safe_tag_map, telemetry
from gmail_extension.schemas.responses import (
    ActionKind,
    Audience,
    ErrorKind,
    OperationResult,
    RemediationAction,
)
from gmail_extension.schemas.tools import OperationParams
from gmail_extension.utils.errors import MustAuthorizeError
from gmail_extension.validation.orchestrator import ValidationOrchestrator

logger = logging.getLogger(__name__)

P = TypeVar("P", bound=OperationParams)
M = TypeVar("M")


# =============================================================================
# Collaborators
# =============================================================================


def current_account() -> MailAccount:
    """Mailbox the operations act on."""
    return mail_account


def current_orchestrator() -> ValidationOrchestrator:
    return ValidationOrchestrator(current_account())


def current_responder() -> RetryDecisionResponder:
    return RetryDecisionResponder(continuation_store)


# =============================================================================
# Result Builders
# =============================================================================


def to_html(text: str | None) -> str:
    """Body text as sent: newlines become <br>."""
    return (text or "").replace("\n", "<br>")


def business_miss(values: dict[str, Any], reason: str) -> OperationResult:
    """Success payload signalling that nothing was done.

    The reason is kept as operator detail and reported to telemetry.
    """
    result = OperationResult.success(values)
    result.detail = reason
    return result


def input_error(message: str) -> OperationResult:
    return OperationResult.failure(
        error_message=message,
        error_kind=ErrorKind.INPUT_ERROR,
        remediation_actions=[
            RemediationAction(kind=ActionKind.INFORM, audience=Audience.ACTIVE_USER, message=message)
        ],
    )


def logic_error(message: str, cause: BaseException | None = None) -> OperationResult:
    """LOGIC_ERROR informing the active user; the traceback stays in detail."""
    return OperationResult.failure(
        error_message=message,
        error_kind=ErrorKind.LOGIC_ERROR,
        remediation_actions=[
            RemediationAction(kind=ActionKind.INFORM, audience=Audience.ACTIVE_USER, message=message)
        ],
        detail=_format_cause(cause),
    )


def system_error(message: str, cause: BaseException) -> OperationResult:
    """SYSTEM_ERROR informing all participants; the traceback stays in detail."""
    return OperationResult.failure(
        error_message=message,
        error_kind=ErrorKind.SYSTEM_ERROR,
        remediation_actions=[
            RemediationAction(
                kind=ActionKind.INFORM, audience=Audience.ALL_PARTICIPANTS, message=message
            )
        ],
        detail=_format_cause(cause),
    )


def _format_cause(cause: BaseException | None) -> str | None:
    if cause is None:
        return None
    return "".join(traceback.format_exception(type(cause), cause, cause.__traceback__))


def describe_validation_error(error: PydanticValidationError) -> str:
    """Readable one-line summary of rejected parameters."""
    problems = []
    for item in error.errors():
        location = ".".join(str(part) for part in item.get("loc", ()))
        problems.append(f"{location}: {item.get('msg', 'invalid value')}")
    return "Invalid parameters: " + "; ".join(problems)


# =============================================================================
# Operation Handlers
# =============================================================================


@dataclass(frozen=True)
class OperationHandler(Generic[P]):
    """Everything needed to run an operation directly or from a continuation.

    Attributes:
        operation: The operation handled.
        params_model: Parameter model; validates persisted inputs on replay.
        execute: The single execution function shared by both paths.
        system_error_message: Message of the SYSTEM_ERROR for unexpected failures.
        replay_error_message: Message of the LOGIC_ERROR when a replay fails.
    """

    operation: Operation
    params_model: type[P]
    execute: Callable[[P], OperationResult]
    system_error_message: str
    replay_error_message: str | None = None


def telemetry_tags(params: OperationParams) -> dict[str, str]:
    """Tags from the validated values (ids, addresses, paging); never bodies."""
    return safe_tag_map(**{field.value: value for field, value in params.validation_values().items()})


async def run_operation(handler: OperationHandler[P], params: P) -> dict[str, Any]:
    """Validate, then execute or prompt for a retry.

    This wrapper handles:
    1. Telemetry counting and outcome recording
    2. Validation of the operation's fields
    3. The retry prompt (allow_retry) or a plain validation error
    4. Execution and conversion of unexpected failures to SYSTEM_ERROR

    Args:
        handler: The operation to run.
        params: Parsed parameters.

    Returns:
        Serialized OperationResult.

    Raises:
        MustAuthorizeError: The mailbox needs (re)authorization.
    """
    operation = handler.operation
    base = operation.metric
    start_time = time.perf_counter()
    tags = telemetry_tags(params)
    telemetry.increment_count(base)
    logger.info("%s: start", operation.value)

    try:
        outcomes = current_orchestrator().validate_operation(operation, params.validation_values())

        if outcomes:
            if params.allow_retry and operation.retryable:
                result = current_responder().confirm_retry(outcomes, operation, params.to_inputs())
                telemetry.record_retry_prompted(
                    base, start_time, {**tags, "validation_count": str(len(outcomes))}
                )
            else:
                result = current_responder().plain_validation_error(outcomes)
                telemetry.record_validation_error(
                    base, start_time, result.error_message or "", tags
                )
            return result.to_response()

        result = handler.execute(params)
        if result.is_success and result.detail is None:
            telemetry.record_success(base, start_time, tags)
        else:
            reason = result.detail if result.is_success else result.error_message
            logger.info("%s: not carried out: %s", operation.value, reason)
            telemetry.record_validation_error(base, start_time, reason or "", tags)
        return result.to_response()

    except MustAuthorizeError as e:
        telemetry.record_validation_error(base, start_time, str(e), tags)
        raise
    except Exception as e:
        logger.exception("Unexpected error in %s", operation.value)
        telemetry.record_error(base, start_time, e, tags)
        return system_error(handler.system_error_message, e).to_response()


async def run_unvalidated(
    operation: Operation,
    execute: Callable[[], OperationResult],
    system_error_message: str,
) -> dict[str, Any]:
    """Run an operation that takes no input."""
    base = operation.metric
    start_time = time.perf_counter()
    telemetry.increment_count(base)
    logger.info("%s: start", operation.value)

    try:
        result = execute()
        telemetry.record_success(base, start_time)
        return result.to_response()
    except MustAuthorizeError as e:
        telemetry.record_validation_error(base, start_time, str(e))
        raise
    except Exception as e:
        logger.exception("Unexpected error in %s", operation.value)
        telemetry.record_error(base, start_time, e)
        return system_error(system_error_message, e).to_response()


# =============================================================================
# Parameter Parsing
# =============================================================================


async def with_params(
    model: type[M],
    tool: Callable[[M], Awaitable[dict[str, Any]]],
    **values: Any,
) -> dict[str, Any]:
    """Parse tool arguments into model and call tool.

    Rejected arguments become an INPUT_ERROR response instead of an
    exception.
    """
    try:
        params = model.model_validate(values)  # type: ignore[attr-defined]
    except PydanticValidationError as e:
        logger.warning("Validation error in %s: %s", model.__name__, e)
        return input_error(describe_validation_error(e)).to_response()
    return await tool(params)
