"""Continuation operations of the retry flow.

Every retryable operation has two:

- confirmReenter<Op>: the caller answers whether to re-enter the invalid
  values. No returns the stored failures; yes returns a form asking for one
  corrected value per failure.
- handleReenter<Op>: replays the operation with the stored inputs overlaid
  by the corrected values. Replay does not validate again; a miss or failure
  becomes a LOGIC_ERROR.
"""

from __future__ import annotations

import logging
import time
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from gmail_extension.catalog import Operation
from gmail_extension.continuation.store import continuation_store
from gmail_extension.middleware.telemetry import safe_tag_map, telemetry
from gmail_extension.schemas.tools import ConfirmReenterParams, HandleReenterParams
from gmail_extension.tools.base import (
    OperationHandler,
    current_responder,
    logic_error,
    system_error,
)
from gmail_extension.tools.read.fetch import FETCH_INBOX, FETCH_MAIL, FETCH_SENT
from gmail_extension.tools.read.labels import FETCH_MAILS_BY_LABEL
from gmail_extension.tools.read.search import FETCH_MAILS_BY_QUERY
from gmail_extension.tools.write.forward import FORWARD_MAIL
from gmail_extension.tools.write.organize import MARK_MESSAGE, MOVE_MESSAGE
from gmail_extension.tools.write.reply import (
    REPLY_TO_ALL,
    REPLY_TO_ALL_WITH_FIELDS,
    REPLY_TO_MAIL,
    REPLY_TO_MAIL_WITH_FIELDS,
)
from gmail_extension.tools.write.send import SEND_MAIL
from gmail_extension.utils.errors import ContinuationError, MustAuthorizeError

logger = logging.getLogger(__name__)

SESSION_EXPIRED = (
    "The retry session has expired or does not exist. Please start the request again."
)

RETRYABLE_HANDLERS: dict[Operation, OperationHandler[Any]] = {
    handler.operation: handler
    for handler in (
        SEND_MAIL,
        REPLY_TO_MAIL,
        REPLY_TO_ALL,
        REPLY_TO_MAIL_WITH_FIELDS,
        REPLY_TO_ALL_WITH_FIELDS,
        FORWARD_MAIL,
        MOVE_MESSAGE,
        MARK_MESSAGE,
        FETCH_MAIL,
        FETCH_INBOX,
        FETCH_SENT,
        FETCH_MAILS_BY_LABEL,
        FETCH_MAILS_BY_QUERY,
    )
}


async def confirm_reenter(operation: Operation, params: ConfirmReenterParams) -> dict[str, Any]:
    """Answer the caller's re-enter decision for a suspended request.

    Args:
        operation: Operation the continuation belongs to.
        params: stateId, the Reenter decision and echoed inputs.

    Returns:
        Serialized OperationResult: the deny response for no, the correction
        form pointing at handleReenter<Op> for yes, or a LOGIC_ERROR when the
        record is missing, expired or unreadable.
    """
    try:
        record = continuation_store.require(params.state_id, operation)
    except MustAuthorizeError:
        raise
    except ContinuationError as e:
        logger.warning("Confirm for %s rejected: %s", operation.value, e)
        return logic_error(SESSION_EXPIRED, e).to_response()
    except Exception as e:
        logger.exception("Loading continuation %s for %s failed", params.state_id, operation.value)
        handler = RETRYABLE_HANDLERS[operation]
        return system_error(handler.system_error_message, e).to_response()

    responder = current_responder()
    if not params.reenter:
        logger.info("Re-entry declined for %s (%s)", operation.value, record.id)
        return responder.deny_retry(record.pending_failures).to_response()

    logger.info("Re-entry accepted for %s (%s)", operation.value, record.id)
    echoed = {**record.original_inputs, **params.inputs}
    return responder.fetch_corrections(
        record.pending_failures, operation, record.id, echoed
    ).to_response()


async def handle_reenter(operation: Operation, params: HandleReenterParams) -> dict[str, Any]:
    """Replay a suspended request with corrected values.

    Raises:
        MustAuthorizeError: The mailbox needs (re)authorization.
    """
    handler = RETRYABLE_HANDLERS[operation]
    replay_error = handler.replay_error_message or handler.system_error_message
    base = operation.metric
    start_time = time.perf_counter()
    tags = safe_tag_map(path="replay", state_id=params.state_id)
    telemetry.increment_count(base, tags)

    try:
        record = continuation_store.require(params.state_id, operation)
    except MustAuthorizeError:
        raise
    except ContinuationError as e:
        logger.warning("Replay for %s rejected: %s", operation.value, e)
        telemetry.record_validation_error(base, start_time, SESSION_EXPIRED, tags)
        return logic_error(SESSION_EXPIRED, e).to_response()
    except Exception as e:
        logger.exception("Loading continuation %s for %s failed", params.state_id, operation.value)
        telemetry.record_error(base, start_time, e, tags)
        return system_error(handler.system_error_message, e).to_response()

    inputs = {**record.original_inputs, **params.inputs}
    logger.info("%s: replaying continuation %s", operation.value, record.id)

    try:
        replay_params = handler.params_model.model_validate(inputs)
        result = handler.execute(replay_params)
    except MustAuthorizeError as e:
        telemetry.record_validation_error(base, start_time, str(e), tags)
        raise
    except PydanticValidationError as e:
        logger.warning("Replay inputs rejected for %s: %s", operation.value, e)
        telemetry.record_validation_error(base, start_time, replay_error, tags)
        return logic_error(replay_error, e).to_response()
    except Exception as e:
        logger.exception("Replay of %s failed", operation.value)
        telemetry.record_error(base, start_time, e, tags)
        return logic_error(replay_error, e).to_response()

    if not result.is_success:
        telemetry.record_validation_error(base, start_time, result.error_message or "", tags)
        return logic_error(replay_error).to_response()
    if result.detail is not None:
        logger.info("%s: replay not carried out: %s", operation.value, result.detail)
        telemetry.record_validation_error(base, start_time, result.detail, tags)
        return logic_error(replay_error).to_response()

    telemetry.record_success(base, start_time, tags)
    return result.to_response()
