"""Durable store for continuation records.

Records are kept as JSON text in a KeyValueStore: sealed files by default
(CONTINUATION_BACKEND=file) or a process-local map (CONTINUATION_BACKEND=memory).
Records are not removed when read, so a caller can repeat the confirm and
handle steps until the record expires.
"""

from __future__ import annotations

import json
import logging
import os
import threading
from datetime import timedelta
from pathlib import Path

from pydantic import ValidationError as PydanticValidationError

from gmail_extension.catalog import Operation
from gmail_extension.continuation.models import ContinuationRecord
from gmail_extension.storage.kv import (
    EncryptedFileKeyValueStore,
    InMemoryKeyValueStore,
    KeyValueStore,
)
from gmail_extension.utils.errors import ContinuationError, TokenError

logger = logging.getLogger(__name__)

DEFAULT_CONTINUATION_DIR = Path.home() / ".gmail-extension" / "continuations"
DEFAULT_TTL_SECONDS = 86400


class ContinuationStore:
    """Thread-safe persistence of continuation records with optional TTL.

    Example:
        >>> store = ContinuationStore(InMemoryKeyValueStore(), ttl_seconds=600)
        >>> continuation_id = store.put(record)
        >>> store.get(continuation_id).operation
        <Operation.MOVE_MESSAGE: 'Move Message'>
    """

    def __init__(self, backend: KeyValueStore, ttl_seconds: int = DEFAULT_TTL_SECONDS) -> None:
        """Initialize the store.

        Args:
            backend: Key-value backend holding JSON text.
            ttl_seconds: Record lifetime in seconds; 0 keeps records forever.
        """
        self._backend = backend
        self._ttl = timedelta(seconds=ttl_seconds) if ttl_seconds > 0 else None
        self._lock = threading.Lock()
        logger.info("ContinuationStore initialized with ttl_seconds=%d", ttl_seconds)

    @property
    def ttl(self) -> timedelta | None:
        return self._ttl

    def put(self, record: ContinuationRecord) -> str:
        """Persist a record and return its continuation id."""
        text = json.dumps(record.to_state())
        with self._lock:
            self._backend.put(record.id, text)
        logger.debug(
            "Stored continuation: id=%s, operation=%s, failures=%d",
            record.id,
            record.operation.value,
            len(record.pending_failures),
        )
        return record.id

    def _load(self, continuation_id: str) -> ContinuationRecord | None:
        try:
            with self._lock:
                text = self._backend.get(continuation_id)
        except TokenError as e:
            logger.error("Unreadable continuation %s: %s", continuation_id, e)
            raise ContinuationError(
                "Continuation record is corrupted",
                continuation_id=continuation_id,
                reason="corrupt",
            ) from e
        if text is None:
            return None

        try:
            state = json.loads(text)
            if not isinstance(state, dict):
                raise ValueError("state is not an object")
            return ContinuationRecord.from_state(continuation_id, state)
        except (ValueError, PydanticValidationError) as e:
            logger.error("Unreadable continuation %s: %s", continuation_id, e)
            raise ContinuationError(
                "Continuation record is corrupted",
                continuation_id=continuation_id,
                reason="corrupt",
            ) from e

    def get(self, continuation_id: str) -> ContinuationRecord | None:
        """Load a record, or None if it is unknown or expired.

        Raises:
            ContinuationError: If the stored record cannot be parsed.
        """
        record = self._load(continuation_id)
        if record is None:
            logger.debug("Continuation %s not found", continuation_id)
            return None
        if record.is_expired(self._ttl):
            logger.debug("Continuation %s expired", continuation_id)
            return None
        return record

    def require(self, continuation_id: str, operation: Operation) -> ContinuationRecord:
        """Load a live record created for operation.

        Raises:
            ContinuationError: If the record is missing, expired, corrupted
                or belongs to another operation.
        """
        record = self._load(continuation_id)
        if record is None:
            raise ContinuationError(
                "Continuation not found",
                continuation_id=continuation_id,
                reason="not_found",
            )
        if record.is_expired(self._ttl):
            raise ContinuationError(
                "Continuation expired",
                continuation_id=continuation_id,
                reason="expired",
            )
        if record.operation != operation:
            raise ContinuationError(
                "Continuation belongs to another operation",
                continuation_id=continuation_id,
                reason="operation_mismatch",
                details={"expected": operation.value, "actual": record.operation.value},
            )
        return record

    def delete(self, continuation_id: str) -> bool:
        with self._lock:
            return self._backend.delete(continuation_id)

    def cleanup_expired(self) -> int:
        """Remove expired (and unreadable) records.

        Returns:
            Number of records removed.
        """
        if self._ttl is None:
            return 0

        removed = 0
        for continuation_id in self._backend.keys():
            try:
                record = self._load(continuation_id)
            except ContinuationError:
                record = None
            if record is None or record.is_expired(self._ttl):
                if self.delete(continuation_id):
                    removed += 1

        if removed:
            logger.info("Cleaned up %d expired continuations", removed)
        return removed


def _ttl_from_env() -> int:
    raw = os.getenv("CONTINUATION_TTL_SECONDS", str(DEFAULT_TTL_SECONDS))
    try:
        return max(int(raw), 0)
    except ValueError:
        logger.warning("Invalid CONTINUATION_TTL_SECONDS=%r, using default", raw)
        return DEFAULT_TTL_SECONDS


def _default_backend() -> KeyValueStore:
    backend = os.getenv("CONTINUATION_BACKEND", "file").lower()
    if backend == "memory":
        return InMemoryKeyValueStore()
    configured = os.getenv("CONTINUATION_STORAGE_DIR")
    base_dir = Path(configured).expanduser() if configured else DEFAULT_CONTINUATION_DIR
    return EncryptedFileKeyValueStore(base_dir)


# Global singleton
continuation_store = ContinuationStore(_default_backend(), ttl_seconds=_ttl_from_env())
