"""Operation telemetry.

Counts, durations and outcomes per operation, written to stderr as JSON
lines (STDIO-safe) and kept as in-process counters readable through
snapshot().

Metric names are "<base>.<suffix>", where base is the operation's metric
(e.g. gmail.sendMail) and suffix one of count, success, duration,
retry_prompted, validation_error or error.
"""

from __future__ import annotations

import json
import logging
import os
import sys
import threading
import time
from collections import Counter
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

NOT_AVAILABLE = "NA"


class TelemetryEntry(BaseModel):
    """Model for a telemetry entry."""

    timestamp: str = Field(
        default_factory=lambda: datetime.now(UTC).isoformat(),
        description="ISO format timestamp",
    )
    metric: str = Field(..., description="Metric name, e.g. gmail.sendMail.success")
    value: float = Field(default=1, description="Counter increment or duration")
    tags: dict[str, str] = Field(default_factory=dict, description="Metric tags")


def safe_tag_map(**tags: Any) -> dict[str, str]:
    """Stringify tag values, replacing None with "NA"."""
    return {key: NOT_AVAILABLE if value is None else str(value) for key, value in tags.items()}


def elapsed_ms(start_time: float) -> float:
    """Milliseconds since a time.perf_counter() reading."""
    return (time.perf_counter() - start_time) * 1000


class Telemetry:
    """Telemetry recorder that writes to stderr and counts in-process."""

    def __init__(self, enabled: bool = True) -> None:
        """Initialize the recorder.

        Args:
            enabled: Whether entries are written to stderr. Counters are
                always kept.
        """
        self._enabled = enabled
        self._counters: Counter[str] = Counter()
        self._lock = threading.Lock()
        logger.info("Telemetry initialized (enabled=%s)", enabled)

    def emit(self, entry: TelemetryEntry) -> None:
        """Count an entry and write it to stderr."""
        with self._lock:
            self._counters[entry.metric] += 1

        if not self._enabled:
            return

        try:
            line = json.dumps({"telemetry": entry.model_dump()})
            print(line, file=sys.stderr, flush=True)
        except Exception as e:
            logger.error("Failed to write telemetry: %s", e)

    def increment_count(self, base: str, tags: dict[str, str] | None = None) -> None:
        self.emit(TelemetryEntry(metric=f"{base}.count", tags=tags or {}))

    def record_success(
        self, base: str, start_time: float, tags: dict[str, str] | None = None
    ) -> None:
        """Record a successful execution and its duration."""
        self.emit(TelemetryEntry(metric=f"{base}.success", tags=tags or {}))
        self._record_duration(base, start_time, "success", tags)

    def record_retry_prompted(
        self, base: str, start_time: float, tags: dict[str, str] | None = None
    ) -> None:
        """Record that the caller was offered the retry flow."""
        self.emit(TelemetryEntry(metric=f"{base}.retry_prompted", tags=tags or {}))
        self._record_duration(base, start_time, "retry_prompted", tags)

    def record_validation_error(
        self,
        base: str,
        start_time: float,
        error_message: str,
        tags: dict[str, str] | None = None,
    ) -> None:
        """Record a rejected input or a business miss."""
        merged = {**(tags or {}), "error_type": "validation", "error_message": error_message}
        self.emit(TelemetryEntry(metric=f"{base}.validation_error", tags=merged))
        self._record_duration(base, start_time, "validation_error", tags)

    def record_error(
        self,
        base: str,
        start_time: float,
        error: BaseException,
        tags: dict[str, str] | None = None,
    ) -> None:
        """Record an unexpected failure."""
        merged = {
            **(tags or {}),
            "error_type": "exception",
            "error_message": str(error),
            "error_class": type(error).__name__,
        }
        self.emit(TelemetryEntry(metric=f"{base}.error", tags=merged))
        self._record_duration(base, start_time, "error", tags)

    def _record_duration(
        self,
        base: str,
        start_time: float,
        status: str,
        tags: dict[str, str] | None,
    ) -> None:
        self.emit(
            TelemetryEntry(
                metric=f"{base}.duration",
                value=elapsed_ms(start_time),
                tags={**(tags or {}), "status": status},
            )
        )

    def snapshot(self) -> dict[str, int]:
        """Copy of the in-process counters, keyed by metric name."""
        with self._lock:
            return dict(self._counters)

    def reset(self) -> None:
        with self._lock:
            self._counters.clear()


def _enabled_from_env() -> bool:
    return os.getenv("TELEMETRY_ENABLED", "true").lower() not in ("0", "false", "no")


# Global singleton
telemetry = Telemetry(enabled=_enabled_from_env())
