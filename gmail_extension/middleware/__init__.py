"""Middleware components for the Gmail extension."""

from gmail_extension.middleware.telemetry import (
    Telemetry,
    TelemetryEntry,
    safe_tag_map,
    telemetry,
)

__all__ = [
    "Telemetry",
    "TelemetryEntry",
    "safe_tag_map",
    "telemetry",
]
