"""Telemetry helpers and metrics."""

from .metrics import (
    ERROR_COUNTER,
    LULLABY_OUTCOMES,
    POLL_CHECKS,
    REQUEST_COUNT,
    REQUEST_LATENCY,
    VOICE_CLONE_OUTCOMES,
    observe_request,
    record_lullaby_outcome,
    record_poll_check,
    record_voice_clone,
)

__all__ = [
    "ERROR_COUNTER",
    "LULLABY_OUTCOMES",
    "POLL_CHECKS",
    "REQUEST_COUNT",
    "REQUEST_LATENCY",
    "VOICE_CLONE_OUTCOMES",
    "observe_request",
    "record_lullaby_outcome",
    "record_poll_check",
    "record_voice_clone",
]
