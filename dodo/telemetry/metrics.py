"""Prometheus metrics definitions and helpers."""

from __future__ import annotations

from prometheus_client import Counter, Histogram

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests processed",
    ("method", "route", "status"),
)

REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ("method", "route"),
    buckets=(
        0.005,
        0.01,
        0.025,
        0.05,
        0.1,
        0.25,
        0.5,
        1.0,
        2.5,
        5.0,
        10.0,
    ),
)

ERROR_COUNTER = Counter(
    "dodo_internal_errors_total",
    "Number of requests ending in internal server error responses",
    ("method", "route"),
)

LULLABY_OUTCOMES = Counter(
    "dodo_lullaby_generations_total",
    "Finished lullaby generations by outcome and audio source",
    ("outcome", "source"),
)

VOICE_CLONE_OUTCOMES = Counter(
    "dodo_voice_clones_total",
    "Voice profile onboarding results",
    ("outcome",),
)

POLL_CHECKS = Counter(
    "dodo_provider_poll_checks_total",
    "Provider job status checks by observed result",
    ("result",),
)


def observe_request(
    method: str,
    route: str,
    status_code: int,
    duration_seconds: float,
) -> None:
    """Record metrics for a completed HTTP request."""

    safe_route = route or "unknown"
    safe_method = method or "UNKNOWN"
    status_label = str(status_code)
    observed_duration = duration_seconds if duration_seconds >= 0 else 0

    REQUEST_COUNT.labels(
        method=safe_method,
        route=safe_route,
        status=status_label,
    ).inc()
    REQUEST_LATENCY.labels(
        method=safe_method,
        route=safe_route,
    ).observe(observed_duration)

    if status_code >= 500:
        ERROR_COUNTER.labels(
            method=safe_method,
            route=safe_route,
        ).inc()


def record_lullaby_outcome(outcome: str, source: str = "none") -> None:
    """Count a lullaby reaching ``ready`` or ``failed``."""

    LULLABY_OUTCOMES.labels(outcome=outcome, source=source).inc()


def record_voice_clone(outcome: str) -> None:
    VOICE_CLONE_OUTCOMES.labels(outcome=outcome).inc()


def record_poll_check(result: str) -> None:
    POLL_CHECKS.labels(result=result).inc()
