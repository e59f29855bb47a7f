"""Prometheus metrics for the Open DART client."""

from __future__ import annotations

from prometheus_client import Counter, Histogram

DART_REQUEST_LATENCY_SECONDS = Histogram(
    "tunely_dart_request_latency_seconds",
    "Latency of Open DART API requests",
    ["endpoint"],
)

DART_ERRORS_TOTAL = Counter(
    "tunely_dart_errors_total",
    "Open DART transport failures grouped by endpoint",
    ["endpoint"],
)

DART_EMPTY_RESPONSES_TOTAL = Counter(
    "tunely_dart_empty_responses_total",
    "Open DART responses with a non-success status",
    ["endpoint", "status"],
)
