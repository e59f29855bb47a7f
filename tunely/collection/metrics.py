"""Prometheus metrics for company data collection."""

from __future__ import annotations

from prometheus_client import Counter, Histogram

COLLECTION_RUNS_TOTAL = Counter(
    "tunely_collection_runs_total",
    "Collection runs grouped by outcome",
    ["outcome"],
)

COLLECTION_ROWS_TOTAL = Counter(
    "tunely_collection_rows_total",
    "Rows written by collection runs grouped by kind",
    ["kind"],
)

COLLECTION_LATENCY_SECONDS = Histogram(
    "tunely_collection_latency_seconds",
    "Wall-clock duration of a collection run",
)
