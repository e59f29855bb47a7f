"""Prometheus metrics for the finance portal scraper."""

from __future__ import annotations

from prometheus_client import Counter, Histogram

NAVER_REQUEST_LATENCY_SECONDS = Histogram(
    "tunely_naver_request_latency_seconds",
    "Latency of finance portal page requests",
    ["page"],
)

NAVER_ERRORS_TOTAL = Counter(
    "tunely_naver_errors_total",
    "Finance portal request failures grouped by page",
    ["page"],
)

NAVER_DROPPED_ROWS_TOTAL = Counter(
    "tunely_naver_dropped_rows_total",
    "Daily price rows skipped because they were not data rows",
)
