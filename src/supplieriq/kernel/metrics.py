"""
Prometheus metrics for SupplierIQ.

Covers the notification channel and the suggestion pipeline.
"""

from prometheus_client import Counter, Histogram, start_http_server

# ============================================================================
# Notification Channel Metrics
# ============================================================================

events_published_total = Counter(
    "supplieriq_events_published_total",
    "Total number of events published on the notification channel",
    ["event_type"],
)

event_handler_failures_total = Counter(
    "supplieriq_event_handler_failures_total",
    "Total number of event handlers that raised (sync or background)",
    ["event_type"],
)

# ============================================================================
# Suggestion Pipeline Metrics
# ============================================================================

pipeline_runs_total = Counter(
    "supplieriq_pipeline_runs_total",
    "Total number of suggestion pipeline runs",
    ["outcome"],  # outcome: succeeded, not_found, failed
)

pipeline_duration_seconds = Histogram(
    "supplieriq_pipeline_duration_seconds",
    "Duration of a suggestion pipeline run in seconds",
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0),
)

candidate_set_size = Histogram(
    "supplieriq_candidate_set_size",
    "Number of active category-matching suppliers per request",
    buckets=(0, 1, 2, 3, 5, 10, 20, 50, 100),
)

suggestions_generated_total = Counter(
    "supplieriq_suggestions_generated_total",
    "Total number of suggestion records persisted",
)


def start_metrics_server(port: int = 9090) -> None:
    """Start Prometheus metrics HTTP server on the given port"""
    start_http_server(port)
