"""
Prometheus metrics for the DTE contingency service.
Focus on delivery reliability metrics and Golden Signals.
"""

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)

# Create a custom registry for our metrics
metrics_registry = CollectorRegistry()

# ====== BUSINESS METRICS ======

contingency_operations_total = Counter(
    "contingency_operations_total",
    "Total contingency outbox operations",
    ["operation_type", "status"],  # enqueue, submit, remove, cleanup + outcome
    registry=metrics_registry,
)

contingency_pending_gauge = Gauge(
    "contingency_pending_requests",
    "Requests waiting in the contingency outbox after the last sweep",
    registry=metrics_registry,
)

status_polls_total = Counter(
    "status_polls_total",
    "Status queries issued to the tax authority",
    ["result"],  # terminal, processing, error, skipped
    registry=metrics_registry,
)

tracking_outcomes_total = Counter(
    "tracking_outcomes_total",
    "How tracked documents left the tracked set",
    ["outcome"],  # completed, failed, timed_out, stopped
    registry=metrics_registry,
)

tracked_documents_gauge = Gauge(
    "tracked_documents_current",
    "Number of documents currently being polled",
    registry=metrics_registry,
)

# ====== GOLDEN SIGNALS ======

http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status_code"],
    registry=metrics_registry,
)

http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration",
    ["method", "endpoint"],
    buckets=[0.1, 0.5, 1.0, 2.5, 5.0, 10.0],
    registry=metrics_registry,
)

authority_call_duration_seconds = Histogram(
    "authority_call_duration_seconds",
    "Duration of calls to the tax authority API",
    ["operation"],  # submit, get_status, health_check
    buckets=[0.25, 0.5, 1.0, 2.5, 5.0, 15.0, 30.0],
    registry=metrics_registry,
)

# ====== BUSINESS METRIC FUNCTIONS ======


def record_contingency_operation(operation_type: str, status: str) -> None:
    """Record contingency operation (enqueue, submit, remove, cleanup)."""
    contingency_operations_total.labels(
        operation_type=operation_type, status=status
    ).inc()


def set_contingency_pending(count: int) -> None:
    contingency_pending_gauge.set(count)


def record_status_poll(result: str) -> None:
    status_polls_total.labels(result=result).inc()


def record_tracking_outcome(outcome: str) -> None:
    tracking_outcomes_total.labels(outcome=outcome).inc()


def set_tracked_documents(count: int) -> None:
    tracked_documents_gauge.set(count)


def record_authority_call(operation: str, duration: float) -> None:
    authority_call_duration_seconds.labels(operation=operation).observe(duration)


# ====== GOLDEN SIGNALS FUNCTIONS ======


def record_http_request(
    method: str, endpoint: str, status_code: int, duration: float
) -> None:
    """Record HTTP request metrics with golden signals."""
    http_requests_total.labels(
        method=method, endpoint=endpoint, status_code=str(status_code)
    ).inc()
    http_request_duration_seconds.labels(method=method, endpoint=endpoint).observe(
        duration
    )


def get_metrics_endpoint() -> tuple[bytes, str]:
    """Get metrics for Prometheus scraping."""
    return generate_latest(metrics_registry), CONTENT_TYPE_LATEST
