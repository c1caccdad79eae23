"""
Metrics instrumentation for observability.
Exposes Prometheus-compatible metrics at /metrics endpoint.
"""

from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from fastapi import Response

# Review submission metrics
review_submissions = Counter(
    'review_submissions_total',
    'Total review submission attempts',
    ['outcome']  # created, or the rejection kind in lower case
)

review_submission_latency = Histogram(
    'review_submission_latency_seconds',
    'Review submission latency',
    buckets=[0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0]
)

# Eligibility metrics
eligibility_checks = Counter(
    'review_eligibility_checks_total',
    'Review eligibility evaluations',
    ['result']  # eligible, or the rejection kind in lower case
)

booking_anomalies = Counter(
    'duplicate_confirmed_bookings_total',
    'Eligibility checks that found more than one confirmed booking for a pair'
)

# Store metrics
store_unavailable = Counter(
    'review_store_unavailable_total',
    'Store operations that failed with a transient fault',
    ['operation']
)

# Cache metrics
rating_cache_operations = Counter(
    'rating_cache_operations_total',
    'Organizer rating cache operations',
    ['operation', 'result']  # get/set/invalidate, hit/miss/ok/error
)


def metrics_endpoint() -> Response:
    """Prometheus metrics endpoint."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


# Convenience functions for instrumentation
def record_submission(outcome: str):
    """Record review submission. Outcome: created, already_reviewed, ..."""
    review_submissions.labels(outcome=outcome).inc()

def record_eligibility(result: str):
    """Record eligibility decision."""
    eligibility_checks.labels(result=result).inc()

def record_store_unavailable(operation: str):
    store_unavailable.labels(operation=operation).inc()

def record_cache_operation(operation: str, result: str):
    """Record rating cache operation."""
    rating_cache_operations.labels(operation=operation, result=result).inc()
