"""
Prometheus metrics endpoint.

Exposes system metrics for monitoring.
"""
from fastapi import APIRouter, Response
from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST

router = APIRouter()

# ============================================
# HTTP Request Metrics
# ============================================

http_requests_total = Counter(
    'http_requests_total',
    'Total HTTP requests',
    ['method', 'endpoint', 'status']
)

http_request_duration = Histogram(
    'http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'endpoint'],
    buckets=[0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0]
)

# ============================================
# Business Metrics - Submissions
# ============================================

submissions_received = Counter(
    'submissions_received_total',
    'Total public form submissions accepted',
    ['form_id']
)

# ============================================
# Rate Limiting Metrics
# ============================================

rate_limit_exceeded = Counter(
    'rate_limit_exceeded_total',
    'Total public submissions blocked by rate limiting'
)

# ============================================
# Webhook Metrics
# ============================================

webhook_attempts = Counter(
    'webhook_attempts_total',
    'Total webhook delivery attempts',
    ['outcome']
)

webhook_dispatches = Counter(
    'webhook_dispatches_total',
    'Total webhook dispatches by final status',
    ['status']
)


# ============================================
# Metrics Helper Functions
# ============================================

def track_request(method: str, endpoint: str, status: int, duration_seconds: float):
    """
    Record HTTP request metrics.

    Called by LoggingMiddleware after each request.
    """
    http_requests_total.labels(
        method=method,
        endpoint=endpoint,
        status=status
    ).inc()

    http_request_duration.labels(
        method=method,
        endpoint=endpoint
    ).observe(duration_seconds)


def track_submission_received(form_id: str):
    """Record a public submission being stored."""
    submissions_received.labels(form_id=form_id).inc()


def track_rate_limit_exceeded():
    """Record a rate limit block."""
    rate_limit_exceeded.inc()


def track_webhook_attempt(outcome: str):
    """Record one delivery attempt (success or failure)."""
    webhook_attempts.labels(outcome=outcome).inc()


def track_webhook_dispatch(status: str):
    """Record the final status of a dispatch (sent, failed, skipped, error)."""
    webhook_dispatches.labels(status=status).inc()


# ============================================
# Prometheus Endpoint
# ============================================

@router.get("/metrics")
async def metrics():
    """
    Prometheus metrics endpoint.

    Returns all registered metrics in Prometheus format.
    """
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)
