"""
Prometheus metrics endpoint.

Exposes request and login-flow metrics for monitoring.
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
# Login Flow Metrics
# ============================================

logins_started = Counter(
    'auth_login_started_total',
    'Total redirects to a provider authorization endpoint',
    ['provider']
)

logins_completed = Counter(
    'auth_login_completed_total',
    'Total sessions established after a provider callback',
    ['provider']
)

logins_failed = Counter(
    'auth_login_failed_total',
    'Total failed provider callbacks',
    ['provider', 'reason']
)

logouts = Counter(
    'auth_logout_total',
    'Total logout requests'
)


# ============================================
# Metrics Helper Functions
# ============================================

def track_request(method: str, endpoint: str, status: int, duration_seconds: float):
    """
    Record HTTP request metrics.

    Call this after each request.
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


def track_login_started(provider: str):
    """Record a redirect to the provider."""
    logins_started.labels(provider=provider).inc()


def track_login_completed(provider: str):
    """Record a session established from a callback."""
    logins_completed.labels(provider=provider).inc()


def track_login_failed(provider: str, reason: str):
    """Record a failed callback."""
    logins_failed.labels(provider=provider, reason=reason).inc()


def track_logout():
    logouts.inc()


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
