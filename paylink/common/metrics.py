"""Prometheus metric definitions for the payment-link service."""

from prometheus_client import Counter, Histogram, generate_latest
from starlette.responses import Response


payment_link_requests_total = Counter(
    "payment_link_requests_total",
    "Total payment link requests",
    ["provider", "payment_type"],
)
payment_link_success_total = Counter(
    "payment_link_success_total",
    "Total payment links created",
    ["provider"],
)
payment_link_failure_total = Counter(
    "payment_link_failure_total",
    "Total failed payment link requests by error kind",
    ["provider", "kind"],
)
provider_calls_total = Counter(
    "provider_calls_total",
    "Outbound calls to payment processors",
    ["provider", "path", "outcome"],
)
provider_call_duration_seconds = Histogram(
    "provider_call_duration_seconds",
    "Outbound processor call duration seconds",
    ["provider"],
)
http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["service", "route", "method", "status_code"],
)
http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration seconds",
    ["service", "route", "method"],
)


def metrics_response() -> Response:
    """Expose all registered Prometheus metrics in text format."""

    return Response(content=generate_latest(), media_type="text/plain")
