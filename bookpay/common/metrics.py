"""Prometheus metric definitions for the payment relay."""

from prometheus_client import Counter, Histogram, generate_latest
from starlette.responses import Response


payment_initiations_total = Counter(
    "payment_initiations_total",
    "Payment initiation attempts by outcome",
    ["service", "outcome"],
)
gateway_request_duration_seconds = Histogram(
    "gateway_request_duration_seconds",
    "Outbound initiate-link call duration seconds",
    ["service"],
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
