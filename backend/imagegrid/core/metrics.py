from prometheus_client import (
    Counter,
    Histogram,
    generate_latest,
    CONTENT_TYPE_LATEST,
)

# ---------------------------------------------------------------------------
# HTTP request metrics
# ---------------------------------------------------------------------------
http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests to the API",
    ["method", "path", "status"],
)
http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "Duration of HTTP requests in seconds",
    ["method", "path"],
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1, 2.5, 5, 10],
)

# ---------------------------------------------------------------------------
# Search gateway
# ---------------------------------------------------------------------------
search_requests_total = Counter(
    "search_requests_total",
    "Total search pass-through requests by outcome",
    ["status"],
)

# ---------------------------------------------------------------------------
# Image proxy
# ---------------------------------------------------------------------------
image_proxy_requests_total = Counter(
    "image_proxy_requests_total",
    "Total image proxy requests by outcome",
    ["outcome"],
)
image_proxy_upstream_seconds = Histogram(
    "image_proxy_upstream_seconds",
    "Time until the proxied upstream answered with headers",
    buckets=[0.1, 0.25, 0.5, 1, 2, 5, 10],
)


def get_metrics() -> bytes:
    """Generate Prometheus metrics output."""
    return generate_latest()


def get_metrics_content_type() -> str:
    return CONTENT_TYPE_LATEST
