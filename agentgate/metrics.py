from __future__ import annotations

import time

from prometheus_client import Counter, Histogram, generate_latest
from starlette.responses import Response


REQUEST_COUNT = Counter(
    "agentgate_requests_total",
    "Total HTTP requests",
    ["path", "method", "status"],
)
REQUEST_LATENCY = Histogram(
    "agentgate_request_latency_seconds",
    "HTTP request latency in seconds",
    ["path", "method"],
)
UPSTREAM_CALLS = Counter(
    "agentgate_upstream_calls_total",
    "Outbound calls to providers, the backend and proxied URLs",
    ["kind", "outcome"],
)
UPSTREAM_LATENCY = Histogram(
    "agentgate_upstream_latency_seconds",
    "Outbound call latency in seconds",
    ["kind"],
)


def metrics_response() -> Response:
    data = generate_latest()
    return Response(content=data, media_type="text/plain; version=0.0.4")


def observe_upstream(kind: str, *, ok: bool, duration_ms: int) -> None:
    UPSTREAM_CALLS.labels(kind, "ok" if ok else "error").inc()
    UPSTREAM_LATENCY.labels(kind).observe(max(duration_ms, 0) / 1000)


class RequestTimer:
    def __init__(self, method: str) -> None:
        self._method = method
        self._start = time.time()

    def observe(self, status_code: int, *, path: str) -> None:
        REQUEST_COUNT.labels(path, self._method, str(status_code)).inc()
        REQUEST_LATENCY.labels(path, self._method).observe(time.time() - self._start)
