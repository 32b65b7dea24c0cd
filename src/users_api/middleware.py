"""Request/response logging middleware with Prometheus request metrics."""

import json
import logging
import time
import uuid
from typing import Any

from fastapi import FastAPI, Request, Response
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest

REQUEST_ID_HEADER = "X-Request-ID"
UNMATCHED_ENDPOINT = "<unmatched>"
MASK = "********"
SENSITIVE_FIELDS = ("password",)

# Prometheus counter to track API requests by method, endpoint and status code
REQUEST_COUNTER = Counter(
    "api_requests_total",
    "Total API requests",
    ["method", "endpoint", "status"],
)
REQUEST_LATENCY = Histogram(
    "api_request_duration_seconds",
    "API request latency in seconds",
    ["method", "endpoint"],
)


def mask_sensitive(body: Any) -> Any:
    """Return a copy of a JSON object body with sensitive values masked."""
    if not isinstance(body, dict):
        return body
    masked = dict(body)
    for field in SENSITIVE_FIELDS:
        if masked.get(field):
            masked[field] = MASK
    return masked


def endpoint_label(request: Request) -> str:
    """Route template the request matched, so ids do not become label values."""
    route = request.scope.get("route")
    return getattr(route, "path", UNMATCHED_ENDPOINT)


def _status_level(status_code: int) -> int:
    if status_code >= 500:
        return logging.ERROR
    if status_code >= 400:
        return logging.WARNING
    return logging.INFO


async def _log_body(request: Request, request_id: str, logger: logging.Logger) -> None:
    raw = await request.body()
    if not raw:
        return
    try:
        body = json.loads(raw)
    except ValueError:
        return
    if isinstance(body, dict) and body:
        logger.info("[REQ-BODY] [%s] %s", request_id, json.dumps(mask_sensitive(body)))


def register_request_logging(app: FastAPI, logger: logging.Logger) -> None:
    """Log every request through ``logger`` and serve the metrics at ``/metrics``."""

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """Log incoming requests and their outcomes while updating metrics."""
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id
        method = request.method
        path = request.url.path
        client_ip = request.client.host if request.client else "-"

        logger.info("[REQ] [%s] %s %s - IP: %s", request_id, method, path, client_ip)
        if method != "GET":
            await _log_body(request, request_id, logger)

        start = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            REQUEST_COUNTER.labels(
                method=method, endpoint=endpoint_label(request), status="500"
            ).inc()
            logger.exception("[ERROR] [%s] %s %s", request_id, method, path)
            raise

        elapsed = time.perf_counter() - start
        endpoint = endpoint_label(request)
        REQUEST_COUNTER.labels(
            method=method, endpoint=endpoint, status=str(response.status_code)
        ).inc()
        REQUEST_LATENCY.labels(method=method, endpoint=endpoint).observe(elapsed)
        logger.log(
            _status_level(response.status_code),
            "[RES] [%s] %s %s - Status: %s - %dms",
            request_id,
            method,
            path,
            response.status_code,
            elapsed * 1000,
        )
        response.headers[REQUEST_ID_HEADER] = request_id
        return response

    @app.get("/metrics", include_in_schema=False)
    def metrics():
        """Expose the request metrics in the Prometheus text format."""
        return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)
