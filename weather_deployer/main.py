"""FastAPI application exposing the request dispatcher over HTTP."""

import time
import uuid

from fastapi import FastAPI, Request, Response
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest
from structlog.contextvars import bind_contextvars, clear_contextvars

from weather_deployer.health.health_check import (
    is_geocoding_api_available,
    is_weather_api_available,
)
from weather_deployer.logging_config import logger
from weather_deployer.mcp.handler import default_handler
from weather_deployer.models.health import Dependencies, HealthResponse
from weather_deployer.models.protocol import Response as MCPResponse

app = FastAPI(title="weather-deployer")
handler = default_handler()

REQUEST_COUNT = Counter(
    "http_requests_total", "Total HTTP requests", ["method", "path", "status_code"]
)
REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds", "HTTP request duration in seconds", ["path"]
)
MCP_REQUEST_COUNT = Counter(
    "mcp_requests_total", "Dispatched protocol requests", ["result"]
)


@app.middleware("http")
async def request_logging(request: Request, call_next):
    """Log request details, attach a request ID, and record metrics.

    Args:
        request: Incoming HTTP request.
        call_next: FastAPI handler for the next middleware/app.

    Returns:
        The response produced by the downstream handler.
    """
    request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
    bind_contextvars(request_id=request_id)
    start = time.perf_counter()
    response = None
    try:
        response = await call_next(request)
        response.headers["x-request-id"] = request_id
        return response
    finally:
        duration_s = time.perf_counter() - start
        status_code = getattr(response, "status_code", 500)
        logger.info(
            "HTTP_REQUEST",
            method=request.method,
            path=request.url.path,
            status_code=status_code,
            duration_ms=round(duration_s * 1000, 2),
        )
        REQUEST_COUNT.labels(
            method=request.method, path=request.url.path, status_code=status_code
        ).inc()
        REQUEST_LATENCY.labels(path=request.url.path).observe(duration_s)
        clear_contextvars()


@app.post("/mcp")
async def dispatch(request: Request) -> MCPResponse:
    """Handle one protocol request sent as the body.

    Errors are reported inside the envelope, so the status is always 200.
    """
    body = await request.body()
    response = handler.handle_line(body)
    MCP_REQUEST_COUNT.labels(result=response.type).inc()
    return response


@app.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """Report API health and upstream availability."""
    return HealthResponse(
        status="ok",
        dependencies=Dependencies(
            geocoding_api=await is_geocoding_api_available(),
            weather_api=await is_weather_api_available(),
        ),
    )


@app.get("/metrics")
async def metrics():
    """Expose Prometheus metrics for scraping."""
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)
