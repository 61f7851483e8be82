"""
Metrics collection middleware.

Automatically tracks HTTP request metrics for Prometheus.
"""

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from typing import Callable

from registrar.core.metrics import track_request_start, track_request_end


class MetricsMiddleware(BaseHTTPMiddleware):
    """Counts requests and records their latency per normalized path."""

    # Paths to exclude from metrics to avoid noise
    EXCLUDED_PATHS = {
        "/health",
        "/metrics",
        "/favicon.ico",
    }

    async def dispatch(self, request: Request, call_next: Callable[[Request], Response]) -> Response:
        path = request.url.path
        if path in self.EXCLUDED_PATHS:
            return await call_next(request)

        start_time = track_request_start()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
        finally:
            track_request_end(start_time=start_time, method=request.method, path=path, status_code=status_code)

        return response
