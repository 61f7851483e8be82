"""
Middleware modules for the registration API.

Provides request processing middleware for:
- Correlation ID tracking for log and problem-detail tracing
- Prometheus metrics collection
"""

from .correlation import CorrelationIdMiddleware, CorrelationLogFilter, correlation_id_ctx, request_id_ctx
from .metrics import MetricsMiddleware

__all__ = [
    "CorrelationIdMiddleware",
    "CorrelationLogFilter",
    "correlation_id_ctx",
    "request_id_ctx",
    "MetricsMiddleware",
]
