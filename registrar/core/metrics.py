"""
Prometheus metrics collection for the registration API.

Provides metrics for monitoring:
- HTTP request counts and latency
- Registration outcomes by submission kind
- Schedule auto transitions
- Group bookkeeping failures (counter drift that was tolerated)

Usage:
    from registrar.core.metrics import (
        track_request_start, track_request_end,
        track_registration, track_group_sync_failure
    )
"""

import re
import time
from dataclasses import dataclass, field
from collections import defaultdict
import threading

UUID_PATTERN = re.compile(r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$")


@dataclass
class MetricBucket:
    """A single histogram bucket."""
    le: float  # Less than or equal
    count: int = 0


@dataclass
class Histogram:
    """Prometheus-style histogram."""
    name: str
    help_text: str
    buckets: list = field(default_factory=list)
    sum_value: float = 0.0
    count: int = 0

    def __post_init__(self):
        if not self.buckets:
            # Default buckets for HTTP request latency (in seconds)
            bucket_bounds = [0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0]
            self.buckets = [MetricBucket(le=b) for b in bucket_bounds]
            self.buckets.append(MetricBucket(le=float('inf')))

    def observe(self, value: float):
        """Record an observation."""
        self.sum_value += value
        self.count += 1
        for bucket in self.buckets:
            if value <= bucket.le:
                bucket.count += 1


@dataclass
class Counter:
    """Prometheus-style counter."""
    name: str
    help_text: str
    value: float = 0.0

    def inc(self, amount: float = 1.0):
        """Increment the counter."""
        self.value += amount


@dataclass
class Gauge:
    """Prometheus-style gauge."""
    name: str
    help_text: str
    value: float = 0.0

    def inc(self, amount: float = 1.0):
        self.value += amount

    def dec(self, amount: float = 1.0):
        self.value -= amount


class MetricsRegistry:
    """
    Central registry for all metrics.

    Thread-safe singleton pattern for collecting metrics across the application.
    """

    _instance = None
    _lock = threading.Lock()

    def __new__(cls):
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
                    cls._instance._initialize()
        return cls._instance

    def _initialize(self):
        """Initialize all metrics."""
        self._metrics_lock = threading.Lock()

        # HTTP metrics
        self.http_requests_total = defaultdict(
            lambda: Counter(
                name="http_requests_total",
                help_text="Total number of HTTP requests"
            )
        )
        self.http_request_duration = defaultdict(
            lambda: Histogram(
                name="http_request_duration_seconds",
                help_text="HTTP request duration in seconds"
            )
        )
        self.http_requests_in_flight = Gauge(
            name="http_requests_in_flight",
            help_text="Number of HTTP requests currently being processed"
        )

        # Business metrics
        self.registrations_total = defaultdict(
            lambda: Counter(
                name="registrar_registrations_total",
                help_text="Registration submissions by kind and outcome"
            )
        )
        self.schedule_transitions_total = defaultdict(
            lambda: Counter(
                name="registrar_schedule_transitions_total",
                help_text="Automatic schedule transitions persisted"
            )
        )
        self.group_sync_failures_total = defaultdict(
            lambda: Counter(
                name="registrar_group_sync_failures_total",
                help_text="Group bookkeeping updates that failed after a successful submission"
            )
        )

        # Error metrics
        self.errors_total = defaultdict(
            lambda: Counter(
                name="registrar_errors_total",
                help_text="Total errors by type"
            )
        )

    def reset(self):
        """Drop every collected sample."""
        with self._metrics_lock:
            self._initialize()

    def format_prometheus(self) -> str:
        """Format all metrics in Prometheus text format."""
        lines = []

        with self._metrics_lock:
            lines.append("# HELP http_requests_total Total number of HTTP requests")
            lines.append("# TYPE http_requests_total counter")
            for labels, counter in self.http_requests_total.items():
                method, status, path = labels
                lines.append(
                    f'http_requests_total{{method="{method}",status="{status}",path="{path}"}} {counter.value}'
                )

            lines.append("")
            lines.append("# HELP http_request_duration_seconds HTTP request duration in seconds")
            lines.append("# TYPE http_request_duration_seconds histogram")
            for labels, histogram in self.http_request_duration.items():
                method, path = labels
                for bucket in histogram.buckets:
                    le_str = "+Inf" if bucket.le == float('inf') else str(bucket.le)
                    lines.append(
                        f'http_request_duration_seconds_bucket{{method="{method}",path="{path}",le="{le_str}"}} {bucket.count}'
                    )
                lines.append(
                    f'http_request_duration_seconds_sum{{method="{method}",path="{path}"}} {histogram.sum_value}'
                )
                lines.append(
                    f'http_request_duration_seconds_count{{method="{method}",path="{path}"}} {histogram.count}'
                )

            lines.append("")
            lines.append("# HELP http_requests_in_flight Number of HTTP requests currently being processed")
            lines.append("# TYPE http_requests_in_flight gauge")
            lines.append(f"http_requests_in_flight {self.http_requests_in_flight.value}")

            lines.append("")
            lines.append("# HELP registrar_registrations_total Registration submissions by kind and outcome")
            lines.append("# TYPE registrar_registrations_total counter")
            for labels, counter in self.registrations_total.items():
                kind, outcome = labels
                lines.append(
                    f'registrar_registrations_total{{kind="{kind}",outcome="{outcome}"}} {counter.value}'
                )

            lines.append("")
            lines.append("# HELP registrar_schedule_transitions_total Automatic schedule transitions persisted")
            lines.append("# TYPE registrar_schedule_transitions_total counter")
            for labels, counter in self.schedule_transitions_total.items():
                transition, = labels
                lines.append(
                    f'registrar_schedule_transitions_total{{transition="{transition}"}} {counter.value}'
                )

            lines.append("")
            lines.append(
                "# HELP registrar_group_sync_failures_total "
                "Group bookkeeping updates that failed after a successful submission"
            )
            lines.append("# TYPE registrar_group_sync_failures_total counter")
            for labels, counter in self.group_sync_failures_total.items():
                reason, = labels
                lines.append(
                    f'registrar_group_sync_failures_total{{reason="{reason}"}} {counter.value}'
                )

            lines.append("")
            lines.append("# HELP registrar_errors_total Total errors by type")
            lines.append("# TYPE registrar_errors_total counter")
            for labels, counter in self.errors_total.items():
                error_type, = labels
                lines.append(f'registrar_errors_total{{type="{error_type}"}} {counter.value}')

        return "\n".join(lines)


# Global registry instance
_registry = MetricsRegistry()


def get_registry() -> MetricsRegistry:
    """Get the global metrics registry."""
    return _registry


def track_request_start():
    """Track start of HTTP request."""
    _registry.http_requests_in_flight.inc()
    return time.time()


def track_request_end(
    start_time: float,
    method: str,
    path: str,
    status_code: int
):
    """Track end of HTTP request."""
    duration = time.time() - start_time

    # Normalize path to avoid cardinality explosion
    normalized_path = _normalize_path(path)

    with _registry._metrics_lock:
        _registry.http_requests_in_flight.dec()
        _registry.http_requests_total[(method, str(status_code), normalized_path)].inc()
        _registry.http_request_duration[(method, normalized_path)].observe(duration)


def track_registration(kind: str, outcome: str):
    """Track a registration submission (kind: pre_registration|company)."""
    with _registry._metrics_lock:
        _registry.registrations_total[(kind, outcome)].inc()


def track_schedule_transition(transition: str):
    """Track a persisted auto_close / auto_open transition."""
    with _registry._metrics_lock:
        _registry.schedule_transitions_total[(transition,)].inc()


def track_group_sync_failure(reason: str):
    """Track a swallowed group bookkeeping failure."""
    with _registry._metrics_lock:
        _registry.group_sync_failures_total[(reason,)].inc()


def track_error(error_type: str):
    """Track error by type."""
    with _registry._metrics_lock:
        _registry.errors_total[(error_type,)].inc()


def _normalize_path(path: str) -> str:
    """
    Normalize path to prevent high cardinality.

    Replaces numeric IDs and UUIDs with :id placeholder.
    Examples:
        /api/v1/groups/8d0c...-... -> /api/v1/groups/:id
        /api/v1/pre-register/by-code/1234 -> /api/v1/pre-register/by-code/:id
    """
    parts = path.split("/")
    normalized = []
    for part in parts:
        if part.isdigit() or UUID_PATTERN.match(part):
            normalized.append(":id")
        else:
            normalized.append(part)
    return "/".join(normalized)
