"""
Metrics Collection
Prometheus metrics for generation performance tracking
"""

import time
from contextlib import contextmanager
from typing import Callable, Optional

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    Summary,
    REGISTRY,
    generate_latest,
)


class MetricsCollector:
    """
    Collects and exposes Prometheus metrics for the generation service.
    """

    def __init__(self, registry: Optional[CollectorRegistry] = None) -> None:
        self.registry = registry or REGISTRY

        # Generation metrics
        self.generation_requests_total = Counter(
            "appforge_generation_requests_total",
            "Total number of generation requests",
            ["status"],
            registry=self.registry,
        )
        self.generation_duration = Histogram(
            "appforge_generation_duration_seconds",
            "End-to-end generation duration in seconds",
            buckets=[0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0, 120.0, 300.0],
            registry=self.registry,
        )
        self.target_outcomes_total = Counter(
            "appforge_target_outcomes_total",
            "Per-target emission outcomes",
            ["target", "status"],
            registry=self.registry,
        )
        self.fallbacks_total = Counter(
            "appforge_fallbacks_total",
            "Backend output replaced by a default because it could not be parsed",
            ["stage"],
            registry=self.registry,
        )

        # Backend metrics
        self.backend_calls_total = Counter(
            "appforge_backend_calls_total",
            "Total number of backend API calls",
            ["backend", "status"],
            registry=self.registry,
        )
        self.backend_duration = Histogram(
            "appforge_backend_duration_seconds",
            "Backend API call duration in seconds",
            ["backend"],
            buckets=[0.1, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0],
            registry=self.registry,
        )
        self.backend_tokens = Summary(
            "appforge_backend_tokens",
            "Number of tokens in backend call",
            ["backend", "type"],
            registry=self.registry,
        )

        # Error metrics
        self.errors_total = Counter(
            "appforge_errors_total",
            "Total number of errors",
            ["error_type", "component"],
            registry=self.registry,
        )

        # System metrics
        self.uptime = Gauge(
            "appforge_uptime_seconds",
            "Service uptime in seconds",
            registry=self.registry,
        )
        self.start_time = time.time()

    def record_generation(self, status: str, duration: float) -> None:
        """Record a generation request."""
        self.generation_requests_total.labels(status=status).inc()
        self.generation_duration.observe(duration)

    def record_target(self, target: str, status: str) -> None:
        self.target_outcomes_total.labels(target=target, status=status).inc()

    def record_fallback(self, stage: str) -> None:
        self.fallbacks_total.labels(stage=stage).inc()

    def record_backend_call(self, backend: str, status: str, duration: float) -> None:
        """Record a backend API call."""
        self.backend_calls_total.labels(backend=backend, status=status).inc()
        self.backend_duration.labels(backend=backend).observe(duration)

    def record_backend_tokens(self, backend: str, input_tokens: int, output_tokens: int) -> None:
        """Record backend token counts."""
        self.backend_tokens.labels(backend=backend, type="input").observe(input_tokens)
        self.backend_tokens.labels(backend=backend, type="output").observe(output_tokens)

    def record_error(self, error_type: str, component: str) -> None:
        """Record an error."""
        self.errors_total.labels(error_type=error_type, component=component).inc()

    def update_uptime(self) -> None:
        self.uptime.set(time.time() - self.start_time)

    @contextmanager
    def measure_duration(self, callback: Callable[[float], None]):
        """Context manager to measure operation duration."""
        start = time.time()
        try:
            yield
        finally:
            callback(time.time() - start)

    def get_metrics(self) -> bytes:
        """Get metrics in Prometheus format."""
        self.update_uptime()
        return generate_latest(self.registry)


# Global metrics collector instance
metrics_collector = MetricsCollector()
