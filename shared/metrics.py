"""
Shared metrics configuration for the Shipping Relay.
"""

from typing import Dict, Any, Optional
from prometheus_client import Counter, Histogram, Info, CollectorRegistry, generate_latest


class MetricsCollector:
    """Centralized metrics collector for services."""

    def __init__(self, service_name: str, registry: Optional[CollectorRegistry] = None):
        self.service_name = service_name
        # Each collector owns its registry so several apps can coexist in one process
        self.registry = registry if registry is not None else CollectorRegistry()
        self._metrics: Dict[str, Any] = {}
        self._setup_metrics()

    def _setup_metrics(self):
        """Set up common metrics for the service."""

        self._metrics["service_info"] = Info(
            "service_info",
            "Service information",
            registry=self.registry
        )
        self._metrics["service_info"].info({
            "service": self.service_name,
            "version": "1.0.0"
        })

        # HTTP metrics
        self._metrics["http_requests_total"] = Counter(
            "http_requests_total",
            "Total HTTP requests",
            ["method", "endpoint", "status_code"],
            registry=self.registry
        )

        self._metrics["http_request_duration_seconds"] = Histogram(
            "http_request_duration_seconds",
            "HTTP request duration in seconds",
            ["method", "endpoint"],
            registry=self.registry
        )

        self._metrics["health_check_total"] = Counter(
            "health_check_total",
            "Total health check requests",
            ["status"],
            registry=self.registry
        )

        self._metrics["errors_total"] = Counter(
            "errors_total",
            "Total errors",
            ["error_type", "service"],
            registry=self.registry
        )

        self._setup_relay_metrics()

    def _setup_relay_metrics(self):
        """Set up cache, outbound and webhook metrics."""
        self._metrics["cache_lookups_total"] = Counter(
            "cache_lookups_total",
            "Total cache lookups",
            ["cache_type", "result"],
            registry=self.registry
        )

        self._metrics["outbound_requests_total"] = Counter(
            "outbound_requests_total",
            "Total outbound HTTP calls",
            ["target", "outcome"],
            registry=self.registry
        )

        self._metrics["outbound_request_duration_seconds"] = Histogram(
            "outbound_request_duration_seconds",
            "Outbound HTTP call duration in seconds",
            ["target"],
            registry=self.registry
        )

        self._metrics["webhooks_relayed_total"] = Counter(
            "webhooks_relayed_total",
            "Total webhooks relayed",
            ["variant"],
            registry=self.registry
        )

        self._metrics["rate_limit_hits_total"] = Counter(
            "rate_limit_hits_total",
            "Total rate limit rejections",
            ["direction"],
            registry=self.registry
        )

    def record_http_request(self, method: str, endpoint: str, status_code: int, duration: float):
        """Record HTTP request metrics."""
        self._metrics["http_requests_total"].labels(
            method=method,
            endpoint=endpoint,
            status_code=str(status_code)
        ).inc()

        self._metrics["http_request_duration_seconds"].labels(
            method=method,
            endpoint=endpoint
        ).observe(duration)

    def record_health_check(self, status: str):
        """Record health check metrics."""
        self._metrics["health_check_total"].labels(status=status).inc()

    def record_error(self, error_type: str, service: Optional[str] = None):
        """Record error metrics."""
        service_name = service or self.service_name
        self._metrics["errors_total"].labels(error_type=error_type, service=service_name).inc()

    def increment_counter(self, metric_name: str, **labels):
        """Increment a counter metric."""
        if metric_name in self._metrics:
            self._metrics[metric_name].labels(**labels).inc()

    def observe_histogram(self, metric_name: str, value: float, **labels):
        """Observe a histogram metric."""
        if metric_name in self._metrics:
            self._metrics[metric_name].labels(**labels).observe(value)

    def export(self) -> bytes:
        """Render the registry in Prometheus text format."""
        return generate_latest(self.registry)


def get_metrics_collector(service_name: str, registry: Optional[CollectorRegistry] = None) -> MetricsCollector:
    """Get a metrics collector for a service."""
    return MetricsCollector(service_name, registry)
