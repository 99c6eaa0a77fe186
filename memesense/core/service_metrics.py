"""
Prometheus Metrics Export for Memesense

Exports service metrics for monitoring:
- Requests per endpoint and status
- Upstream provider failures
- Responses served with placeholder data
- Response cache hits and misses
"""

import logging
from typing import Optional

from prometheus_client import CollectorRegistry, Counter, REGISTRY, start_http_server

from ..config import MemesenseConfig

logger = logging.getLogger(__name__)


class ServiceMetrics:
    """
    Prometheus metrics exporter for Memesense.

    Metrics exported:
    - memesense_requests_total: Requests by endpoint and HTTP status (Counter)
    - memesense_upstream_failures_total: Failed upstream attempts by provider (Counter)
    - memesense_fallback_responses_total: Responses containing placeholder data (Counter)
    - memesense_cache_events_total: Response cache hits and misses (Counter)
    """

    def __init__(self, port: int = 9108, registry: Optional[CollectorRegistry] = None):
        """
        Initialize metrics exporter.

        Args:
            port: Port to expose metrics on (default 9108)
            registry: Prometheus registry (defaults to the process-wide one)
        """
        self.port = port
        self.registry = registry or REGISTRY
        self.metrics_started = False

        self.requests = Counter(
            'memesense_requests_total',
            'Total HTTP requests handled',
            ['endpoint', 'status'],
            registry=self.registry,
        )

        self.upstream_failures = Counter(
            'memesense_upstream_failures_total',
            'Total failed upstream provider attempts',
            ['provider'],
            registry=self.registry,
        )

        self.fallback_responses = Counter(
            'memesense_fallback_responses_total',
            'Total responses that contained synthesized or generated data',
            ['endpoint'],
            registry=self.registry,
        )

        self.cache_events = Counter(
            'memesense_cache_events_total',
            'Response cache lookups by outcome',
            ['event'],
            registry=self.registry,
        )

    def start_server(self):
        """Start Prometheus metrics HTTP server."""
        if self.metrics_started:
            return

        try:
            start_http_server(self.port, registry=self.registry)
            self.metrics_started = True
            logger.info(f"Prometheus metrics server started on port {self.port}")
        except OSError as e:
            logger.warning(f"Failed to start Prometheus metrics server: {e}")

    def record_request(self, endpoint: str, status: int):
        self.requests.labels(endpoint=endpoint, status=str(status)).inc()

    def record_upstream_failure(self, provider: str):
        self.upstream_failures.labels(provider=provider).inc()

    def record_fallback(self, endpoint: str):
        """Count a response that was (partly) served from placeholder data."""
        self.fallback_responses.labels(endpoint=endpoint).inc()

    def record_cache_event(self, event: str):
        """
        Count a cache lookup.

        Args:
            event: "hit" or "miss"
        """
        self.cache_events.labels(event=event).inc()


# Global metrics instance
_metrics_instance: Optional[ServiceMetrics] = None


def get_metrics() -> ServiceMetrics:
    """Get or create global metrics instance."""
    global _metrics_instance

    if _metrics_instance is None:
        _metrics_instance = ServiceMetrics(port=MemesenseConfig.get_metrics_port())

        # Auto-start if enabled
        if MemesenseConfig.get_metrics_enabled():
            _metrics_instance.start_server()

    return _metrics_instance
