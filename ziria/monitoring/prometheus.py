"""
Prometheus metrics.

Custom counters for the cache and the upstream account services, a render
latency histogram, and HTTP metrics from prometheus-fastapi-instrumentator.

Account ids and names are NEVER used as labels; every label here has a
small fixed set of values.
"""

from fastapi import FastAPI
from prometheus_client import Counter, Histogram
from prometheus_fastapi_instrumentator import Instrumentator

from ziria.configs import settings

LATENCY_BUCKETS: tuple[float, ...] = (
    0.005,
    0.01,
    0.025,
    0.05,
    0.1,
    0.25,
    0.5,
    1.0,
    2.5,
    5.0,
    10.0,
)


class MetricsCollector:
    """
    Custom metrics for the rendering service.

    Attributes
    ----------
    cache_hits_total : Counter
        Base images served from the cache, by artifact kind
    cache_misses_total : Counter
        Base images rebuilt from an upstream texture, by artifact kind
    cache_errors_total : Counter
        Cache store failures, by operation
    upstream_requests_total : Counter
        Calls to the identity resolver and texture source, by outcome
    render_duration_seconds : Histogram
        End-to-end render time, by artifact kind
    """

    def __init__(self) -> None:
        self.cache_hits_total = Counter(
            "ziria_cache_hits_total",
            "Total number of cache hits",
            ["kind"],
        )
        self.cache_misses_total = Counter(
            "ziria_cache_misses_total",
            "Total number of cache misses",
            ["kind"],
        )
        self.cache_errors_total = Counter(
            "ziria_cache_errors_total",
            "Total number of cache store failures",
            ["operation"],
        )
        self.upstream_requests_total = Counter(
            "ziria_upstream_requests_total",
            "Total number of upstream account service requests",
            ["collaborator", "outcome"],  # resolver|texture, ok|not_found|error
        )
        self.render_duration_seconds = Histogram(
            "ziria_render_duration_seconds",
            "Render duration in seconds",
            ["kind"],
            buckets=LATENCY_BUCKETS,
        )

    def record_cache_hit(self, kind: str) -> None:
        self.cache_hits_total.labels(kind=kind).inc()

    def record_cache_miss(self, kind: str) -> None:
        self.cache_misses_total.labels(kind=kind).inc()

    def record_cache_error(self, operation: str) -> None:
        self.cache_errors_total.labels(operation=operation).inc()

    def record_upstream(self, collaborator: str, outcome: str) -> None:
        """
        Record one upstream call.

        Examples:
        --------
        >>> metrics.record_upstream("texture", "ok")
        """
        self.upstream_requests_total.labels(collaborator=collaborator, outcome=outcome).inc()

    def observe_render(self, kind: str, duration: float) -> None:
        self.render_duration_seconds.labels(kind=kind).observe(duration)


# Global metrics collector instance
metrics = MetricsCollector()


def setup_prometheus(app: FastAPI) -> Instrumentator:
    """
    Set up Prometheus instrumentation for the FastAPI app.

    The ``/metrics`` endpoint is only exposed when ``ENABLE_METRICS`` is set.
    """
    instrumentator = Instrumentator(
        should_group_status_codes=True,
        should_ignore_untemplated=True,
        should_respect_env_var=False,
        should_instrument_requests_inprogress=True,
        excluded_handlers=["/metrics", "/clear_cache.*", "/health"],
        inprogress_name="ziria_http_requests_inprogress",
        inprogress_labels=True,
    )

    if settings.ENABLE_METRICS:
        instrumentator.instrument(app)
        instrumentator.expose(app, endpoint="/metrics", include_in_schema=False)

    return instrumentator
