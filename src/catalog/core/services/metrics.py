"""Metrics sinks injected into the HTTP layer and the catalog services."""

import threading
import time
from abc import ABC, abstractmethod
from collections.abc import Iterator, Mapping
from contextlib import contextmanager

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)

DEFAULT_BUCKETS: tuple[float, ...] = (0.1, 0.5, 1, 2, 5)

BUCKETS_BY_NAME: dict[str, tuple[float, ...]] = {
    "db_query_seconds": (0.01, 0.05, 0.1, 0.5, 1),
}

Labels = Mapping[str, str | int | float] | None


class MetricsSink(ABC):
    @abstractmethod
    def increment(self, name: str, labels: Labels = None, value: float = 1) -> None:
        """Increase the counter ``name`` by ``value``."""
        raise NotImplementedError

    @abstractmethod
    def observe(self, name: str, value: float, labels: Labels = None) -> None:
        """Record ``value`` in the histogram ``name``."""
        raise NotImplementedError

    @abstractmethod
    def gauge(self, name: str, value: float, labels: Labels = None) -> None:
        """Set the gauge ``name`` to ``value``."""
        raise NotImplementedError

    @abstractmethod
    def render(self) -> tuple[bytes, str]:
        """Return the exposition payload and its content type."""
        raise NotImplementedError

    @contextmanager
    def timer(self, name: str, labels: Labels = None) -> Iterator[None]:
        """Observe the wall-clock duration of the wrapped block, in seconds."""
        start = time.perf_counter()
        try:
            yield
        finally:
            self.observe(name, time.perf_counter() - start, labels)


class NullMetricsSink(MetricsSink):
    """Sink used when metrics are disabled; records nothing."""

    def increment(self, name: str, labels: Labels = None, value: float = 1) -> None:
        return None

    def observe(self, name: str, value: float, labels: Labels = None) -> None:
        return None

    def gauge(self, name: str, value: float, labels: Labels = None) -> None:
        return None

    def render(self) -> tuple[bytes, str]:
        return b"", CONTENT_TYPE_LATEST


class PrometheusMetricsSink(MetricsSink):
    """Prometheus-backed sink owning a private collector registry.

    Metrics are created on first use; the label names of that first call are
    fixed for the lifetime of the metric.
    """

    def __init__(self, prefix: str = "catalog_") -> None:
        self._prefix = prefix
        self._registry = CollectorRegistry(auto_describe=True)
        self._metrics: dict[str, Counter | Histogram | Gauge] = {}
        self._lock = threading.Lock()

    @property
    def registry(self) -> CollectorRegistry:
        return self._registry

    def _get_or_create(self, kind: type, name: str, labels: Labels):
        label_names = tuple(sorted(labels)) if labels else ()
        with self._lock:
            metric = self._metrics.get(name)
            if metric is None:
                full_name = f"{self._prefix}{name}"
                kwargs: dict = {"registry": self._registry}
                if kind is Histogram:
                    kwargs["buckets"] = BUCKETS_BY_NAME.get(name, DEFAULT_BUCKETS)
                metric = kind(full_name, name.replace("_", " "), label_names, **kwargs)
                self._metrics[name] = metric
            elif not isinstance(metric, kind):
                raise ValueError(
                    f"Metric '{name}' already registered as {type(metric).__name__}"
                )
        if labels:
            return metric.labels(**{key: str(value) for key, value in labels.items()})
        return metric

    def increment(self, name: str, labels: Labels = None, value: float = 1) -> None:
        self._get_or_create(Counter, name, labels).inc(value)

    def observe(self, name: str, value: float, labels: Labels = None) -> None:
        self._get_or_create(Histogram, name, labels).observe(value)

    def gauge(self, name: str, value: float, labels: Labels = None) -> None:
        self._get_or_create(Gauge, name, labels).set(value)

    def render(self) -> tuple[bytes, str]:
        return generate_latest(self._registry), CONTENT_TYPE_LATEST


def build_metrics_sink(enabled: bool, prefix: str) -> MetricsSink:
    """Return a Prometheus sink when metrics are enabled, a null sink otherwise."""
    if enabled:
        return PrometheusMetricsSink(prefix=prefix)
    return NullMetricsSink()
