"""Core services exports."""

# Database Services
from .database.db_manage import DbManageService
from .database.db_session import DbSessionService

# Metrics
from .metrics import (
    MetricsSink,
    NullMetricsSink,
    PrometheusMetricsSink,
    build_metrics_sink,
)

__all__ = [
    # Database Services
    "DbManageService",
    "DbSessionService",
    # Metrics
    "MetricsSink",
    "NullMetricsSink",
    "PrometheusMetricsSink",
    "build_metrics_sink",
]
