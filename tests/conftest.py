"""Pytest configuration: environment defaults and shared fixtures."""

import os

# Must be set before the application config is loaded
os.environ.setdefault("APP_ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("METRICS_ENABLED", "false")

from tests.fixtures import *  # noqa: E402,F401,F403
