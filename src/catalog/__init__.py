"""Product catalog REST backend.

This package contains the HTTP API, the product persistence layer, the
catalog services (querying, discounts, external synchronization) and the
runtime configuration that wires them together.
"""

__version__ = "0.1.0"
