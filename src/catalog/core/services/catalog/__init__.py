"""Catalog services: query planning, listings, discounts and external sync.

Import the submodules directly; this package re-exports nothing so that the
product repository can depend on ``query`` without import cycles.
"""
