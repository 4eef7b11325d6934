"""Unit tests for the context manager system."""

import asyncio

import pytest

from src.catalog.runtime.config.config_data import ConfigData
from src.catalog.runtime.context import (
    AppContext,
    get_config,
    get_context,
    set_config,
    with_context,
)


class TestContextManager:
    """Test the context manager functionality."""

    def test_default_context_available(self):
        context = get_context()

        assert isinstance(context, AppContext)
        assert isinstance(get_config(), ConfigData)
        assert context.config is get_config()

    def test_with_context_override_single_level(self):
        original_config = get_config()
        original_limit = original_config.catalog.max_limit

        override = ConfigData()
        override.catalog.max_limit = 5

        with with_context(override):
            assert get_config().catalog.max_limit == 5
            # Fields not set on the override are inherited
            assert get_config().external_source == original_config.external_source

        assert get_config().catalog.max_limit == original_limit
        assert get_config() is original_config

    def test_with_context_nested_overrides(self):
        original_config = get_config()

        level1 = ConfigData()
        level1.catalog.max_limit = 7
        level2 = ConfigData()
        level2.metrics.prefix = "nested_"

        with with_context(level1):
            with with_context(level2):
                assert get_config().catalog.max_limit == 7
                assert get_config().metrics.prefix == "nested_"
            assert get_config().metrics.prefix == original_config.metrics.prefix

        assert get_config() is original_config

    def test_with_context_no_override(self):
        original_config = get_config()

        with with_context(None):
            assert get_config() is original_config

    def test_rejects_non_config_override(self):
        with pytest.raises(ValueError):
            with with_context({"catalog": {"max_limit": 1}}):  # type: ignore[arg-type]
                pass

    def test_exception_handling_in_context(self):
        original_config = get_config()
        override = ConfigData()
        override.app.host = "exception_host"

        with pytest.raises(RuntimeError):
            with with_context(override):
                raise RuntimeError("boom")

        assert get_config() is original_config

    def test_set_config_replaces_configuration(self):
        async def worker() -> str:
            replacement = ConfigData()
            replacement.app.host = "replaced"
            set_config(replacement)
            return get_config().app.host

        # A separate task keeps the replacement out of this test's context
        assert asyncio.run(worker()) == "replaced"
        assert get_config().app.host != "replaced"


class TestAsyncContextManager:
    """Test context manager behavior in async contexts."""

    @pytest.mark.asyncio
    async def test_async_context_isolation(self):
        original_config = get_config()

        async def async_worker(worker_id: int) -> int:
            worker_config = ConfigData()
            worker_config.catalog.featured_limit = worker_id + 1

            with with_context(worker_config):
                await asyncio.sleep(0.01)
                return get_config().catalog.featured_limit

        results = await asyncio.gather(*(async_worker(i) for i in range(5)))

        assert results == [1, 2, 3, 4, 5]
        assert get_config() is original_config
