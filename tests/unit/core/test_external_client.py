"""Unit tests for the external catalog HTTP client."""

import httpx
import pytest

from src.catalog.core.services.external.dummyjson import ExternalCatalogError


class TestExternalCatalogClient:
    @pytest.mark.asyncio
    async def test_fetch_products(self, catalog_client_factory, external_records):
        client = catalog_client_factory(external_records)

        products = await client.fetch_products(2)

        assert [p["id"] for p in products] == [1, 2]
        (request,) = client.requests
        assert request.url.path == "/products"
        assert request.url.params["limit"] == "2"
        assert request.headers["accept"] == "application/json"
        assert request.headers["user-agent"].startswith("product-catalog-api")

    @pytest.mark.asyncio
    async def test_default_limit_from_config(self, catalog_client_factory):
        client = catalog_client_factory([])

        await client.fetch_products()

        assert client.requests[0].url.params["limit"] == "30"

    @pytest.mark.asyncio
    async def test_http_error(self, catalog_client_factory):
        client = catalog_client_factory(status_code=503, payload={"message": "down"})

        with pytest.raises(ExternalCatalogError, match="HTTP 503"):
            await client.fetch_products()

    @pytest.mark.asyncio
    async def test_transport_error(self, catalog_client_factory):
        client = catalog_client_factory(error=httpx.ConnectError("refused"))

        with pytest.raises(ExternalCatalogError):
            await client.fetch_products()

    @pytest.mark.asyncio
    async def test_unexpected_payload(self, catalog_client_factory):
        client = catalog_client_factory(payload={"items": []})

        with pytest.raises(ExternalCatalogError, match="products"):
            await client.fetch_products()

    @pytest.mark.asyncio
    async def test_health_check(self, catalog_client_factory):
        assert await catalog_client_factory([]).health_check() is True
        assert await catalog_client_factory(status_code=500, payload={}).health_check() is False
