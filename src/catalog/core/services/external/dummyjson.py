"""HTTP client for the external product catalog (dummyjson-compatible)."""

from typing import Any

import httpx
from loguru import logger

from src.catalog.runtime.config.config_data import ExternalSourceConfig


class ExternalCatalogError(Exception):
    """Raised when the external catalog is unreachable or returns unusable data."""


class ExternalCatalogClient:
    def __init__(
        self,
        config: ExternalSourceConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config
        self._transport = transport
        self._headers = {
            "Accept": "application/json",
            "User-Agent": config.user_agent,
        }

    @property
    def source(self) -> str:
        return self._config.name

    @property
    def base_url(self) -> str:
        return self._config.base_url.rstrip("/")

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            headers=self._headers,
            timeout=self._config.timeout_seconds,
            transport=self._transport,
        )

    async def _get(self, endpoint: str, params: dict[str, Any] | None = None) -> Any:
        try:
            async with self._client() as client:
                resp = await client.get(f"/{endpoint.lstrip('/')}", params=params)
                resp.raise_for_status()
                return resp.json()
        except httpx.HTTPStatusError as exc:
            logger.error(
                "External catalog call failed: {} -> HTTP {}",
                endpoint,
                exc.response.status_code,
            )
            raise ExternalCatalogError(
                f"HTTP {exc.response.status_code} from {self.base_url}/{endpoint}"
            ) from exc
        except httpx.HTTPError as exc:
            logger.error("External catalog call failed: {} -> {}", endpoint, exc)
            raise ExternalCatalogError(f"External API error: {exc}") from exc
        except ValueError as exc:
            raise ExternalCatalogError(f"Invalid JSON from {self.base_url}/{endpoint}") from exc

    async def fetch_products(self, limit: int | None = None) -> list[dict[str, Any]]:
        """Return up to ``limit`` raw product dictionaries."""
        params = {"limit": limit if limit is not None else self._config.fetch_limit}
        payload = await self._get("products", params=params)
        if not isinstance(payload, dict) or not isinstance(payload.get("products"), list):
            raise ExternalCatalogError("Unexpected payload: missing 'products' list")
        return payload["products"]

    async def health_check(self) -> bool:
        try:
            await self._get("products", params={"limit": 1, "select": "id"})
            return True
        except ExternalCatalogError:
            return False
