"""Refresh externally sourced products from the external catalog."""

import json
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from fastapi.concurrency import run_in_threadpool
from loguru import logger
from sqlmodel import Session

from src.catalog.core.errors import NotFoundError, UpstreamFailureError
from src.catalog.core.services.catalog.mapper import map_external_products
from src.catalog.core.services.external.dummyjson import (
    ExternalCatalogClient,
    ExternalCatalogError,
)
from src.catalog.core.services.metrics import MetricsSink, NullMetricsSink
from src.catalog.entities.service.product import BulkUpsertResult, ProductRepository


@dataclass
class SyncResult:
    imported_count: int
    sample: str | None
    deleted_count: int = 0


class ExternalSyncService:
    """Imports the external catalog into the products table.

    ``sync_replace`` swaps the whole externally sourced subset inside one
    transaction; ``sync_upsert`` merges records by external identity and
    never deletes.
    """

    def __init__(
        self,
        session: Session,
        client: ExternalCatalogClient,
        metrics: MetricsSink | None = None,
        fetch_limit: int = 100,
    ) -> None:
        self._session = session
        self._client = client
        self._metrics = metrics or NullMetricsSink()
        self._fetch_limit = fetch_limit
        self._repository = ProductRepository(session, self._metrics)

    @property
    def source(self) -> str:
        return self._client.source

    async def _fetch(self, limit: int | None) -> list[dict[str, Any]]:
        try:
            return await self._client.fetch_products(limit or self._fetch_limit)
        except ExternalCatalogError as exc:
            self._metrics.increment("product_import_failures_total", {"stage": "fetch"})
            raise UpstreamFailureError(
                "Failed to fetch products from the external catalog", errors=[str(exc)]
            ) from exc

    async def sync_replace(self, limit: int | None = None) -> SyncResult:
        """Replace every product tagged with this source by a fresh import.

        The database phase runs in the threadpool so the event loop keeps
        serving other requests.

        Raises:
            UpstreamFailureError: the fetch failed, or the replace failed and
                was rolled back.
            NotFoundError: nothing mappable came back; nothing was deleted.
        """
        raws = await self._fetch(limit)
        return await run_in_threadpool(self.replace_records, raws)

    def replace_records(self, raws: Iterable[dict[str, Any]]) -> SyncResult:
        """Map raw external records and swap them in for this source, then commit."""
        mapped = map_external_products(raws, self.source)
        if not mapped:
            raise NotFoundError("No products found to import")

        try:
            deleted = self._repository.delete_by_source(self.source)
            inserted = self._repository.insert_many(mapped)
            self._session.commit()
        except Exception as exc:
            self._session.rollback()
            logger.exception("External catalog import rolled back", source=self.source)
            self._metrics.increment("product_import_failures_total", {"stage": "replace"})
            raise UpstreamFailureError("Failed to import products", errors=[str(exc)]) from exc

        result = SyncResult(
            imported_count=len(inserted),
            sample=inserted[0].title if inserted else None,
            deleted_count=deleted,
        )
        self._metrics.increment("product_import_external_total", value=result.imported_count)
        self._metrics.gauge("product_external_total", result.imported_count)
        logger.info(
            "External catalog import complete",
            source=self.source,
            imported=result.imported_count,
            deleted=result.deleted_count,
            sample=result.sample,
        )
        return result

    def import_records(self, raws: Iterable[dict[str, Any]]) -> BulkUpsertResult:
        """Map raw external records and upsert them, then commit."""
        mapped = map_external_products(raws, self.source)
        if not mapped:
            raise NotFoundError("No products found to import")
        result = self._repository.bulk_upsert(mapped)
        self._session.commit()
        logger.info(
            "External catalog upsert complete",
            source=self.source,
            upserted=result.upserted_count,
            modified=result.modified_count,
            failed=result.failed,
        )
        return result

    async def sync_upsert(self, limit: int | None = None) -> BulkUpsertResult:
        """Fetch and merge by external identity without deleting anything."""
        raws = await self._fetch(limit)
        return await run_in_threadpool(self.import_records, raws)

    def upload_file(self, path: Path) -> BulkUpsertResult:
        """Upsert products from a JSON export of the external catalog.

        The file holds either a list of products or ``{"products": [...]}``.
        """
        with open(path, encoding="utf-8") as f:
            payload = json.load(f)
        if isinstance(payload, dict):
            payload = payload.get("products", [])
        if not isinstance(payload, list):
            raise ValueError(f"{path} does not contain a list of products")
        return self.import_records(payload)
