"""FastAPI dependency implementations."""

from collections.abc import Iterator

from fastapi import Depends, Request
from sqlmodel import Session

from src.catalog.api.http.app_data import ApplicationDependencies
from src.catalog.core.services import MetricsSink
from src.catalog.core.services.catalog.discount import DiscountService
from src.catalog.core.services.catalog.listing import ProductCatalogService
from src.catalog.core.services.catalog.sync import ExternalSyncService
from src.catalog.core.services.external.dummyjson import ExternalCatalogClient
from src.catalog.entities.service.product import ProductRepository
from src.catalog.runtime.context import get_config


def get_db_session(request: Request) -> Iterator[Session]:
    """Yield a database session that is closed once the request is done."""
    app_deps: ApplicationDependencies = request.app.state.app_dependencies
    session = app_deps.database_service.get_session()
    try:
        yield session
    finally:
        session.close()


def get_metrics_sink(request: Request) -> MetricsSink:
    """Get the metrics sink instance."""
    app_deps: ApplicationDependencies = request.app.state.app_dependencies
    return app_deps.metrics


def get_catalog_client(request: Request) -> ExternalCatalogClient:
    """Get the external catalog client instance."""
    app_deps: ApplicationDependencies = request.app.state.app_dependencies
    return app_deps.catalog_client


def get_product_repository(
    session: Session = Depends(get_db_session),
    metrics: MetricsSink = Depends(get_metrics_sink),
) -> ProductRepository:
    return ProductRepository(session, metrics)


def get_catalog_service(
    repository: ProductRepository = Depends(get_product_repository),
) -> ProductCatalogService:
    return ProductCatalogService(repository, get_config().catalog)


def get_discount_service(
    repository: ProductRepository = Depends(get_product_repository),
    metrics: MetricsSink = Depends(get_metrics_sink),
) -> DiscountService:
    return DiscountService(repository, metrics)


def get_sync_service(
    session: Session = Depends(get_db_session),
    client: ExternalCatalogClient = Depends(get_catalog_client),
    metrics: MetricsSink = Depends(get_metrics_sink),
) -> ExternalSyncService:
    return ExternalSyncService(
        session, client, metrics, fetch_limit=get_config().external_source.fetch_limit
    )
