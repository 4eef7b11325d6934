from dataclasses import dataclass

from src.catalog.core.services import DbSessionService, MetricsSink
from src.catalog.core.services.external.dummyjson import ExternalCatalogClient


@dataclass
class ApplicationDependencies:
    database_service: DbSessionService
    metrics: MetricsSink
    catalog_client: ExternalCatalogClient
