"""Schema management: table creation and one-off data migrations."""

from loguru import logger
from sqlmodel import SQLModel

from src.catalog.core.services.database.db_session import DbSessionService


class DbManageService:
    def __init__(self, database_service: DbSessionService | None = None):
        self._database_service = database_service or DbSessionService()

    def create_all(self) -> None:
        """Create all database tables."""
        from src.catalog.entities.service.product import ProductTable  # noqa: F401

        SQLModel.metadata.create_all(self._database_service.engine)
        logger.info("Database initialized with tables.")

    def initialize_active_field(self) -> int:
        """Set ``active = true`` on products created before the flag existed."""
        from src.catalog.entities.service.product import ProductRepository

        with self._database_service.session_scope() as session:
            modified = ProductRepository(session).initialize_active_field()
        logger.info("Active field backfill complete", modified=modified)
        return modified
