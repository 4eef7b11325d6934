"""Database initialization script."""

from src.catalog.core.services.database.db_manage import DbManageService
from src.catalog.runtime.context import get_config

main_config = get_config()  # Ensure config is loaded before DB init


def init_db(backfill: bool = True) -> int:
    """Create all database tables and backfill the active flag.

    Returns the number of legacy products that were activated.
    """
    db_manage_service = DbManageService()
    db_manage_service.create_all()
    if not backfill:
        return 0
    return db_manage_service.initialize_active_field()


if __name__ == "__main__":
    init_db()
