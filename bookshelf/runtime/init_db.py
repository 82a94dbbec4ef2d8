"""Database initialization script."""

from bookshelf.core.services import DbManageService, DbSessionService


def init_db() -> None:
    """Create or reconcile all database tables.

    Raises:
        FatalStartupError: if the database is unreachable or the schema
            cannot be reconciled.
    """
    database_service = DbSessionService()
    try:
        DbManageService(database_service.engine).ensure_schema()
    finally:
        database_service.dispose()


if __name__ == "__main__":
    init_db()
