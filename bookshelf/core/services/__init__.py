"""Core services exports."""

from .catalog_service import CatalogService, Clock
from .database.db_manage import DbManageService
from .database.db_session import DbSessionService

__all__ = [
    "CatalogService",
    "Clock",
    "DbManageService",
    "DbSessionService",
]
