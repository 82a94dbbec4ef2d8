from dataclasses import dataclass, field

from bookshelf.core.services import Clock, DbSessionService
from bookshelf.entities._base import utc_now


@dataclass
class ApplicationDependencies:
    """Process-wide collaborators shared by every request."""

    database_service: DbSessionService
    clock: Clock = field(default=utc_now)
