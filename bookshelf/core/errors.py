"""Error taxonomy shared by the access layer and the HTTP layer."""


class CatalogError(Exception):
    """Base class for failures of a single catalog operation.

    ``status_code`` is the HTTP status the API layer answers with.
    """

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(CatalogError):
    """Input failed a field rule (empty string, non-positive year)."""

    status_code = 400


class NotFoundError(CatalogError):
    """A referenced entity does not exist."""

    status_code = 404

    def __init__(self, entity: str, entity_id: object) -> None:
        super().__init__(f"{entity} with id {entity_id} not found")
        self.entity = entity
        self.entity_id = entity_id


class ConflictError(CatalogError):
    """A uniqueness rule would be violated."""

    status_code = 409

    def __init__(self, entity: str, field: str, value: object) -> None:
        super().__init__(f"{entity} with {field} {value!r} already exists")
        self.entity = entity
        self.field = field
        self.value = value


class StorageError(CatalogError):
    """The database failed in a way the caller cannot fix."""

    status_code = 500


class ClientDisconnectedError(CatalogError):
    """The client went away; the operation stopped and its writes were rolled back."""

    # nginx convention; the client never sees it
    status_code = 499

    def __init__(self) -> None:
        super().__init__("Client disconnected before the operation completed")


class FatalStartupError(Exception):
    """The process cannot start serving (database unreachable, migration failed)."""
