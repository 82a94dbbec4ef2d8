"""Entity access layer: typed queries and inserts over books and categories."""

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from datetime import datetime
from threading import Event

from loguru import logger
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session

from bookshelf.core.errors import (
    CatalogError,
    ClientDisconnectedError,
    ConflictError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from bookshelf.entities import (
    Book,
    BookCreate,
    BookRepository,
    Category,
    CategoryRepository,
)
from bookshelf.entities._base import utc_now

Clock = Callable[[], datetime]

# Widest range an INTEGER column holds on every supported engine
INTEGER_MIN = -(2**31)
INTEGER_MAX = 2**31 - 1


def _storable(value: int) -> bool:
    return INTEGER_MIN <= value <= INTEGER_MAX


def _require_text(field: str, value: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field} must not be empty")
    return value


class CatalogService:
    """Catalog operations over a single request-scoped session.

    Every write runs in one transaction: on any failure the session is
    rolled back, so a failed ``create_book`` never leaves a book without
    its category link. ``created_at`` comes from ``clock``, not from the
    database, so tests can pin it.

    ``disconnected`` is set by the HTTP layer when the client goes away.
    Reads then stop before querying and writes roll back instead of
    committing.
    """

    def __init__(
        self,
        session: Session,
        clock: Clock = utc_now,
        disconnected: Event | None = None,
    ) -> None:
        self._session = session
        self._clock = clock
        self._disconnected = disconnected
        self._categories = CategoryRepository(session)
        self._books = BookRepository(session)

    def _check_connected(self) -> None:
        if self._disconnected is not None and self._disconnected.is_set():
            raise ClientDisconnectedError()

    @contextmanager
    def _transaction(self) -> Iterator[None]:
        self._check_connected()
        try:
            yield
            self._check_connected()
            self._session.commit()
        except CatalogError:
            self._session.rollback()
            raise
        except SQLAlchemyError as e:
            self._session.rollback()
            logger.error("Storage failure: {}: {}", type(e).__name__, e)
            raise StorageError(str(getattr(e, "orig", None) or e)) from e

    @contextmanager
    def _reading(self) -> Iterator[None]:
        self._check_connected()
        try:
            yield
        except SQLAlchemyError as e:
            logger.error("Storage failure: {}: {}", type(e).__name__, e)
            raise StorageError(str(e)) from e

    # --- categories ---

    def list_categories(self) -> list[Category]:
        with self._reading():
            return self._categories.list_all()

    def get_category(self, category_id: int) -> Category:
        if not _storable(category_id):
            raise NotFoundError("Category", category_id)
        with self._reading():
            category = self._categories.get(category_id)
        if category is None:
            raise NotFoundError("Category", category_id)
        return category

    def create_category(self, name: str) -> Category:
        _require_text("name", name)

        with self._transaction():
            if self._categories.get_by_name(name) is not None:
                raise ConflictError("Category", "name", name)
            try:
                category = self._categories.create(name=name, created_at=self._clock())
            except IntegrityError as e:
                # A concurrent insert won the unique constraint
                raise ConflictError("Category", "name", name) from e

        logger.info("Created category {} ({!r})", category.id, category.name)
        return category

    # --- books ---

    def list_books(self) -> list[Book]:
        with self._reading():
            return self._books.list_all()

    def get_book(self, book_id: int) -> Book:
        if not _storable(book_id):
            raise NotFoundError("Book", book_id)
        with self._reading():
            book = self._books.get(book_id)
        if book is None:
            raise NotFoundError("Book", book_id)
        return book

    def list_category_books(self, category_id: int) -> list[Book]:
        """Books linked to a category through the association table."""
        self.get_category(category_id)
        with self._reading():
            return self._books.list_by_category(category_id)

    def create_book(self, request: BookCreate) -> Book:
        _require_text("title", request.title)
        _require_text("author", request.author)
        if request.year <= 0:
            raise ValidationError("year must be a positive integer")
        if request.year > INTEGER_MAX:
            raise ValidationError(f"year must be at most {INTEGER_MAX}")
        if not _storable(request.category_id):
            raise NotFoundError("Category", request.category_id)

        with self._transaction():
            if self._categories.get(request.category_id) is None:
                raise NotFoundError("Category", request.category_id)

            book = self._books.create(
                title=request.title,
                author=request.author,
                year=request.year,
                category_id=request.category_id,
                created_at=self._clock(),
            )
            self._books.link_category(request.category_id, book.id)

        logger.info("Created book {} in category {}", book.id, book.category_id)
        return book
