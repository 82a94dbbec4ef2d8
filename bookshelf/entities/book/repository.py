"""Book repository for data access operations."""

from datetime import datetime

from sqlmodel import Session, select

from bookshelf.entities.category_book import CategoryBookTable

from .entity import Book
from .table import BookTable


class BookRepository:
    """Data-access layer for books and their category links."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def get(self, book_id: int) -> Book | None:
        row = self._session.get(BookTable, book_id)
        if row is None:
            return None
        return Book.model_validate(row, from_attributes=True)

    def list_all(self) -> list[Book]:
        rows = self._session.exec(select(BookTable)).all()
        return [Book.model_validate(row, from_attributes=True) for row in rows]

    def list_by_category(self, category_id: int) -> list[Book]:
        statement = (
            select(BookTable)
            .join(CategoryBookTable, CategoryBookTable.book_id == BookTable.id)
            .where(CategoryBookTable.category_id == category_id)
        )
        rows = self._session.exec(statement).all()
        return [Book.model_validate(row, from_attributes=True) for row in rows]

    def create(
        self,
        *,
        title: str,
        author: str,
        year: int,
        category_id: int,
        created_at: datetime,
    ) -> Book:
        row = BookTable(
            title=title,
            author=author,
            year=year,
            category_id=category_id,
            created_at=created_at,
        )
        self._session.add(row)
        self._session.flush()
        self._session.refresh(row)
        return Book.model_validate(row, from_attributes=True)

    def link_category(self, category_id: int, book_id: int) -> None:
        self._session.add(CategoryBookTable(category_id=category_id, book_id=book_id))
        self._session.flush()
