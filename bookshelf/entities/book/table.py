"""Book database table model."""

import sqlalchemy as sa
from sqlmodel import Field

from bookshelf.entities._base import EntityTable


class BookTable(EntityTable, table=True):
    """Database persistence model for books.

    ``category_id`` is the scalar owner reference; the same pair is also
    recorded in ``category_books``.
    """

    __tablename__ = "books"
    __table_args__ = (
        sa.CheckConstraint("length(title) > 0", name="ck_books_title_not_empty"),
        sa.CheckConstraint("length(author) > 0", name="ck_books_author_not_empty"),
        sa.CheckConstraint("year > 0", name="ck_books_year_positive"),
    )

    title: str = Field(nullable=False)
    author: str = Field(nullable=False)
    category_id: int = Field(foreign_key="categories.id", nullable=False)
    year: int = Field(nullable=False)
