"""Association table between categories and books."""

from sqlmodel import Field, SQLModel


class CategoryBookTable(SQLModel, table=True):
    """One row per (category, book) link; the composite key keeps pairs unique."""

    __tablename__ = "category_books"

    category_id: int = Field(foreign_key="categories.id", primary_key=True)
    book_id: int = Field(foreign_key="books.id", primary_key=True)
