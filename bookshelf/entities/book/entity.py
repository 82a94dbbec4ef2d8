"""Entity: Book."""

from typing import Any

from pydantic import BaseModel, Field

from bookshelf.entities._base import Entity


class Book(Entity):
    """A cataloged work with an owning category."""

    title: str = Field(description="Title")
    author: str = Field(description="Author")
    category_id: int = Field(description="Id of the owning category")
    year: int = Field(description="Publication year")

    def __eq__(self, other: Any) -> bool:
        """Compare books by business attributes, ignoring timestamps."""
        if not isinstance(other, Book):
            return False

        return (
            self.id == other.id
            and self.title == other.title
            and self.author == other.author
            and self.category_id == other.category_id
            and self.year == other.year
        )

    def __hash__(self) -> int:
        return hash((self.id, self.title, self.author, self.category_id, self.year))


class BookCreate(BaseModel):
    """Request body for creating a book. Unknown fields are ignored."""

    title: str
    author: str
    year: int
    category_id: int
