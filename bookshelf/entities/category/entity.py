"""Entity: Category."""

from typing import Any

from pydantic import BaseModel, Field

from bookshelf.entities._base import Entity


class Category(Entity):
    """A named grouping to which books are assigned. Names are unique."""

    name: str = Field(description="Category name, unique across categories")

    def __eq__(self, other: Any) -> bool:
        """Compare categories by identity and name, ignoring timestamps."""
        if not isinstance(other, Category):
            return False
        return self.id == other.id and self.name == other.name

    def __hash__(self) -> int:
        return hash((self.id, self.name))


class CategoryCreate(BaseModel):
    """Request body for creating a category. Unknown fields are ignored."""

    name: str
