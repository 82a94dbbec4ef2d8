"""Category database table model."""

import sqlalchemy as sa
from sqlmodel import Field

from bookshelf.entities._base import EntityTable


class CategoryTable(EntityTable, table=True):
    """Database persistence model for categories."""

    __tablename__ = "categories"
    __table_args__ = (
        sa.CheckConstraint("length(name) > 0", name="ck_categories_name_not_empty"),
    )

    name: str = Field(nullable=False, unique=True, index=True)
