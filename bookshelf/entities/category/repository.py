"""Category repository for data access operations."""

from datetime import datetime

from sqlmodel import Session, select

from .entity import Category
from .table import CategoryTable


class CategoryRepository:
    """Data-access layer for categories. Callers own the transaction."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def get(self, category_id: int) -> Category | None:
        row = self._session.get(CategoryTable, category_id)
        if row is None:
            return None
        return Category.model_validate(row, from_attributes=True)

    def get_by_name(self, name: str) -> Category | None:
        statement = select(CategoryTable).where(CategoryTable.name == name)
        row = self._session.exec(statement).first()
        if row is None:
            return None
        return Category.model_validate(row, from_attributes=True)

    def list_all(self) -> list[Category]:
        rows = self._session.exec(select(CategoryTable)).all()
        return [Category.model_validate(row, from_attributes=True) for row in rows]

    def create(self, name: str, created_at: datetime) -> Category:
        row = CategoryTable(name=name, created_at=created_at)
        self._session.add(row)
        # Flush so the storage-assigned id is available
        self._session.flush()
        self._session.refresh(row)
        return Category.model_validate(row, from_attributes=True)
