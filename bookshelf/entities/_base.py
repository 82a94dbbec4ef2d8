from datetime import UTC, datetime

import sqlalchemy as sa
from pydantic import BaseModel, ConfigDict, field_serializer, field_validator
from pydantic import Field as PydanticField
from sqlmodel import Field, SQLModel


def utc_now() -> datetime:
    return datetime.now(UTC)


class Entity(BaseModel):
    """Base entity: a storage-assigned integer id and a creation timestamp."""

    model_config = ConfigDict(from_attributes=True)

    id: int = PydanticField(description="Unique identifier assigned by storage")
    created_at: datetime = PydanticField(description="Creation time (UTC)")

    @field_validator("created_at")
    @classmethod
    def _as_utc(cls, value: datetime) -> datetime:
        # SQLite hands timestamps back without tzinfo
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    @field_serializer("created_at")
    def _rfc3339(self, value: datetime) -> str:
        return value.isoformat().replace("+00:00", "Z")


class EntityTable(SQLModel, table=False):
    """Base persistence model with an autoincrement primary key."""

    id: int | None = Field(default=None, primary_key=True)
    created_at: datetime = Field(
        sa_type=sa.DateTime(timezone=True),
        nullable=False,
    )
