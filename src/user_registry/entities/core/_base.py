import uuid
from datetime import UTC, datetime

import sqlalchemy as sa
from pydantic import BaseModel, field_validator
from pydantic import Field as PydanticField
from sqlmodel import Field, SQLModel


def _new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(UTC)


class Entity(BaseModel):
    """Base entity class with auto-generated UUID identifier."""

    id: str = PydanticField(
        default_factory=_new_id,
        description="Unique identifier for the entity",
    )

    created_at: datetime = PydanticField(default_factory=_utcnow)
    updated_at: datetime = PydanticField(default_factory=_utcnow)

    @field_validator("id")
    @classmethod
    def _id_is_uuid(cls, value: str) -> str:
        """Accept any UUID spelling and store its canonical form."""
        try:
            return str(uuid.UUID(value))
        except ValueError as e:
            raise ValueError("Identifier must be a UUID.") from e


class EntityTable(SQLModel, table=False):
    """Base table model sharing the entity's identifier and timestamps."""

    id: str = Field(
        primary_key=True,
        default_factory=_new_id,
        description="Unique identifier for the entity",
    )

    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(
        default_factory=_utcnow,
        nullable=False,
        sa_column_kwargs={
            "server_default": sa.func.now(),
            "onupdate": sa.func.now(),
        },
    )
