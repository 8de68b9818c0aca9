"""User database table model."""

from datetime import date

from sqlmodel import Field

from src.user_registry.entities.core._base import EntityTable


class UserTable(EntityTable, table=True):
    """Database persistence model for users.

    The unique constraint on ``email`` backs the case-insensitive pre-check
    done by ``validate_user`` for exact duplicates written concurrently.
    """

    __tablename__ = "users"

    first_name: str = Field(max_length=128)
    last_name: str | None = Field(default=None, max_length=128)
    email: str = Field(index=True, unique=True, max_length=320)
    date_of_birth: date
    phone_number: str = Field(max_length=10)
