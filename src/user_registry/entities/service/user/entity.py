"""Entity: User."""

import re
from datetime import date
from typing import Any

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from src.user_registry.entities.core._base import Entity

from .age import calculate_age

NAME_MAX_LENGTH = 128
PHONE_NUMBER_PATTERN = re.compile(r"^\d{10}$")


class User(Entity):
    """User entity representing a person in the registry.

    Only field-level constraints live here (required, length, format). The
    business rules that need the store or the clock (email uniqueness, minimum
    age) are applied by ``validate_user``.
    """

    first_name: str = Field(max_length=NAME_MAX_LENGTH, description="User's first name")
    last_name: str | None = Field(
        default=None, max_length=NAME_MAX_LENGTH, description="User's last name"
    )
    email: EmailStr = Field(description="User's email address, unique across users")
    date_of_birth: date = Field(description="User's date of birth")
    phone_number: str = Field(description="User's phone number, exactly 10 digits")

    @field_validator("first_name")
    @classmethod
    def _first_name_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("First name is required.")
        return value

    @field_validator("phone_number")
    @classmethod
    def _phone_number_format(cls, value: str) -> str:
        if not PHONE_NUMBER_PATTERN.fullmatch(value):
            raise ValueError("Phone number must be 10 digits.")
        return value

    def __eq__(self, other: Any) -> bool:
        """Compare users by business attributes, ignoring timestamps."""
        if not isinstance(other, User):
            return False

        return (
            self.id == other.id
            and self.first_name == other.first_name
            and self.last_name == other.last_name
            and self.email == other.email
            and self.date_of_birth == other.date_of_birth
            and self.phone_number == other.phone_number
        )

    def __hash__(self) -> int:
        """Hash based on business attributes, ignoring timestamps."""
        return hash((
            self.id,
            self.first_name,
            self.last_name,
            self.email,
            self.date_of_birth,
            self.phone_number,
        ))


class UserResponse(BaseModel):
    """Read-only projection of a user returned by the list and get endpoints."""

    model_config = ConfigDict(frozen=True)

    id: str
    first_name: str
    last_name: str | None = None
    email: str
    date_of_birth: date
    phone_number: str
    age: int = Field(ge=0, description="Age in whole years as of today")

    @classmethod
    def from_user(cls, user: User, today: date | None = None) -> "UserResponse":
        return cls(
            id=user.id,
            first_name=user.first_name,
            last_name=user.last_name,
            email=user.email,
            date_of_birth=user.date_of_birth,
            phone_number=user.phone_number,
            age=calculate_age(user.date_of_birth, today),
        )
