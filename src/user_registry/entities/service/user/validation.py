"""Validation rules shared by every user write path."""

from datetime import date

from pydantic import ValidationError

from src.user_registry.core.exceptions import UserValidationError

from .age import MINIMUM_AGE, calculate_age
from .entity import User
from .repository import UserRepository

EMAIL_NOT_UNIQUE = "Email must be unique."
UNDERAGE = "User must be 18 years or older."


def first_error_message(error: ValidationError) -> str:
    """Message of the first failing field, without pydantic's prefixes.

    Also accepts FastAPI's ``RequestValidationError``, which exposes the same
    ``errors()`` list with a ``body`` prefix on every location.
    """
    first = error.errors()[0]
    ctx_error = first.get("ctx", {}).get("error")
    if isinstance(ctx_error, Exception):
        return str(ctx_error)
    field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid value")
    return f"{field}: {message}" if field else message


def check_fields(user: User) -> None:
    """Re-run the model's field constraints on an already constructed user.

    Payloads parsed by FastAPI have passed these already. Users built with
    ``model_construct`` or mutated after construction have not.
    """
    try:
        User.model_validate(user.model_dump())
    except ValidationError as e:
        raise UserValidationError(first_error_message(e)) from e


def validate_user(
    user: User,
    repository: UserRepository,
    exclude_id: str | None = None,
    today: date | None = None,
) -> None:
    """Apply every user rule in order; the first failure raises.

    Order: field constraints, email uniqueness (ignoring case and the user
    identified by ``exclude_id``), minimum age.

    Raises:
        UserValidationError: with the message of the first failing rule
    """
    check_fields(user)

    if repository.email_taken(user.email, exclude_id=exclude_id):
        raise UserValidationError(EMAIL_NOT_UNIQUE)

    if calculate_age(user.date_of_birth, today) < MINIMUM_AGE:
        raise UserValidationError(UNDERAGE)
