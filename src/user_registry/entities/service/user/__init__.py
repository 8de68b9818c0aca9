"""Entity package: User."""

from .age import calculate_age
from .entity import User, UserResponse
from .repository import UserRepository
from .table import UserTable
from .validation import check_fields, validate_user

__all__ = [
    "User",
    "UserRepository",
    "UserResponse",
    "UserTable",
    "calculate_age",
    "check_fields",
    "validate_user",
]
