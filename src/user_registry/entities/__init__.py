"""Entities organised by business concept.

Each entity package holds:
- entity.py: domain model and its field constraints
- table.py: database persistence model
- repository.py: data access layer
"""

from .service.user import User, UserRepository, UserResponse, UserTable

__all__ = [
    "User",
    "UserRepository",
    "UserResponse",
    "UserTable",
]
