"""User repository for data access operations."""

from datetime import UTC, datetime

from sqlalchemy import func
from sqlmodel import Session, select

from .entity import User
from .table import UserTable


class UserRepository:
    """Data-access layer for users.

    The repository never commits; the caller owns the transaction.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def get(self, user_id: str) -> User | None:
        row = self._session.get(UserTable, user_id)
        if row is None:
            return None
        return User.model_validate(row, from_attributes=True)

    def list_all(self) -> list[User]:
        rows = self._session.exec(select(UserTable)).all()
        return [User.model_validate(row, from_attributes=True) for row in rows]

    def exists(self, user_id: str) -> bool:
        return self._session.get(UserTable, user_id) is not None

    def email_taken(self, email: str, exclude_id: str | None = None) -> bool:
        """Return True when another user already holds ``email``, ignoring case."""
        statement = select(UserTable.id).where(
            func.lower(UserTable.email) == email.lower()
        )
        if exclude_id is not None:
            statement = statement.where(UserTable.id != exclude_id)
        return self._session.exec(statement).first() is not None

    def create(self, user: User) -> User:
        """Insert ``user``; the bookkeeping timestamps are always stamped here."""
        now = datetime.now(UTC)
        row = UserTable(
            id=user.id,
            first_name=user.first_name,
            last_name=user.last_name,
            email=user.email,
            date_of_birth=user.date_of_birth,
            phone_number=user.phone_number,
            created_at=now,
            updated_at=now,
        )
        self._session.add(row)
        return User.model_validate(row, from_attributes=True)

    def update(self, user: User) -> User:
        """Replace every mutable field of the stored user with ``user``'s values."""
        row = self._session.get(UserTable, user.id)
        if row is None:
            raise ValueError(f"User with id {user.id} not found")

        row.first_name = user.first_name
        row.last_name = user.last_name
        row.email = user.email
        row.date_of_birth = user.date_of_birth
        row.phone_number = user.phone_number
        row.updated_at = datetime.now(UTC)
        self._session.add(row)
        return User.model_validate(row, from_attributes=True)

    def delete(self, user_id: str) -> bool:
        row = self._session.get(UserTable, user_id)
        if row is None:
            return False
        self._session.delete(row)
        return True
