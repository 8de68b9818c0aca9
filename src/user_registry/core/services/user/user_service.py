from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session

from src.user_registry.core.exceptions import (
    InternalError,
    UserNotFoundError,
    UserValidationError,
)
from src.user_registry.entities.service.user import (
    User,
    UserRepository,
    UserResponse,
    validate_user,
)
from src.user_registry.entities.service.user.validation import EMAIL_NOT_UNIQUE

if TYPE_CHECKING:
    from loguru import Logger


class UserService:
    """CRUD operations on users.

    Every operation logs on entry, on success (INFO), on an expected failure
    (WARNING) and on a store failure (ERROR). Store failures are rolled back
    and surface as ``InternalError``; their details stay in the log.
    """

    def __init__(self, db_session: Session, log: Logger):
        self._db_session = db_session
        self._repo = UserRepository(db_session)
        self._log = log

    def list_users(self, today: date | None = None) -> list[UserResponse]:
        self._log.info("Fetching all users")
        try:
            users = self._repo.list_all()
        except SQLAlchemyError as e:
            raise self._store_failure("An error occurred while fetching users") from e

        self._log.bind(count=len(users)).info("Fetched {} users successfully", len(users))
        return [UserResponse.from_user(user, today) for user in users]

    def get_user(self, user_id: str, today: date | None = None) -> UserResponse:
        log = self._log.bind(user_id=user_id)
        log.info("Fetching user with ID {}", user_id)
        try:
            user = self._repo.get(user_id)
        except SQLAlchemyError as e:
            raise self._store_failure(
                f"An error occurred while fetching user with ID {user_id}"
            ) from e

        if user is None:
            log.warning("User with ID {} not found", user_id)
            raise UserNotFoundError(user_id)

        log.info("Fetched user with ID {} successfully", user_id)
        return UserResponse.from_user(user, today)

    def user_exists(self, user_id: str) -> bool:
        log = self._log.bind(user_id=user_id)
        log.info("Checking whether user with ID {} exists", user_id)
        try:
            exists = self._repo.exists(user_id)
        except SQLAlchemyError as e:
            raise self._store_failure(
                f"An error occurred while checking user with ID {user_id}"
            ) from e

        log.bind(exists=exists).info("Checked user with ID {}: exists={}", user_id, exists)
        return exists

    def create_user(self, user: User, today: date | None = None) -> User:
        """Validate and insert ``user``; its ``id`` is kept when the caller supplied one."""
        log = self._log.bind(user_id=user.id, email=user.email)
        log.info("Creating a new user")
        try:
            validate_user(user, self._repo, today=today)
            created = self._repo.create(user)
            self._db_session.commit()
        except UserValidationError as e:
            log.warning("Rejected user creation: {}", e.message)
            raise
        except IntegrityError as e:
            raise self._integrity_failure(
                user, None, "An error occurred while creating a user"
            ) from e
        except SQLAlchemyError as e:
            raise self._store_failure("An error occurred while creating a user") from e

        log.info("User created successfully with ID {}", created.id)
        return created

    def update_user(self, user_id: str, user: User, today: date | None = None) -> None:
        """Replace all mutable fields of the stored user; the identifier never changes."""
        log = self._log.bind(user_id=user_id, email=user.email)
        log.info("Updating user with ID {}", user_id)
        try:
            if not self._repo.exists(user_id):
                log.warning("User with ID {} not found for update", user_id)
                raise UserNotFoundError(user_id)

            replacement = user.model_copy(update={"id": user_id})
            validate_user(replacement, self._repo, exclude_id=user_id, today=today)
            self._repo.update(replacement)
            self._db_session.commit()
        except UserValidationError as e:
            log.warning("Rejected update of user with ID {}: {}", user_id, e.message)
            raise
        except IntegrityError as e:
            raise self._integrity_failure(
                user, user_id, f"An error occurred while updating user with ID {user_id}"
            ) from e
        except SQLAlchemyError as e:
            raise self._store_failure(
                f"An error occurred while updating user with ID {user_id}"
            ) from e

        log.info("User with ID {} updated successfully", user_id)

    def delete_user(self, user_id: str) -> None:
        log = self._log.bind(user_id=user_id)
        log.info("Deleting user with ID {}", user_id)
        try:
            deleted = self._repo.delete(user_id)
            if not deleted:
                log.warning("User with ID {} not found for deletion", user_id)
                raise UserNotFoundError(user_id)
            self._db_session.commit()
        except SQLAlchemyError as e:
            raise self._store_failure(
                f"An error occurred while deleting user with ID {user_id}"
            ) from e

        log.info("User with ID {} deleted successfully", user_id)

    def _store_failure(self, message: str) -> InternalError:
        self._db_session.rollback()
        self._log.opt(exception=True).error(message)
        return InternalError()

    def _integrity_failure(
        self, user: User, exclude_id: str | None, message: str
    ) -> UserValidationError | InternalError:
        """Map a constraint violation on commit to the error the caller should see.

        Two writers can both pass the email pre-check; the loser hits the
        unique constraint and gets the same message the pre-check would give.
        """
        self._db_session.rollback()
        try:
            duplicate_email = self._repo.email_taken(user.email, exclude_id=exclude_id)
        except SQLAlchemyError:
            duplicate_email = False

        if duplicate_email:
            self._log.bind(email=user.email).warning(
                "Email uniqueness enforced by the database constraint"
            )
            return UserValidationError(EMAIL_NOT_UNIQUE)

        self._log.opt(exception=True).error(message)
        return InternalError()
