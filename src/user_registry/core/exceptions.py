"""Domain errors raised by the user service and mapped to HTTP responses."""


class UserRegistryError(Exception):
    """Base class for all user registry errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class UserValidationError(UserRegistryError):
    """Raised when a user payload violates a field or business rule (HTTP 400)."""


class UserNotFoundError(UserRegistryError):
    """Raised when no user exists for the requested identifier (HTTP 404)."""

    def __init__(self, user_id: str):
        self.user_id = user_id
        super().__init__(f"User with ID {user_id} not found")


class InternalError(UserRegistryError):
    """Raised when the store or runtime fails unexpectedly (HTTP 500).

    The message is safe to return to callers; the cause is logged, not surfaced.
    """

    def __init__(self, message: str = "Internal server error"):
        super().__init__(message)
