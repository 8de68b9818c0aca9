"""User API router with CRUD operations."""

from fastapi import APIRouter, Depends, Request, Response, status

from src.user_registry.api.http.deps import get_user_service
from src.user_registry.core.services import UserService
from src.user_registry.entities.service.user import User, UserResponse

router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("", response_model=list[UserResponse])
def list_users(
    service: UserService = Depends(get_user_service),
) -> list[UserResponse]:
    """List all users."""
    return service.list_users()


@router.get("/{user_id}", response_model=UserResponse, name="get_user")
def get_user(
    user_id: str,
    service: UserService = Depends(get_user_service),
) -> UserResponse:
    """Get a user by ID."""
    return service.get_user(user_id)


@router.post("", response_model=User, status_code=status.HTTP_201_CREATED)
def create_user(
    user: User,
    request: Request,
    response: Response,
    service: UserService = Depends(get_user_service),
) -> User:
    """Create a new user."""
    created_user = service.create_user(user)
    response.headers["Location"] = request.app.url_path_for(
        "get_user", user_id=created_user.id
    )
    return created_user


@router.put(
    "/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
)
def update_user(
    user_id: str,
    user: User,
    service: UserService = Depends(get_user_service),
) -> Response:
    """Replace every mutable field of a user."""
    service.update_user(user_id, user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete(
    "/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
)
def delete_user(
    user_id: str,
    service: UserService = Depends(get_user_service),
) -> Response:
    """Delete a user."""
    service.delete_user(user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
