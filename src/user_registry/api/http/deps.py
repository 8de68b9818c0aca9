"""FastAPI dependency implementations."""

from __future__ import annotations

from collections.abc import Iterator

from fastapi import Depends, Request
from loguru import logger
from sqlmodel import Session

from src.user_registry.api.http.app_data import ApplicationDependencies
from src.user_registry.core.services import UserService


def get_db_session(request: Request) -> Iterator[Session]:
    """Yield a database session tied to the current request lifecycle."""
    app_deps: ApplicationDependencies = request.app.state.app_dependencies
    db = app_deps.database_service.get_session()
    try:
        yield db
    finally:
        db.close()


def get_user_service(db_session: Session = Depends(get_db_session)) -> UserService:
    """Get a User service bound to the request's session and a service logger."""
    return UserService(db_session, logger.bind(service="user_service"))
