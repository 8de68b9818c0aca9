"""FastAPI application setup."""

import time
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse, Response

from src.user_registry.api.http.app_data import ApplicationDependencies
from src.user_registry.api.http.routers.health import router as health_router
from src.user_registry.api.http.routers.service.user import router as user_router
from src.user_registry.api.utils.app_startup import configure_logging
from src.user_registry.core.exceptions import (
    InternalError,
    UserNotFoundError,
    UserValidationError,
)
from src.user_registry.core.services import DbManageService, DbSessionService
from src.user_registry.entities.service.user.validation import first_error_message
from src.user_registry.runtime.context import get_config

configure_logging()

_SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
}
_HSTS = "max-age=31536000; includeSubDomains; preload"


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Attach the standard security headers; HSTS in production only."""

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        for name, value in _SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        if _is_production():
            response.headers.setdefault("Strict-Transport-Security", _HSTS)
        return response


def _is_production() -> bool:
    return get_config().app.environment == "production"


def _client_ip(request: Request) -> str:
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def _elapsed_ms(start: float) -> float:
    return round((time.perf_counter() - start) * 1000, 1)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await startup()
    try:
        yield
    finally:
        await shutdown()


app = FastAPI(
    title="User Registry API",
    lifespan=lifespan,
    docs_url=None if _is_production() else "/docs",
    redoc_url=None if _is_production() else "/redoc",
)

__all__ = ["app", "startup", "shutdown"]

app.add_middleware(SecurityHeadersMiddleware)

cors = get_config().app.cors
if _is_production() and "*" in cors.origins:
    raise RuntimeError(
        "CORS misconfigured: cannot use '*' with allow_credentials=True in production"
    )
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors.origins,
    allow_credentials=cors.allow_credentials,
    allow_methods=cors.allow_methods,
    allow_headers=cors.allow_headers,
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log every request under its request id; unhandled errors become a generic 500."""
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    start = time.perf_counter()

    with logger.contextualize(
        request_id=request_id,
        method=request.method,
        path=request.url.path,
        client_ip=_client_ip(request),
        user_agent=request.headers.get("user-agent", "unknown"),
    ):
        logger.info("request.start")
        try:
            response = await call_next(request)
        except Exception as exc:
            logger.bind(
                status_code=500,
                duration_ms=_elapsed_ms(start),
                error_type=type(exc).__name__,
            ).exception("request.error")
            return JSONResponse(
                status_code=500,
                content={"message": "Internal server error", "request_id": request_id},
                headers={"X-Request-ID": request_id},
            )

        logger.bind(
            status_code=response.status_code, duration_ms=_elapsed_ms(start)
        ).info("request.end")
        response.headers.setdefault("X-Request-ID", request_id)
        return response


# --- Domain error mapping ---
@app.exception_handler(UserValidationError)
async def user_validation_error_handler(
    request: Request, exc: UserValidationError
) -> JSONResponse:
    return JSONResponse(status_code=400, content={"message": exc.message})


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    # Field rules report like the business rules: 400 with the first failure
    logger.bind(error_count=len(exc.errors())).warning("request.validation_error")
    return JSONResponse(
        status_code=400,
        content={
            "message": first_error_message(exc),
            "errors": jsonable_encoder(exc.errors()),
        },
    )


@app.exception_handler(UserNotFoundError)
async def user_not_found_handler(request: Request, exc: UserNotFoundError) -> Response:
    return Response(status_code=404)


@app.exception_handler(InternalError)
async def internal_error_handler(request: Request, exc: InternalError) -> JSONResponse:
    return JSONResponse(status_code=500, content={"message": exc.message})


# --- Router registration ---
app.include_router(health_router)
app.include_router(user_router)


# --- Lifecycle hooks ---
async def startup() -> None:
    config = get_config()
    logger.info("Starting up application in {} environment", config.app.environment)

    # Dependencies provided up front (tests) are used as they are
    if getattr(app.state, "app_dependencies", None) is None:
        app.state.app_dependencies = ApplicationDependencies(
            database_service=DbSessionService(),
        )

    if config.database.create_tables:
        deps: ApplicationDependencies = app.state.app_dependencies
        DbManageService(deps.database_service.engine).create_all()


async def shutdown() -> None:
    logger.info("Shutting down application")
    app_dependencies: ApplicationDependencies | None = getattr(
        app.state, "app_dependencies", None
    )
    if app_dependencies is not None:
        app_dependencies.database_service.dispose()
