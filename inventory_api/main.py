"""FastAPI application initialization."""

from contextlib import asynccontextmanager
from uuid import uuid4

from dotenv import load_dotenv

# Load environment variables before anything else
load_dotenv()

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from inventory_api.api.auth import router as auth_router
from inventory_api.api.dependencies import build_auth_service, build_credential_store
from inventory_api.api.middleware import CorrelationIdMiddleware
from inventory_api.api.routes import router
from inventory_api.config import get_settings
from inventory_api.models.response import ErrorResponse
from inventory_api.services.errors import (
    AuthError,
    InvalidAccessToken,
    InvalidCredentials,
    InvalidRefreshToken,
    StorageUnavailable,
    UserAlreadyExists,
)
from inventory_api.services.logging_service import configure_logging, get_logger

# Looked up along the raised exception's MRO.
AUTH_ERROR_STATUS = {
    UserAlreadyExists: status.HTTP_409_CONFLICT,
    InvalidCredentials: status.HTTP_401_UNAUTHORIZED,
    InvalidRefreshToken: status.HTTP_401_UNAUTHORIZED,
    InvalidAccessToken: status.HTTP_401_UNAUTHORIZED,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown events."""
    settings = get_settings()
    configure_logging(settings.log_level)
    logger = get_logger("main")

    if settings.credential_store == "postgres":
        from inventory_api.database import init_database, run_migrations

        await init_database(settings.postgres_url)
        await run_migrations()
        logger.info("database_initialized")

    store = build_credential_store(settings)
    app.state.auth_service = build_auth_service(settings, store)

    logger.info(
        "application_started",
        credential_store=settings.credential_store,
        log_level=settings.log_level,
    )

    yield

    if settings.credential_store == "postgres":
        from inventory_api.database import close_database

        await close_database()

    logger.info("application_shutdown")


app = FastAPI(
    title="Inventory API",
    description="E-commerce inventory API with JWT authentication",
    version="0.1.0",
    lifespan=lifespan,
)


def _correlation_id(request: Request) -> str:
    return getattr(request.state, "correlation_id", None) or str(uuid4())


def _error_response(
    status_code: int, body: ErrorResponse, headers: dict | None = None
) -> JSONResponse:
    headers = {**(headers or {}), "X-Correlation-Id": body.correlation_id}
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(exclude_none=True),
        headers=headers,
    )


@app.exception_handler(AuthError)
async def auth_error_handler(request: Request, exc: AuthError) -> JSONResponse:
    """Map typed auth errors to status codes by exception class."""
    status_code = next(
        (AUTH_ERROR_STATUS[cls] for cls in type(exc).__mro__ if cls in AUTH_ERROR_STATUS),
        status.HTTP_401_UNAUTHORIZED,
    )
    headers = {}
    if isinstance(exc, InvalidAccessToken):
        headers["WWW-Authenticate"] = "Bearer"

    body = ErrorResponse(
        error=exc.message,
        code=exc.code,
        correlation_id=_correlation_id(request),
    )
    return _error_response(status_code, body, headers)


@app.exception_handler(StorageUnavailable)
async def storage_error_handler(request: Request, exc: StorageUnavailable) -> JSONResponse:
    """Opaque 500; the operation name stays in the server log only."""
    correlation_id = _correlation_id(request)
    structlog.get_logger().error(
        "storage_unavailable",
        correlation_id=correlation_id,
        operation=exc.operation,
    )
    body = ErrorResponse(
        error="An internal error occurred.",
        code=exc.code,
        correlation_id=correlation_id,
    )
    return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, body)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle Pydantic validation errors with a 400 and the first failing field."""
    correlation_id = _correlation_id(request)

    errors = exc.errors()
    if errors:
        first_error = errors[0]
        field = ".".join(str(loc) for loc in first_error.get("loc", ["unknown"]))
        message = first_error.get("msg", "Validation failed")
        detail = f"Field '{field}': {message}"
    else:
        detail = "Request validation failed"

    # Only field locations are logged; input values may include passwords.
    structlog.get_logger().warning(
        "validation_error",
        correlation_id=correlation_id,
        fields=[".".join(str(loc) for loc in e.get("loc", [])) for e in errors],
    )

    body = ErrorResponse(
        error="Validation error",
        code="VALIDATION_ERROR",
        detail=detail,
        correlation_id=correlation_id,
    )
    return _error_response(status.HTTP_400_BAD_REQUEST, body)


app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

# Correlation ID middleware for request tracking and observability
app.add_middleware(CorrelationIdMiddleware)

app.include_router(auth_router)
app.include_router(router)
