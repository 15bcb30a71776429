"""
FastAPI application factory and configuration.

This module creates the FastAPI application instance,
configures exception handlers, routers and lifespan events.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from psycopg_pool import ConnectionPool

from storefront.adapters.repository.memory import (
    InMemoryAccountRepository,
    InMemoryProductRepository,
)
from storefront.adapters.repository.postgres import (
    PostgresAccountRepository,
    PostgresProductRepository,
    run_migrations,
)
from storefront.adapters.security.passwords import BcryptPasswordHasher
from storefront.adapters.security.tokens import JwtTokenIssuer
from storefront.adapters.smtp.console import ConsoleEmailSender
from storefront.adapters.smtp.relay import SmtpEmailSender
from storefront.api.v1 import auth_router, products_router
from storefront.config.settings import Settings, get_settings
from storefront.domain.exceptions import StorefrontError, ValidationFailed

logger = logging.getLogger(__name__)

# OpenAPI tags for documentation grouping
tags_metadata = [
    {
        "name": "auth",
        "description": "Registration with email OTP, verification, password recovery and login",
    },
    {
        "name": "products",
        "description": "Product catalog - public reads, admin-only writes",
    },
]

# Auth endpoints whose missing or blank body fields get the domain's 400
_AUTH_FORM_PATHS = frozenset(
    f"/api/auth/{name}"
    for name in (
        "register",
        "verify-otp",
        "resend-otp",
        "forgot-password",
        "verify-reset-otp",
        "reset-password",
        "login",
        "google-login",
    )
)


def _is_blank_field_error(error: dict) -> bool:
    """True for a missing, null or whitespace-only field."""
    if error["type"] == "missing":
        return True
    value = error.get("input")
    return value is None or (isinstance(value, str) and not value.strip())


def _build_email_sender(settings: Settings) -> ConsoleEmailSender | SmtpEmailSender:
    if settings.email_backend == "smtp":
        return SmtpEmailSender(
            host=settings.smtp_host,
            port=settings.smtp_port,
            sender=settings.mail_from,
            username=settings.smtp_username,
            password=settings.smtp_password,
            use_tls=settings.smtp_use_tls,
        )
    return ConsoleEmailSender()


def configure_state(app: FastAPI, settings: Settings) -> ConnectionPool | None:
    """
    Create process-wide adapters and store them in app state.

    Returns the connection pool when the postgres backend is used, so the
    caller can close it on shutdown.
    """
    pool = None
    if settings.storage_backend == "postgres":
        logger.info("Connecting to database...")
        # Create connection pool with explicit sizing
        pool = ConnectionPool(
            conninfo=settings.database_url,
            min_size=settings.pool_min_size,
            max_size=settings.pool_max_size,
            open=True,
        )
        logger.info("Running database migrations...")
        run_migrations(pool)
        app.state.account_repository = PostgresAccountRepository(pool)
        app.state.product_repository = PostgresProductRepository(pool)
    else:
        logger.warning("Using in-memory storage; data is lost on restart")
        app.state.account_repository = InMemoryAccountRepository()
        app.state.product_repository = InMemoryProductRepository()

    app.state.pool = pool
    app.state.settings = settings
    app.state.email_sender = _build_email_sender(settings)
    app.state.password_hasher = BcryptPasswordHasher(rounds=settings.bcrypt_cost)
    app.state.token_issuer = JwtTokenIssuer(settings.jwt_secret, settings.jwt_algorithm)
    return pool


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the application; settings default to the environment."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """
        FastAPI lifespan context manager.

        Manages application startup and shutdown:
        - Creates storage, mail, hashing and token adapters on startup
        - Runs migrations on startup (postgres backend)
        - Closes connection pool on shutdown
        """
        logger.info("Starting application...")
        pool = configure_state(app, settings or get_settings())
        logger.info("Application startup complete")

        yield

        # Shutdown
        logger.info("Shutting down application...")
        if pool is not None:
            pool.close()
            logger.info("Database connection pool closed")

    app = FastAPI(
        title="storefront",
        description="E-commerce backend - account verification lifecycle and product catalog",
        version="0.1.0",
        openapi_tags=tags_metadata,
        lifespan=lifespan,
    )

    app.include_router(auth_router, prefix="/api/auth")
    app.include_router(products_router, prefix="/api/products")

    @app.exception_handler(StorefrontError)
    async def storefront_error_handler(request: Request, exc: StorefrontError) -> JSONResponse:
        """Map domain errors that escaped a route to their default status."""
        if exc.status_code >= 500:
            logger.error("Unhandled %s on %s %s", type(exc).__name__, request.method, request.url.path)
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        """
        Report missing or blank auth fields as 400 "All fields are required".

        Any other validation failure (bad email syntax, wrong types, other
        endpoints) keeps FastAPI's default 422 response.
        """
        errors = exc.errors()
        if request.url.path in _AUTH_FORM_PATHS and errors and all(
            _is_blank_field_error(error) for error in errors
        ):
            return JSONResponse(
                status_code=status.HTTP_400_BAD_REQUEST,
                content={"detail": ValidationFailed.message},
            )
        return await request_validation_exception_handler(request, exc)

    @app.get("/health")
    def health_check(request: Request) -> dict[str, str]:
        """
        Health check endpoint with database validation.

        Returns 200 OK if application and database are healthy.
        Raises exception if database connection fails.
        """
        pool = getattr(request.app.state, "pool", None)
        if pool is not None:
            with pool.connection() as conn:
                conn.execute("SELECT 1")

        return {"status": "healthy"}

    return app


app = create_app()
