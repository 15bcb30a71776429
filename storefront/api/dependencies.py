"""
FastAPI dependencies - Dependency injection factories.

This module provides Depends() factories for injecting
domain services and infrastructure adapters into routes.

Process-wide adapters (repositories, mail sender, hasher, token issuer)
are created once during app lifespan startup and stored in app.state;
services are cheap dataclasses assembled per request from that state.
"""

from datetime import timedelta

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from storefront.config.settings import Settings, get_settings
from storefront.domain.accounts import AccountService
from storefront.domain.catalog import CatalogService
from storefront.domain.exceptions import Unauthenticated
from storefront.domain.ports import Account, Role


def get_app_settings(request: Request) -> Settings:
    """Settings stored at startup, falling back to the cached environment settings."""
    return getattr(request.app.state, "settings", None) or get_settings()


def get_account_service(request: Request) -> AccountService:
    """
    Create account service with injected dependencies.

    Wires together the repository, email sender, password hasher and token
    issuer with the OTP and token windows from settings.
    """
    state = request.app.state
    settings = get_app_settings(request)
    return AccountService(
        repository=state.account_repository,
        email_sender=state.email_sender,
        password_hasher=state.password_hasher,
        token_issuer=state.token_issuer,
        otp_ttl=timedelta(minutes=settings.otp_ttl_minutes),
        reset_otp_ttl=timedelta(minutes=settings.reset_otp_ttl_minutes),
        resend_otp_ttl=timedelta(minutes=settings.resend_otp_ttl_minutes),
        token_ttl=timedelta(days=settings.token_ttl_days),
        resend_delivery_strict=settings.resend_delivery_strict,
        allow_admin_self_registration=settings.allow_admin_self_registration,
    )


def get_catalog_service(request: Request) -> CatalogService:
    """Create catalog service with the product repository from app state."""
    return CatalogService(repository=request.app.state.product_repository)


# Bearer token security scheme for OpenAPI documentation.
# auto_error=False so that missing tokens get the same 401 body as bad ones.
http_bearer = HTTPBearer(auto_error=False)


def get_current_account(
    credentials: HTTPAuthorizationCredentials | None = Depends(http_bearer),
    service: AccountService = Depends(get_account_service),
) -> Account:
    """
    Resolve the Authorization: Bearer token to an account.

    Returns 401 for a missing, malformed, expired or orphaned token.
    """
    token = credentials.credentials if credentials is not None else None
    try:
        return service.authenticate(token)
    except Unauthenticated as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=e.message,
            headers={"WWW-Authenticate": "Bearer"},
        ) from None


def require_admin(account: Account = Depends(get_current_account)) -> Account:
    """Allow only admin accounts through."""
    if account.role != Role.ADMIN:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
    return account
