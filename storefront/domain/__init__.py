"""
Domain layer - Pure business logic with zero framework imports.

This package contains the account verification and credential-recovery
lifecycle plus the product catalog. It defines its own port interfaces for
infrastructure abstraction, ensuring true hexagonal architecture decoupling.
"""

from .accounts import PROFILE_FIELDS, AccountService
from .catalog import CatalogService
from .exceptions import (
    AccountNotFound,
    AccountNotVerified,
    AlreadyVerified,
    CodeExpired,
    DeliveryFailed,
    EmailAlreadyRegistered,
    Forbidden,
    InvalidCode,
    InvalidCredentials,
    InvalidToken,
    ProductNotFound,
    StoreError,
    StorefrontError,
    Unauthenticated,
    ValidationFailed,
)
from .ports import (
    Account,
    AccountRepository,
    AuthType,
    EmailSender,
    LoginResult,
    OneTimeCode,
    OtpPurpose,
    PasswordHasher,
    Product,
    ProductRepository,
    RegisterOutcome,
    RegistrationResult,
    Role,
    TokenIssuer,
)

__all__ = [
    "PROFILE_FIELDS",
    "Account",
    "AccountNotFound",
    "AccountNotVerified",
    "AccountRepository",
    "AccountService",
    "AlreadyVerified",
    "AuthType",
    "CatalogService",
    "CodeExpired",
    "DeliveryFailed",
    "EmailAlreadyRegistered",
    "EmailSender",
    "Forbidden",
    "InvalidCode",
    "InvalidCredentials",
    "InvalidToken",
    "LoginResult",
    "OneTimeCode",
    "OtpPurpose",
    "PasswordHasher",
    "Product",
    "ProductNotFound",
    "ProductRepository",
    "RegisterOutcome",
    "RegistrationResult",
    "Role",
    "StoreError",
    "StorefrontError",
    "TokenIssuer",
    "Unauthenticated",
    "ValidationFailed",
]
