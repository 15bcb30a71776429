"""
Domain exceptions - Semantic error types for the account lifecycle and catalog.

This module defines domain-specific exceptions that communicate
business rule violations without leaking infrastructure details.
Each exception carries the HTTP status code it is reported with by default
and a client-facing message; routes may override the status per endpoint.
"""


class StorefrontError(Exception):
    """Base class for storefront domain errors."""

    status_code = 500
    message = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)
        self.message = message or self.message


class ValidationFailed(StorefrontError):
    """Missing or malformed input."""

    status_code = 400
    message = "All fields are required"


class EmailAlreadyRegistered(StorefrontError):
    """Email belongs to a verified account, or lost the uniqueness race."""

    status_code = 400
    message = "Email already registered"


class AlreadyVerified(StorefrontError):
    """Account has already completed email verification."""

    status_code = 400
    message = "Already verified"


class AccountNotFound(StorefrontError):
    """No account exists for the given email or identifier."""

    status_code = 404
    message = "User not found"


class InvalidCode(StorefrontError):
    """No pending OTP, or the submitted OTP does not match."""

    status_code = 400
    message = "Invalid OTP"


class CodeExpired(StorefrontError):
    """Submitted OTP matches but its expiry has passed."""

    status_code = 400
    message = "OTP expired"


class AccountNotVerified(StorefrontError):
    """Password login attempted before email verification."""

    status_code = 403
    message = "Email not verified"


class InvalidCredentials(StorefrontError):
    """Password does not match the stored hash."""

    status_code = 400
    message = "Invalid credentials"


class Unauthenticated(StorefrontError):
    """Request carries no usable bearer token."""

    status_code = 401
    message = "Not authenticated"


class InvalidToken(Unauthenticated):
    """Bearer token has a bad signature, is malformed, or has expired."""


class Forbidden(StorefrontError):
    """Authenticated account is not allowed to perform the action."""

    status_code = 403
    message = "Forbidden"


class ProductNotFound(StorefrontError):
    """No product exists for the given identifier."""

    status_code = 404
    message = "Product not found"


class DeliveryFailed(StorefrontError):
    """
    Outbound email could not be delivered.

    The state change that preceded delivery (account, OTP) is already
    committed; clients recover via resend.
    """

    status_code = 500
    message = "Email delivery failed"


class StoreError(StorefrontError):
    """Unexpected persistence failure."""

    status_code = 500
    message = "Internal server error"
