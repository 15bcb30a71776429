"""
API request and response models.

Pydantic models for FastAPI endpoint validation and OpenAPI schema generation.
JSON bodies use camelCase keys (firstName, newPassword, ...); Python code
uses snake_case attributes.
"""

from datetime import date

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model accepting both camelCase and snake_case keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RegisterRequest(CamelModel):
    """
    Request model for user registration.

    Fields are optional at the schema level so that a missing or blank field
    is reported as 400 "All fields are required" by the domain, not 422.
    """

    email: EmailStr | None = None
    password: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    role: str | None = Field(default=None, description="Optional requested role")


class RegisterResponse(BaseModel):
    """Response model for successful registration."""

    message: str
    email: str


class VerifyOtpRequest(BaseModel):
    """Request model for verify-otp and verify-reset-otp."""

    email: EmailStr
    otp: str = Field(..., min_length=1, description="6-digit one-time code")


class EmailRequest(BaseModel):
    """Request model for endpoints keyed only by email."""

    email: EmailStr


class ResetPasswordRequest(CamelModel):
    """Request model for completing a password reset."""

    email: EmailStr
    otp: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=1)


class LoginRequest(BaseModel):
    """Request model for password login."""

    email: EmailStr
    password: str = Field(..., min_length=1)


class GoogleLoginRequest(CamelModel):
    """Request model for federated login with a Google identity."""

    email: EmailStr
    first_name: str = ""
    last_name: str = ""
    google_id: str = Field(..., min_length=1)


class UserView(CamelModel):
    """Safe projection of an account."""

    id: str
    email: str
    first_name: str
    last_name: str
    role: str
    auth_type: str
    is_verified: bool
    profile_image: str | None = None
    dob: date | None = None
    gender: str | None = None
    experience: str | None = None


class LoginResponse(BaseModel):
    """Response model for login and google-login."""

    token: str
    user: UserView


class UpdateProfileRequest(CamelModel):
    """
    Allow-listed profile fields.

    Unknown keys are kept and passed to the domain, which rejects them
    with 400 so that no client can overwrite role, verification state or
    credentials through this endpoint.
    """

    model_config = ConfigDict(extra="allow")

    first_name: str | None = None
    last_name: str | None = None
    dob: date | None = None
    gender: str | None = None
    experience: str | None = None
    profile_image: str | None = None


class ProfileResponse(BaseModel):
    """Response model for profile updates."""

    message: str
    user: UserView


class ProductCreate(CamelModel):
    """Request model for creating a product."""

    name: str = Field(..., min_length=1)
    price: float = Field(..., ge=0)
    description: str = ""
    image: str | None = None
    extra_images: list[str] = Field(default_factory=list)
    category: str | None = None
    sub_category: str | None = None


class ProductUpdate(CamelModel):
    """Request model for partial product updates."""

    model_config = ConfigDict(extra="allow")

    name: str | None = Field(default=None, min_length=1)
    price: float | None = Field(default=None, ge=0)
    description: str | None = None
    image: str | None = None
    extra_images: list[str] | None = None
    category: str | None = None
    sub_category: str | None = None


class ProductView(CamelModel):
    """Product as returned to clients."""

    id: str
    name: str
    price: float
    description: str
    image: str | None = None
    extra_images: list[str]
    category: str | None = None
    sub_category: str | None = None


class MessageResponse(BaseModel):
    """Response model for endpoints that only acknowledge."""

    message: str


class ErrorResponse(BaseModel):
    """Standard error response model."""

    detail: str
