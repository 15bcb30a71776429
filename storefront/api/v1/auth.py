"""
Authentication routes.

Defines the account lifecycle endpoints (mounted under /api/auth):
registration, OTP verification and resend, password recovery, password
and Google login, and profile read/update.

Routes are plain `def` functions: the services do blocking work (bcrypt,
psycopg, SMTP), so FastAPI runs them in its threadpool.
"""

from fastapi import APIRouter, Depends, HTTPException, status

from storefront.api.dependencies import get_account_service, get_current_account
from storefront.api.models import (
    EmailRequest,
    ErrorResponse,
    GoogleLoginRequest,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    ProfileResponse,
    RegisterRequest,
    RegisterResponse,
    ResetPasswordRequest,
    UpdateProfileRequest,
    UserView,
    VerifyOtpRequest,
)
from storefront.domain.accounts import AccountService
from storefront.domain.exceptions import AccountNotFound, StorefrontError
from storefront.domain.ports import Account, LoginResult, RegisterOutcome, Role

router = APIRouter(tags=["auth"])

_REGISTER_MESSAGES = {
    RegisterOutcome.OTP_SENT: "OTP sent to email",
    RegisterOutcome.OTP_RESENT: "User already exists but not verified. New OTP sent.",
}


def _http_error(exc: StorefrontError, status_code: int | None = None) -> HTTPException:
    """Translate a domain error, optionally overriding its default status."""
    return HTTPException(status_code=status_code or exc.status_code, detail=exc.message)


def _login_response(result: LoginResult) -> LoginResponse:
    return LoginResponse(token=result.token, user=UserView(**result.account.public_view()))


@router.post(
    "/register",
    response_model=RegisterResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Missing fields or email already registered"},
        500: {"model": ErrorResponse, "description": "Verification email could not be sent"},
    },
    summary="Register a new user",
    description="Submit email, password and name to begin registration. "
    "A 6-digit verification code is sent to the provided email. Registering "
    "again before verification re-issues the code.",
)
def register(
    request_data: RegisterRequest,
    service: AccountService = Depends(get_account_service),
) -> RegisterResponse:
    """
    Register a new user and send a verification code.

    - **email**, **password**, **firstName**, **lastName**: required
    - **role**: optional, "admin" honoured only when enabled in settings
    """
    try:
        result = service.register(
            request_data.email,
            request_data.password,
            request_data.first_name,
            request_data.last_name,
            role=request_data.role,
        )
    except StorefrontError as e:
        raise _http_error(e) from None
    return RegisterResponse(message=_REGISTER_MESSAGES[result.outcome], email=result.email)


@router.post(
    "/verify-otp",
    response_model=MessageResponse,
    responses={400: {"model": ErrorResponse, "description": "Not found, verified, invalid or expired"}},
    summary="Verify email with OTP",
)
def verify_otp(
    request_data: VerifyOtpRequest,
    service: AccountService = Depends(get_account_service),
) -> MessageResponse:
    """Consume the verification code and mark the account verified."""
    try:
        service.verify_email(request_data.email, request_data.otp)
    except AccountNotFound as e:
        raise _http_error(e, status.HTTP_400_BAD_REQUEST) from None
    except StorefrontError as e:
        raise _http_error(e) from None
    return MessageResponse(message="Email verified successfully!")


@router.post(
    "/resend-otp",
    response_model=MessageResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Email already verified"},
        404: {"model": ErrorResponse, "description": "User not found"},
    },
    summary="Resend verification OTP",
)
def resend_otp(
    request_data: EmailRequest,
    service: AccountService = Depends(get_account_service),
) -> MessageResponse:
    try:
        service.resend_code(request_data.email)
    except StorefrontError as e:
        raise _http_error(e) from None
    return MessageResponse(message="OTP resent successfully")


@router.post(
    "/forgot-password",
    response_model=MessageResponse,
    responses={404: {"model": ErrorResponse, "description": "User not found"}},
    summary="Request a password reset OTP",
)
def forgot_password(
    request_data: EmailRequest,
    service: AccountService = Depends(get_account_service),
) -> MessageResponse:
    try:
        service.request_password_reset(request_data.email)
    except StorefrontError as e:
        raise _http_error(e) from None
    return MessageResponse(message="OTP sent to your email")


@router.post(
    "/verify-reset-otp",
    response_model=MessageResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid or expired OTP"},
        404: {"model": ErrorResponse, "description": "User not found"},
    },
    summary="Check a password reset OTP",
    description="Read-only check; the code stays valid for reset-password.",
)
def verify_reset_otp(
    request_data: VerifyOtpRequest,
    service: AccountService = Depends(get_account_service),
) -> MessageResponse:
    try:
        service.verify_reset_code(request_data.email, request_data.otp)
    except StorefrontError as e:
        raise _http_error(e) from None
    return MessageResponse(message="OTP verified")


@router.post(
    "/reset-password",
    response_model=MessageResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid or expired OTP"},
        404: {"model": ErrorResponse, "description": "User not found"},
    },
    summary="Reset password with OTP",
)
def reset_password(
    request_data: ResetPasswordRequest,
    service: AccountService = Depends(get_account_service),
) -> MessageResponse:
    try:
        service.reset_password(request_data.email, request_data.otp, request_data.new_password)
    except StorefrontError as e:
        raise _http_error(e) from None
    return MessageResponse(message="Password reset successful")


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={
        400: {"model": ErrorResponse, "description": "User not found or invalid credentials"},
        403: {"model": ErrorResponse, "description": "Email not verified"},
    },
    summary="Log in with email and password",
)
def login(
    request_data: LoginRequest,
    service: AccountService = Depends(get_account_service),
) -> LoginResponse:
    """Returns a bearer token valid for 7 days and the user projection."""
    try:
        result = service.login(request_data.email, request_data.password)
    except AccountNotFound as e:
        raise _http_error(e, status.HTTP_400_BAD_REQUEST) from None
    except StorefrontError as e:
        raise _http_error(e) from None
    return _login_response(result)


@router.post(
    "/google-login",
    response_model=LoginResponse,
    responses={500: {"model": ErrorResponse, "description": "Store error"}},
    summary="Log in with a Google identity",
)
def google_login(
    request_data: GoogleLoginRequest,
    service: AccountService = Depends(get_account_service),
) -> LoginResponse:
    """Creates a pre-verified account on first use."""
    try:
        result = service.federated_login(
            request_data.email,
            request_data.first_name,
            request_data.last_name,
            request_data.google_id,
        )
    except StorefrontError as e:
        raise _http_error(e) from None
    return _login_response(result)


@router.get(
    "/{account_id}",
    response_model=UserView,
    responses={
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        404: {"model": ErrorResponse, "description": "User not found"},
    },
    summary="Get a user profile",
)
def get_profile(
    account_id: str,
    current: Account = Depends(get_current_account),
    service: AccountService = Depends(get_account_service),
) -> UserView:
    try:
        account = service.get_profile(account_id)
    except StorefrontError as e:
        raise _http_error(e) from None
    return UserView(**account.public_view())


@router.post(
    "/{account_id}/update-profile",
    response_model=ProfileResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Field not allowed"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        403: {"model": ErrorResponse, "description": "Not your profile"},
        404: {"model": ErrorResponse, "description": "User not found"},
    },
    summary="Update profile fields",
    description="Only firstName, lastName, dob, gender, experience and "
    "profileImage may be changed. Users may edit their own profile; admins "
    "may edit any.",
)
def update_profile(
    account_id: str,
    request_data: UpdateProfileRequest,
    current: Account = Depends(get_current_account),
    service: AccountService = Depends(get_account_service),
) -> ProfileResponse:
    if current.id != account_id and current.role != Role.ADMIN:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
    changes = {**request_data.model_dump(exclude_unset=True), **(request_data.model_extra or {})}
    try:
        account = service.update_profile(account_id, changes)
    except StorefrontError as e:
        raise _http_error(e) from None
    return ProfileResponse(
        message="Profile updated successfully", user=UserView(**account.public_view())
    )
