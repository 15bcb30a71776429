"""
Account domain service - verification and credential-recovery lifecycle.

This module contains the core business logic for user accounts:
registration with email OTP, verification, resend, password recovery,
password login, federated login and profile maintenance.

Account Lifecycle
=================

    register ──> UNVERIFIED (verification OTP pending)
                   │  register again / resend: OTP overwritten
                   │  verify-otp with matching, unexpired code
                   v
                 VERIFIED ──> login ──> bearer token

    forgot-password ──> reset OTP pending
                          │  verify-reset-otp: read-only check
                          │  reset-password with matching, unexpired code
                          v
                        password replaced, reset OTP cleared

Check order is part of the contract. Verification reports, in order:
AccountNotFound, AlreadyVerified, InvalidCode, CodeExpired. A wrong code
is always InvalidCode even when the stored code has also expired.

Each state transition is written with a single update_fields() call, so no
account is ever observable half-updated.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any

from .exceptions import (
    AccountNotFound,
    AccountNotVerified,
    AlreadyVerified,
    CodeExpired,
    DeliveryFailed,
    EmailAlreadyRegistered,
    InvalidCode,
    InvalidCredentials,
    InvalidToken,
    Unauthenticated,
    ValidationFailed,
)
from .otp import codes_match, generate_otp, is_expired
from .ports import (
    Account,
    AccountRepository,
    AuthType,
    EmailSender,
    LoginResult,
    OneTimeCode,
    OtpPurpose,
    PasswordHasher,
    RegisterOutcome,
    RegistrationResult,
    Role,
    TokenIssuer,
)

logger = logging.getLogger(__name__)

# Fields a client may change through update_profile()
PROFILE_FIELDS = frozenset(
    {"first_name", "last_name", "dob", "gender", "experience", "profile_image"}
)
# Profile fields that may be changed but never cleared
REQUIRED_PROFILE_FIELDS = frozenset({"first_name", "last_name"})


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class AccountService:
    """
    Domain service for the account lifecycle.

    All collaborators and policy knobs are passed in at construction;
    the service holds no per-request state.
    """

    repository: AccountRepository
    email_sender: EmailSender
    password_hasher: PasswordHasher
    token_issuer: TokenIssuer
    otp_ttl: timedelta = timedelta(minutes=10)
    reset_otp_ttl: timedelta = timedelta(minutes=10)
    resend_otp_ttl: timedelta = timedelta(minutes=5)
    token_ttl: timedelta = timedelta(days=7)
    resend_delivery_strict: bool = True
    allow_admin_self_registration: bool = False
    clock: Callable[[], datetime] = field(default=_utcnow)

    # ------------------------------------------------------------------
    # Registration and verification
    # ------------------------------------------------------------------

    def register(
        self,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
        role: str | None = None,
    ) -> RegistrationResult:
        """
        Register a new account, or re-issue the OTP for an unverified one.

        Args:
            email: User's email address (will be normalized)
            password: Plaintext password (will be hashed)
            first_name: Given name, non-empty after trimming
            last_name: Family name, non-empty after trimming
            role: Requested role; "admin" is honoured only when
                admin self-registration is enabled

        Returns:
            RegistrationResult with the normalized email and whether the
            account was created (OTP_SENT) or already existed (OTP_RESENT)

        Raises:
            ValidationFailed: If any required field is blank
            EmailAlreadyRegistered: If the email belongs to a verified account
            DeliveryFailed: If the OTP email could not be sent. The account
                and OTP are already persisted at that point.
        """
        self._require_fields(email, password, first_name, last_name)
        normalized_email = self._normalize_email(email)

        existing = self.repository.find_by_email(normalized_email)
        if existing is not None:
            if existing.is_verified:
                raise EmailAlreadyRegistered()
            code = self._issue_code(existing, OtpPurpose.VERIFICATION, self.otp_ttl)
            self._send_verification_code(normalized_email, code, self.otp_ttl)
            return RegistrationResult(normalized_email, RegisterOutcome.OTP_RESENT)

        code = generate_otp(self.otp_ttl, self.clock())
        account = Account(
            email=normalized_email,
            password_hash=self.password_hasher.hash(password),
            first_name=first_name.strip(),
            last_name=last_name.strip(),
            role=self._resolve_role(role),
            otp=code.code,
            otp_expires=code.expires_at,
        )
        self.repository.insert(account)
        logger.info("Registered account %s", normalized_email)

        self._send_verification_code(normalized_email, code, self.otp_ttl)
        return RegistrationResult(normalized_email, RegisterOutcome.OTP_SENT)

    def verify_email(self, email: str, code: str) -> Account:
        """
        Consume a verification OTP and mark the account verified.

        Raises, in this order:
            AccountNotFound, AlreadyVerified, InvalidCode, CodeExpired
        """
        account = self._get_by_email(email)
        if account.is_verified:
            raise AlreadyVerified()
        self._check_code(account, OtpPurpose.VERIFICATION, code)

        updated = self.repository.update_fields(
            account.id,
            {"is_verified": True, "otp": None, "otp_expires": None},
        )
        if updated is None:
            raise AccountNotFound()
        logger.info("Verified account %s", account.email)
        return updated

    def resend_code(self, email: str) -> None:
        """
        Issue a fresh verification OTP with the (shorter) resend window.

        Delivery failures raise DeliveryFailed when resend_delivery_strict
        is set; otherwise they are logged and the call succeeds.
        """
        account = self._get_by_email(email)
        if account.is_verified:
            raise AlreadyVerified("Email already verified")

        code = self._issue_code(account, OtpPurpose.VERIFICATION, self.resend_otp_ttl)
        try:
            self._send_verification_code(account.email, code, self.resend_otp_ttl)
        except DeliveryFailed:
            if self.resend_delivery_strict:
                raise
            logger.warning("Resend to %s not delivered; OTP kept for retry", account.email)

    # ------------------------------------------------------------------
    # Password recovery
    # ------------------------------------------------------------------

    def request_password_reset(self, email: str) -> None:
        """Issue a reset OTP and email it."""
        account = self._get_by_email(email)
        code = self._issue_code(account, OtpPurpose.RESET, self.reset_otp_ttl)
        minutes = int(self.reset_otp_ttl.total_seconds() // 60)
        self.email_sender.send(
            account.email,
            "Password Reset OTP",
            f"<p>Your password reset OTP is <b>{code.code}</b>. "
            f"It expires in {minutes} minutes.</p>",
        )

    def verify_reset_code(self, email: str, code: str) -> None:
        """
        Check a reset OTP without consuming it.

        Raises, in this order: AccountNotFound, InvalidCode, CodeExpired
        """
        account = self._get_by_email(email)
        self._check_code(account, OtpPurpose.RESET, code)

    def reset_password(self, email: str, code: str, new_password: str) -> None:
        """
        Replace the password after checking the reset OTP.

        Same check order as verify_reset_code(). On success the reset OTP is
        cleared in the same write that stores the new hash.
        """
        account = self._get_by_email(email)
        self._check_code(account, OtpPurpose.RESET, code)
        if not new_password or not new_password.strip():
            raise ValidationFailed("New password is required")

        updated = self.repository.update_fields(
            account.id,
            {
                "password_hash": self.password_hasher.hash(new_password),
                "reset_otp": None,
                "reset_otp_expires": None,
            },
        )
        if updated is None:
            raise AccountNotFound()
        logger.info("Password reset for %s", account.email)

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------

    def login(self, email: str, password: str) -> LoginResult:
        """
        Authenticate with email and password.

        Raises:
            AccountNotFound: No account for the email
            AccountNotVerified: Email verification not completed
            InvalidCredentials: Password mismatch
        """
        account = self._get_by_email(email)
        if not account.is_verified:
            raise AccountNotVerified()
        if not self.password_hasher.verify(password, account.password_hash):
            raise InvalidCredentials()
        return self._issue_token(account)

    def federated_login(
        self, email: str, first_name: str, last_name: str, provider_id: str
    ) -> LoginResult:
        """
        Log in with an identity asserted by Google, creating the account if needed.

        New accounts are pre-verified and store a hash of the provider id in
        the password slot.
        """
        if not email or not email.strip() or not provider_id:
            raise ValidationFailed()
        normalized_email = self._normalize_email(email)

        account = self.repository.find_by_email(normalized_email)
        if account is None:
            candidate = Account(
                email=normalized_email,
                password_hash=self.password_hasher.hash(provider_id),
                first_name=(first_name or "").strip(),
                last_name=(last_name or "").strip(),
                auth_type=AuthType.GOOGLE,
                is_verified=True,
            )
            try:
                account = self.repository.insert(candidate)
                logger.info("Created federated account %s", normalized_email)
            except EmailAlreadyRegistered:
                # Lost a concurrent insert; the winner's row is the account
                account = self.repository.find_by_email(normalized_email)
                if account is None:
                    raise
        return self._issue_token(account)

    def authenticate(self, token: str | None) -> Account:
        """
        Resolve a bearer token to its account.

        Raises:
            Unauthenticated: Missing token, bad token, or the subject no
                longer exists
        """
        if not token:
            raise Unauthenticated()
        subject = self.token_issuer.verify(token)
        account = self.repository.find_by_id(subject)
        if account is None:
            raise InvalidToken()
        return account

    # ------------------------------------------------------------------
    # Profile
    # ------------------------------------------------------------------

    def get_profile(self, account_id: str) -> Account:
        account = self.repository.find_by_id(account_id)
        if account is None:
            raise AccountNotFound()
        return account

    def update_profile(self, account_id: str, changes: dict[str, Any]) -> Account:
        """
        Update allow-listed profile fields.

        Raises:
            ValidationFailed: If `changes` names a field outside PROFILE_FIELDS,
                or clears first_name or last_name
            AccountNotFound: If the account does not exist
        """
        rejected = sorted(set(changes) - PROFILE_FIELDS)
        if rejected:
            raise ValidationFailed(f"Fields cannot be updated: {', '.join(rejected)}")
        cleared = sorted(
            name
            for name in REQUIRED_PROFILE_FIELDS & set(changes)
            if changes[name] is None or not str(changes[name]).strip()
        )
        if cleared:
            raise ValidationFailed(f"Fields cannot be empty: {', '.join(cleared)}")
        if not changes:
            return self.get_profile(account_id)
        updated = self.repository.update_fields(account_id, changes)
        if updated is None:
            raise AccountNotFound()
        return updated

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _get_by_email(self, email: str) -> Account:
        if not email or not email.strip():
            raise ValidationFailed()
        account = self.repository.find_by_email(self._normalize_email(email))
        if account is None:
            raise AccountNotFound()
        return account

    def _check_code(self, account: Account, purpose: OtpPurpose, submitted: str) -> None:
        """Code match is checked before expiry."""
        pending = account.pending_code(purpose)
        if pending is None or not codes_match(pending.code, submitted):
            raise InvalidCode()
        if is_expired(pending, self.clock()):
            raise CodeExpired()

    def _issue_code(self, account: Account, purpose: OtpPurpose, ttl: timedelta) -> OneTimeCode:
        """Generate a code and overwrite the pending one for `purpose`."""
        code = generate_otp(ttl, self.clock())
        updated = self.repository.update_fields(
            account.id,
            {purpose.code_field: code.code, purpose.expires_field: code.expires_at},
        )
        if updated is None:
            raise AccountNotFound()
        return code

    def _send_verification_code(self, email: str, code: OneTimeCode, ttl: timedelta) -> None:
        minutes = int(ttl.total_seconds() // 60)
        self.email_sender.send(
            email,
            "Verify Your Email",
            f"<p>Your OTP is <b>{code.code}</b>. It expires in {minutes} minutes.</p>",
        )

    def _issue_token(self, account: Account) -> LoginResult:
        token = self.token_issuer.issue(account.id, self.token_ttl)
        return LoginResult(token=token, account=account)

    def _resolve_role(self, requested: str | None) -> Role:
        if requested == Role.ADMIN.value:
            if self.allow_admin_self_registration:
                return Role.ADMIN
            logger.warning("Ignoring self-requested admin role on registration")
        return Role.USER

    def _require_fields(self, *values: str | None) -> None:
        if any(value is None or not str(value).strip() for value in values):
            raise ValidationFailed()

    def _normalize_email(self, email: str) -> str:
        """
        Normalize email address for consistent storage and lookup.

        Applies: strip whitespace + lowercase
        """
        return email.strip().lower()
