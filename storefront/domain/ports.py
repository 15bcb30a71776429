"""
Port interfaces - Protocol definitions for infrastructure abstraction.

This module defines the interfaces (ports) that the domain requires
from infrastructure, together with the records that cross them.
Adapters implement these protocols.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Any, Protocol


class Role(str, Enum):
    """Account role. Only a binary user/admin distinction exists."""

    USER = "user"
    ADMIN = "admin"


class AuthType(str, Enum):
    """How the account was created."""

    LOCAL = "local"
    GOOGLE = "google"


class OtpPurpose(str, Enum):
    """
    Which pending OTP slot a code belongs to.

    Each purpose maps to a (code, expiry) column pair on the account:
    - VERIFICATION: otp / otp_expires
    - RESET: reset_otp / reset_otp_expires
    """

    VERIFICATION = "verification"
    RESET = "reset"

    @property
    def code_field(self) -> str:
        return "otp" if self is OtpPurpose.VERIFICATION else "reset_otp"

    @property
    def expires_field(self) -> str:
        return "otp_expires" if self is OtpPurpose.VERIFICATION else "reset_otp_expires"


class RegisterOutcome(Enum):
    """Result of a successful registration call."""

    OTP_SENT = "otp_sent"
    OTP_RESENT = "otp_resent"


@dataclass(frozen=True)
class OneTimeCode:
    """A 6-digit code and the instant after which it is no longer accepted."""

    code: str
    expires_at: datetime


@dataclass
class Account:
    """
    User account as stored by the credential store.

    `id` is assigned by the store on insert and never changes.
    """

    email: str
    password_hash: str
    first_name: str = ""
    last_name: str = ""
    id: str | None = None
    is_verified: bool = False
    role: Role = Role.USER
    auth_type: AuthType = AuthType.LOCAL
    otp: str | None = None
    otp_expires: datetime | None = None
    reset_otp: str | None = None
    reset_otp_expires: datetime | None = None
    dob: date | None = None
    gender: str | None = None
    experience: str | None = None
    profile_image: str | None = None

    def pending_code(self, purpose: OtpPurpose) -> OneTimeCode | None:
        """Return the pending OTP for `purpose`, or None when none is outstanding."""
        code = getattr(self, purpose.code_field)
        expires_at = getattr(self, purpose.expires_field)
        if not code or expires_at is None:
            return None
        return OneTimeCode(code=code, expires_at=expires_at)

    def public_view(self) -> dict[str, Any]:
        """Projection safe to return to clients: no password hash, no OTPs."""
        return {
            "id": self.id,
            "email": self.email,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "role": self.role.value,
            "auth_type": self.auth_type.value,
            "is_verified": self.is_verified,
            "profile_image": self.profile_image,
            "dob": self.dob,
            "gender": self.gender,
            "experience": self.experience,
        }


@dataclass
class Product:
    """Catalog entry."""

    name: str
    price: float
    description: str = ""
    image: str | None = None
    extra_images: list[str] = field(default_factory=list)
    category: str | None = None
    sub_category: str | None = None
    id: str | None = None


@dataclass(frozen=True)
class RegistrationResult:
    """Normalized email and whether the OTP went to a new or existing account."""

    email: str
    outcome: RegisterOutcome


@dataclass(frozen=True)
class LoginResult:
    """Bearer token plus the account it was issued for."""

    token: str
    account: Account


class AccountRepository(Protocol):
    """Port interface for account persistence."""

    def find_by_email(self, email: str) -> Account | None:
        """Return the account for a normalized email, or None."""
        ...

    def find_by_id(self, account_id: str) -> Account | None:
        """Return the account with this identifier, or None."""
        ...

    def insert(self, account: Account) -> Account:
        """
        Persist a new account and return it with its store-assigned id.

        Raises:
            EmailAlreadyRegistered: If the email unique constraint rejects the row
            StoreError: On any other persistence failure
        """
        ...

    def update_fields(self, account_id: str, changes: dict[str, Any]) -> Account | None:
        """
        Atomically overwrite the given columns and return the updated account.

        Returns None if no account has this identifier.
        """
        ...


class ProductRepository(Protocol):
    """Port interface for catalog persistence."""

    def search(self, query: str) -> list[Product]:
        """Return products whose name contains `query`, case-insensitively."""
        ...

    def get(self, product_id: str) -> Product | None:
        ...

    def insert(self, product: Product) -> Product:
        ...

    def update_fields(self, product_id: str, changes: dict[str, Any]) -> Product | None:
        ...

    def delete(self, product_id: str) -> bool:
        """Delete a product. Returns False if it did not exist."""
        ...


class EmailSender(Protocol):
    """Port interface for email delivery."""

    def send(self, to: str, subject: str, html_body: str) -> None:
        """
        Deliver a transactional email.

        Raises:
            DeliveryFailed: If the transport rejects or cannot reach the server
        """
        ...


class PasswordHasher(Protocol):
    """Port interface for one-way password hashing."""

    def hash(self, plain: str) -> str:
        ...

    def verify(self, plain: str, hashed: str) -> bool:
        ...


class TokenIssuer(Protocol):
    """Port interface for signed bearer tokens."""

    def issue(self, subject: str, ttl: timedelta) -> str:
        """Sign a token whose subject is `subject`, valid for `ttl`."""
        ...

    def verify(self, token: str) -> str:
        """
        Return the token subject.

        Raises:
            InvalidToken: On bad signature, malformed token, or expiry
        """
        ...
