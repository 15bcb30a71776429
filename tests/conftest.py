"""
Shared test fixtures and configuration.

This module provides pytest fixtures for:
- A controllable clock for OTP expiry
- A recording email sender that exposes the last OTP sent
- An AccountService wired to in-memory storage and real bcrypt/JWT adapters
"""

import re
from datetime import datetime, timedelta, timezone

import pytest

from storefront.adapters.repository.memory import (
    InMemoryAccountRepository,
    InMemoryProductRepository,
)
from storefront.adapters.security.passwords import BcryptPasswordHasher
from storefront.adapters.security.tokens import JwtTokenIssuer
from storefront.domain.accounts import AccountService
from storefront.domain.catalog import CatalogService
from storefront.domain.exceptions import DeliveryFailed

_CODE_PATTERN = re.compile(r"<b>(\d{6})</b>")


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


class RecordingEmailSender:
    """EmailSender that keeps messages in memory and can be told to fail."""

    def __init__(self) -> None:
        self.sent: list[tuple[str, str, str]] = []
        self.fail = False

    def send(self, to: str, subject: str, html_body: str) -> None:
        if self.fail:
            raise DeliveryFailed()
        self.sent.append((to, subject, html_body))

    def last_code(self, to: str | None = None) -> str:
        """OTP from the most recent message (to `to`, when given)."""
        for recipient, _subject, body in reversed(self.sent):
            if to is None or recipient == to:
                match = _CODE_PATTERN.search(body)
                if match:
                    return match.group(1)
        raise AssertionError(f"No OTP mail sent to {to}")


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def email_sender() -> RecordingEmailSender:
    return RecordingEmailSender()


@pytest.fixture
def account_repository() -> InMemoryAccountRepository:
    return InMemoryAccountRepository()


@pytest.fixture
def password_hasher() -> BcryptPasswordHasher:
    # Lowest bcrypt cost keeps the suite fast
    return BcryptPasswordHasher(rounds=4)


@pytest.fixture
def token_issuer() -> JwtTokenIssuer:
    return JwtTokenIssuer("test-secret-key-with-enough-length-for-hs256")


@pytest.fixture
def account_service(
    account_repository: InMemoryAccountRepository,
    email_sender: RecordingEmailSender,
    password_hasher: BcryptPasswordHasher,
    token_issuer: JwtTokenIssuer,
    clock: FakeClock,
) -> AccountService:
    return AccountService(
        repository=account_repository,
        email_sender=email_sender,
        password_hasher=password_hasher,
        token_issuer=token_issuer,
        clock=clock,
    )


@pytest.fixture
def catalog_service() -> CatalogService:
    return CatalogService(repository=InMemoryProductRepository())
