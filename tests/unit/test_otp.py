"""
Unit tests for one-time code generation and checks.
"""

from datetime import datetime, timedelta, timezone

from storefront.domain.otp import codes_match, generate_otp, is_expired
from storefront.domain.ports import OneTimeCode

NOW = datetime(2024, 1, 1, tzinfo=timezone.utc)


class TestGenerateOtp:
    """Tests for generate_otp()."""

    def test_code_is_six_digit_string(self) -> None:
        """Code is a string in 100000-999999 (no leading zero)."""
        for _ in range(200):
            code = generate_otp(timedelta(minutes=10), NOW).code
            assert isinstance(code, str)
            assert len(code) == 6
            assert 100_000 <= int(code) <= 999_999

    def test_expiry_is_now_plus_window(self) -> None:
        assert generate_otp(timedelta(minutes=5), NOW).expires_at == NOW + timedelta(minutes=5)

    def test_codes_vary(self) -> None:
        """Codes are not always the same (randomness check)."""
        codes = {generate_otp(timedelta(minutes=10), NOW).code for _ in range(10)}
        assert len(codes) >= 2


class TestCodesMatch:
    """Tests for codes_match()."""

    def test_equal_codes(self) -> None:
        assert codes_match("123456", "123456") is True

    def test_different_codes(self) -> None:
        assert codes_match("123456", "654321") is False

    def test_no_stored_code(self) -> None:
        assert codes_match(None, "123456") is False
        assert codes_match("", "") is False

    def test_no_submitted_code(self) -> None:
        assert codes_match("123456", None) is False


class TestIsExpired:
    """Expiry is inclusive of the expiry instant."""

    def test_before_expiry(self) -> None:
        code = OneTimeCode("123456", NOW + timedelta(seconds=1))
        assert is_expired(code, NOW) is False

    def test_at_expiry(self) -> None:
        assert is_expired(OneTimeCode("123456", NOW), NOW) is True

    def test_after_expiry(self) -> None:
        assert is_expired(OneTimeCode("123456", NOW), NOW + timedelta(seconds=1)) is True
