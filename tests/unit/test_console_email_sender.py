"""
Unit tests for ConsoleEmailSender adapter.

Tests verify the console email sender implements EmailSender protocol
and logs outgoing mail in the expected format.
"""

import logging
from concurrent.futures import ThreadPoolExecutor

import pytest

from storefront.adapters.smtp.console import ConsoleEmailSender


class TestConsoleEmailSenderProtocol:
    """Tests for EmailSender protocol compliance."""

    def test_implements_email_sender_protocol(self) -> None:
        """ConsoleEmailSender implements EmailSender protocol."""
        from storefront.domain.ports import EmailSender

        sender = ConsoleEmailSender()
        assert callable(sender.send)

        def accepts_email_sender(s: EmailSender) -> None:
            pass

        accepts_email_sender(sender)

    def test_no_explicit_inheritance(self) -> None:
        """ConsoleEmailSender uses structural subtyping, not inheritance."""
        assert ConsoleEmailSender.__bases__ == (object,)


class TestSend:
    """Tests for send method."""

    def test_send_logs_at_info(self, caplog: pytest.LogCaptureFixture) -> None:
        sender = ConsoleEmailSender()

        with caplog.at_level(logging.INFO):
            sender.send("test@example.com", "Verify Your Email", "<b>123456</b>")

        assert len(caplog.records) == 1
        assert caplog.records[0].levelno == logging.INFO

    def test_send_format(self, caplog: pytest.LogCaptureFixture) -> None:
        """Log format: [EMAIL] To: ... Subject: ... Body: ..."""
        sender = ConsoleEmailSender()

        with caplog.at_level(logging.INFO):
            sender.send("user@example.com", "Password Reset OTP", "<b>654321</b>")

        assert "[EMAIL]" in caplog.text
        assert "To: user@example.com" in caplog.text
        assert "Subject: Password Reset OTP" in caplog.text
        assert "654321" in caplog.text

    def test_send_returns_none(self) -> None:
        assert ConsoleEmailSender().send("test@example.com", "s", "b") is None


class TestThreadSafety:
    """Tests for thread-safe logging."""

    def test_concurrent_calls_all_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        sender = ConsoleEmailSender()

        with caplog.at_level(logging.INFO), ThreadPoolExecutor(max_workers=5) as executor:
            futures = [
                executor.submit(sender.send, f"user{i}@example.com", "s", f"<b>{100000 + i}</b>")
                for i in range(10)
            ]
            for f in futures:
                f.result()

        assert len(caplog.records) == 10
        for record in caplog.records:
            assert "[EMAIL]" in record.message
