"""
Console email sender adapter - Implements EmailSender protocol.

This module provides a console-based implementation of the domain's
email sender port, logging outgoing mail instead of delivering it.
"""

import logging

logger = logging.getLogger(__name__)


class ConsoleEmailSender:
    """
    Implements EmailSender protocol via console logging.

    Uses structural subtyping - no explicit inheritance from Protocol.
    For demo/development purposes - OTP mails become visible in the logs.
    """

    def send(self, to: str, subject: str, html_body: str) -> None:
        """
        Log the message at INFO level (simulates email delivery).

        Args:
            to: Recipient email address (normalized by domain layer)
            subject: Mail subject
            html_body: HTML body, including the OTP
        """
        logger.info("[EMAIL] To: %s Subject: %s Body: %s", to, subject, html_body)
