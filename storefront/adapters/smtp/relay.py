"""
SMTP email sender adapter - Implements EmailSender protocol over smtplib.

Opens one connection per message (STARTTLS + login when credentials are
configured). Transport failures surface as DeliveryFailed.
"""

import logging
import smtplib
from email.message import EmailMessage

from storefront.domain.exceptions import DeliveryFailed

logger = logging.getLogger(__name__)


class SmtpEmailSender:
    """Implements EmailSender protocol via an SMTP relay (e.g. smtp.gmail.com:587)."""

    def __init__(
        self,
        host: str,
        port: int,
        sender: str,
        username: str | None = None,
        password: str | None = None,
        use_tls: bool = True,
        timeout: float = 10.0,
    ) -> None:
        self._host = host
        self._port = port
        self._sender = sender
        self._username = username
        self._password = password
        self._use_tls = use_tls
        self._timeout = timeout

    def send(self, to: str, subject: str, html_body: str) -> None:
        """
        Deliver one HTML message.

        Raises:
            DeliveryFailed: On any SMTP protocol or network error
        """
        message = EmailMessage()
        message["From"] = self._sender
        message["To"] = to
        message["Subject"] = subject
        message.set_content("This message requires an HTML-capable mail client.")
        message.add_alternative(html_body, subtype="html")

        try:
            with smtplib.SMTP(self._host, self._port, timeout=self._timeout) as server:
                server.ehlo()
                if self._use_tls:
                    server.starttls()
                    server.ehlo()
                if self._username and self._password:
                    server.login(self._username, self._password)
                server.send_message(message)
        except (smtplib.SMTPException, OSError) as e:
            logger.error("Email to %s failed: %s", to, e)
            raise DeliveryFailed() from e

        logger.info("Email '%s' sent to %s", subject, to)
