"""SMTP mailer - sends composed digest messages through an SMTP relay.

Runs inside the Celery delivery task; connection errors propagate so the
task can retry.
"""

import logging
import smtplib
from email.message import EmailMessage
from typing import Optional

from config import Settings, settings as app_settings
from domain.notifications.ports import DigestMessage

logger = logging.getLogger(__name__)


class SmtpMailer:
    """Plain-text mail delivery over SMTP.

    Example:
        mailer = SmtpMailer.from_settings()
        mailer.send(message)
    """

    def __init__(
        self,
        host: str = "localhost",
        port: int = 25,
        sender: str = "no-reply@localhost",
        user: Optional[str] = None,
        password: Optional[str] = None,
        use_tls: bool = False,
        timeout: int = 30,
    ):
        self.host = host
        self.port = port
        self.sender = sender
        self.user = user
        self.password = password
        self.use_tls = use_tls
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "SmtpMailer":
        settings = settings or app_settings
        return cls(
            host=settings.SMTP_HOST,
            port=settings.SMTP_PORT,
            sender=settings.MAIL_FROM,
            user=settings.SMTP_USER,
            password=settings.SMTP_PASSWORD,
            use_tls=settings.SMTP_USE_TLS,
            timeout=settings.SMTP_TIMEOUT_SECONDS,
        )

    def build(self, message: DigestMessage) -> EmailMessage:
        """Build the MIME message for a digest"""
        email = EmailMessage()
        email["From"] = self.sender
        email["To"] = message.recipient_email
        email["Subject"] = message.subject
        email.set_content(message.body)
        return email

    def send(self, message: DigestMessage) -> None:
        """Send a digest message.

        Raises:
            smtplib.SMTPException: If the relay rejects the message
            OSError: If the relay cannot be reached
        """
        email = self.build(message)

        with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as smtp:
            if self.use_tls:
                smtp.starttls()
            if self.user and self.password:
                smtp.login(self.user, self.password)
            smtp.send_message(email)

        logger.info(
            "Expiry digest delivered",
            extra={
                "user_id": message.user_id,
                "expiring_soon_count": message.expiring_soon_count,
                "expired_count": message.expired_count,
            }
        )
