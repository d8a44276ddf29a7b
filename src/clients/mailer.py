from __future__ import annotations

import logging
import smtplib
from email.message import EmailMessage
from email.utils import formataddr

from config import AppSettings

logger = logging.getLogger(__name__)


class MailerError(RuntimeError):
    pass


class Mailer:
    """Sends HTML mail to a single recipient over SMTP with STARTTLS."""

    def __init__(
        self,
        *,
        host: str,
        port: int,
        from_addr: str,
        to_addr: str,
        password: str,
        sender_name: str = "Rate Rebooker",
        timeout: float = 10.0,
    ) -> None:
        self.host = host
        self.port = port
        self.from_addr = from_addr
        self.to_addr = to_addr
        self.password = password
        self.sender_name = sender_name
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: AppSettings) -> Mailer | None:
        if not settings.mail_enabled:
            return None
        return cls(
            host=settings.smtp_host,
            port=settings.smtp_port,
            from_addr=settings.from_mail,
            to_addr=settings.to_mail,
            password=settings.mail_pass,
        )

    def build_message(self, subject: str, html_body: str) -> EmailMessage:
        message = EmailMessage()
        message["From"] = formataddr((self.sender_name, self.from_addr))
        message["To"] = self.to_addr
        message["Subject"] = subject
        message.set_content(html_body, subtype="html")
        return message

    def send(self, subject: str, html_body: str) -> None:
        message = self.build_message(subject, html_body)
        try:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as smtp:
                smtp.starttls()
                smtp.login(self.from_addr, self.password)
                smtp.send_message(message)
        except (smtplib.SMTPException, OSError) as exc:
            raise MailerError(f"Sending mail via {self.host}:{self.port} failed: {exc}") from exc
        logger.info("Sent mail %r to %s", subject, self.to_addr)


__all__ = ["Mailer", "MailerError"]
