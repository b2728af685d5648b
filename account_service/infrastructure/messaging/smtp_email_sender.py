from __future__ import annotations

from dataclasses import dataclass
from email.mime.text import MIMEText
import logging
import smtplib
import ssl

from account_service.application.dto.auth import EmailMessage
from account_service.application.ports.notification_ports import EmailSenderPort
from account_service.domain.exceptions import EmailDeliveryError


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SmtpSettings:
    host: str
    port: int
    user: str
    password: str
    sender: str

    @property
    def configured(self) -> bool:
        return bool(self.host and self.port and self.user and self.password and self.sender)


class SmtpEmailSender(EmailSenderPort):
    """Plain-text mail over SMTP. Port 465 uses implicit TLS, anything else STARTTLS."""

    def __init__(self, settings: SmtpSettings):
        self._settings = settings

    def send(self, message: EmailMessage) -> None:
        settings = self._settings
        if not settings.configured:
            logger.warning("smtp_email_sender: smtp_not_configured skipped_subject=%s", message.subject)
            return

        msg = MIMEText(message.body, "plain", "utf-8")
        msg["Subject"] = message.subject
        msg["From"] = settings.sender
        msg["To"] = message.to_email

        try:
            if settings.port == 465:
                with smtplib.SMTP_SSL(settings.host, settings.port, context=ssl.create_default_context()) as server:
                    server.login(settings.user, settings.password)
                    server.sendmail(settings.sender, [message.to_email], msg.as_string())
            else:
                with smtplib.SMTP(settings.host, settings.port) as server:
                    server.ehlo()
                    server.starttls(context=ssl.create_default_context())
                    server.login(settings.user, settings.password)
                    server.sendmail(settings.sender, [message.to_email], msg.as_string())
        except (smtplib.SMTPException, OSError) as exc:
            raise EmailDeliveryError("Failed to deliver email.") from exc

        logger.info("smtp_email_sender: email_sent subject=%s", message.subject)
