"""
Small SMTP helpers used by the identity service.
"""
from __future__ import annotations

import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional

from app.config import Settings
from core.emails import EmailMessage, MailDeliveryError

log = logging.getLogger(__name__)


def _effective_from(email_from: str | None, email_user: str | None, smtp_server: str) -> str:
    # Gmail rewrites or blocks a From that differs from the authenticated user.
    if "gmail" in (smtp_server or "").lower() and email_user:
        return email_user
    return email_from or email_user or "noreply@localhost"


class SmtpMailer:
    def __init__(self, settings: Settings, timeout: float = 30.0):
        self.settings = settings
        self.timeout = timeout

    def _build(self, to_email: str, subject: str, body: str, html: Optional[str]):
        if html:
            msg = MIMEMultipart("alternative")
            msg.attach(MIMEText(body, "plain"))
            msg.attach(MIMEText(html, "html"))
        else:
            msg = MIMEText(body)
        msg["Subject"] = subject
        msg["From"] = _effective_from(
            self.settings.email_from, self.settings.email_user, self.settings.smtp_server
        )
        msg["To"] = to_email
        return msg

    def send_text_email(self, to_email: str, subject: str, body: str, html: Optional[str] = None) -> None:
        email_user = self.settings.email_user
        email_password = self.settings.email_password
        if not (email_user and email_password):
            raise MailDeliveryError("Email credentials not configured. Set EMAIL_USER and EMAIL_PASSWORD.")

        msg = self._build(to_email, subject, body, html)
        try:
            with smtplib.SMTP(self.settings.smtp_server, self.settings.smtp_port, timeout=self.timeout) as server:
                server.starttls()
                server.login(email_user, email_password)
                server.sendmail(msg["From"], [to_email], msg.as_string())
        except (smtplib.SMTPException, OSError) as exc:
            raise MailDeliveryError(f"Failed to send email: {exc.__class__.__name__}") from exc
        log.info("Email sent", extra={"to": to_email, "subject": subject})

    def send(self, to_email: str, message: EmailMessage) -> None:
        self.send_text_email(to_email, message.subject, message.text, html=message.html)


__all__ = ["MailDeliveryError", "SmtpMailer"]
