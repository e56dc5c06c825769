"""
Templated account emails.

Each builder returns an EmailMessage with a plain-text body and an HTML
alternative. Delivery is the mailer's job.
"""
from __future__ import annotations

import html as _html
from dataclasses import dataclass
from typing import Optional, Protocol

from core.tokens import RESET_TOKEN_MINUTES, VERIFY_TOKEN_HOURS

APP_NAME = "Auth Company"


class MailDeliveryError(Exception):
    """Raised when a message could not be handed to the mail provider."""


@dataclass(frozen=True)
class EmailMessage:
    subject: str
    text: str
    html: Optional[str] = None
    category: str = ""


class Mailer(Protocol):
    def send(self, to_email: str, message: EmailMessage) -> None: ...


_HTML_SHELL = """<!DOCTYPE html>
<html lang="en">
<body style="font-family: Arial, sans-serif; line-height: 1.6; color: #333; max-width: 600px; margin: 0 auto; padding: 20px;">
  <div style="background: linear-gradient(to right, #4CAF50, #45a049); padding: 20px; text-align: center;">
    <h1 style="color: white; margin: 0;">{title}</h1>
  </div>
  <div style="background-color: #f9f9f9; padding: 20px; border-radius: 0 0 5px 5px;">
    {content}
    <p>Best regards,<br>Your App Team</p>
  </div>
  <p style="text-align: center; color: #888; font-size: 0.8em;">This is an automated message, please do not reply to this email.</p>
</body>
</html>
"""


def _render_html(title: str, content: str) -> str:
    return _HTML_SHELL.format(title=_html.escape(title), content=content)


def verification_email(code: str) -> EmailMessage:
    text = (
        "Thank you for signing up!\n\n"
        f"Your verification code is: {code}\n\n"
        "Enter this code on the verification page to complete your registration.\n"
        f"This code will expire in {VERIFY_TOKEN_HOURS} hours for security reasons.\n\n"
        "If you didn't create an account with us, please ignore this email."
    )
    content = (
        "<p>Thank you for signing up! Your verification code is:</p>"
        f'<div style="text-align: center; margin: 30px 0;"><span style="font-size: 32px; '
        f'font-weight: bold; letter-spacing: 5px; color: #4CAF50;">{_html.escape(code)}</span></div>'
        "<p>Enter this code on the verification page to complete your registration.</p>"
        f"<p>This code will expire in {VERIFY_TOKEN_HOURS} hours for security reasons.</p>"
        "<p>If you didn't create an account with us, please ignore this email.</p>"
    )
    return EmailMessage(
        subject="Verify your email",
        text=text,
        html=_render_html("Verify Your Email", content),
        category="Email Verification",
    )


def welcome_email(name: str) -> EmailMessage:
    text = f"Hi {name},\n\nYour email has been verified. Welcome to {APP_NAME}!"
    content = (
        f"<p>Hi {_html.escape(name)},</p>"
        f"<p>Your email has been verified. Welcome to {APP_NAME}!</p>"
    )
    return EmailMessage(
        subject=f"Welcome to {APP_NAME}",
        text=text,
        html=_render_html("Welcome", content),
        category="Welcome",
    )


def password_reset_request_email(reset_url: str) -> EmailMessage:
    text = (
        "We received a request to reset your password. "
        "If you didn't make this request, please ignore this email.\n\n"
        f"To reset your password, open this link:\n\n{reset_url}\n\n"
        f"This link will expire in {RESET_TOKEN_MINUTES // 60} hour for security reasons."
    )
    safe_url = _html.escape(reset_url, quote=True)
    content = (
        "<p>We received a request to reset your password. "
        "If you didn't make this request, please ignore this email.</p>"
        "<p>To reset your password, click the button below:</p>"
        f'<div style="text-align: center; margin: 30px 0;"><a href="{safe_url}" '
        'style="background-color: #4CAF50; color: white; padding: 12px 20px; text-decoration: none; '
        'border-radius: 5px; font-weight: bold;">Reset Password</a></div>'
        f"<p>This link will expire in {RESET_TOKEN_MINUTES // 60} hour for security reasons.</p>"
    )
    return EmailMessage(
        subject="Reset your password",
        text=text,
        html=_render_html("Password Reset", content),
        category="Password Reset",
    )


def password_reset_success_email() -> EmailMessage:
    text = (
        "We're writing to confirm that your password has been successfully reset.\n\n"
        "If you did not initiate this password reset, please contact our support team immediately."
    )
    content = (
        "<p>We're writing to confirm that your password has been successfully reset.</p>"
        "<p>If you did not initiate this password reset, please contact our support team immediately.</p>"
        "<p>For security reasons, we recommend that you:</p>"
        "<ul><li>Use a strong, unique password</li>"
        "<li>Enable two-factor authentication if available</li>"
        "<li>Avoid using the same password across multiple sites</li></ul>"
    )
    return EmailMessage(
        subject="Password Reset Successful",
        text=text,
        html=_render_html("Password Reset Successful", content),
        category="Password Reset",
    )


__all__ = [
    "EmailMessage",
    "MailDeliveryError",
    "Mailer",
    "verification_email",
    "welcome_email",
    "password_reset_request_email",
    "password_reset_success_email",
]
