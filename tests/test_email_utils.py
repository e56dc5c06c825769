import smtplib
from dataclasses import replace

import pytest

from app import email_utils
from core import emails
from core.emails import MailDeliveryError


class DummySMTP:
    instances = []

    def __init__(self, host, port, timeout=None):
        self.host = host
        self.port = port
        self.calls = []
        DummySMTP.instances.append(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def starttls(self):
        self.calls.append("starttls")

    def login(self, user, password):
        self.calls.append(("login", user))

    def sendmail(self, from_addr, to_addrs, msg):
        self.calls.append(("sendmail", from_addr, to_addrs, msg))


@pytest.fixture
def mail_settings(settings):
    return replace(
        settings,
        email_user="mailer@example.com",
        email_password="pw",
        email_from="noreply@example.com",
        smtp_server="smtp.example.com",
        smtp_port=2525,
    )


@pytest.fixture(autouse=True)
def _reset_dummy():
    DummySMTP.instances = []


def test_send_uses_starttls_and_login(monkeypatch, mail_settings):
    monkeypatch.setattr(email_utils.smtplib, "SMTP", DummySMTP)

    email_utils.SmtpMailer(mail_settings).send("a@x.com", emails.verification_email("123456"))

    server = DummySMTP.instances[0]
    assert (server.host, server.port) == ("smtp.example.com", 2525)
    assert server.calls[0] == "starttls"
    assert server.calls[1] == ("login", "mailer@example.com")
    _, from_addr, to_addrs, raw = server.calls[2]
    assert from_addr == "noreply@example.com"
    assert to_addrs == ["a@x.com"]
    assert "Subject: Verify your email" in raw


def test_gmail_forces_from_to_login_user(monkeypatch, mail_settings):
    monkeypatch.setattr(email_utils.smtplib, "SMTP", DummySMTP)
    gmail = replace(mail_settings, smtp_server="smtp.gmail.com")

    email_utils.SmtpMailer(gmail).send("a@x.com", emails.welcome_email("A"))

    assert DummySMTP.instances[0].calls[2][1] == "mailer@example.com"


def test_missing_credentials_raise(settings):
    with pytest.raises(MailDeliveryError):
        email_utils.SmtpMailer(settings).send("a@x.com", emails.welcome_email("A"))


def test_smtp_failure_is_wrapped(monkeypatch, mail_settings):
    class BrokenSMTP(DummySMTP):
        def login(self, user, password):
            raise smtplib.SMTPAuthenticationError(535, b"bad credentials")

    monkeypatch.setattr(email_utils.smtplib, "SMTP", BrokenSMTP)
    with pytest.raises(MailDeliveryError):
        email_utils.SmtpMailer(mail_settings).send("a@x.com", emails.welcome_email("A"))


def test_connection_refused_is_wrapped(monkeypatch, mail_settings):
    def refuse(*args, **kwargs):
        raise ConnectionRefusedError("refused")

    monkeypatch.setattr(email_utils.smtplib, "SMTP", refuse)
    with pytest.raises(MailDeliveryError):
        email_utils.SmtpMailer(mail_settings).send("a@x.com", emails.welcome_email("A"))


def test_templates():
    verify = emails.verification_email("654321")
    assert "654321" in verify.text and "654321" in verify.html
    assert "24 hours" in verify.text

    reset = emails.password_reset_request_email("http://client.test/reset-password/abc")
    assert "http://client.test/reset-password/abc" in reset.text
    assert 'href="http://client.test/reset-password/abc"' in reset.html

    welcome = emails.welcome_email("<Ann>")
    assert "&lt;Ann&gt;" in welcome.html

    assert emails.password_reset_success_email().subject == "Password Reset Successful"
