from __future__ import annotations

import smtplib

import pytest

from account_service.application.dto.auth import EmailMessage
from account_service.application.use_cases.email_messages import (
    display_first_name,
    reset_password_email,
    resolve_language,
    verification_email,
)
from account_service.domain.exceptions import EmailDeliveryError
from account_service.infrastructure.messaging import smtp_email_sender
from account_service.infrastructure.messaging.smtp_email_sender import SmtpEmailSender, SmtpSettings


class FakeSMTP:
    instances: list["FakeSMTP"] = []

    def __init__(self, host, port, **kwargs):
        self.host = host
        self.port = port
        self.calls: list[str] = []
        self.sent: list[tuple] = []
        FakeSMTP.instances.append(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def ehlo(self):
        self.calls.append("ehlo")

    def starttls(self, context=None):
        self.calls.append("starttls")

    def login(self, user, password):
        self.calls.append("login")

    def sendmail(self, sender, recipients, body):
        self.sent.append((sender, recipients, body))


def _settings(**overrides) -> SmtpSettings:
    values = dict(
        host="smtp.example.com",
        port=587,
        user="mailer",
        password="pw",
        sender="noreply@example.com",
    )
    values.update(overrides)
    return SmtpSettings(**values)


def _message() -> EmailMessage:
    return EmailMessage(to_email="ivan@example.com", subject="Hello", body="Body")


@pytest.mark.parametrize(
    "language, expected",
    [(None, "en"), ("", "en"), ("RU", "ru"), (" es ", "es"), ("ke", "ke"), ("de", "en")],
)
def test_resolve_language_falls_back_to_english(language, expected):
    assert resolve_language(language) == expected


def test_greeting_uses_given_name():
    assert display_first_name("Ivanov Ivan") == "Ivan"
    assert display_first_name("Cher") == "Cher"


def test_links_point_at_client_origin():
    verify = verification_email(
        to_email="a@b.c", name="Ivanov Ivan", client_origin="example.com", code="abc", language="en"
    )
    reset = reset_password_email(
        to_email="a@b.c", name="Ivanov Ivan", client_origin="example.com", code="xyz", language="es"
    )

    assert "https://www.example.com/auth/verify/abc" in verify.body
    assert verify.body.startswith("Hi, Ivan!")
    assert "https://www.example.com/auth/reset-password/xyz" in reset.body
    assert reset.body.startswith("Hola, Ivan!")


def test_starttls_delivery(monkeypatch: pytest.MonkeyPatch):
    FakeSMTP.instances = []
    monkeypatch.setattr(smtp_email_sender.smtplib, "SMTP", FakeSMTP)

    SmtpEmailSender(_settings()).send(_message())

    [server] = FakeSMTP.instances
    assert server.calls == ["ehlo", "starttls", "login"]
    [(sender, recipients, body)] = server.sent
    assert sender == "noreply@example.com"
    assert recipients == ["ivan@example.com"]
    assert "Subject: Hello" in body


def test_implicit_tls_on_465(monkeypatch: pytest.MonkeyPatch):
    FakeSMTP.instances = []
    monkeypatch.setattr(smtp_email_sender.smtplib, "SMTP_SSL", FakeSMTP)

    SmtpEmailSender(_settings(port=465)).send(_message())

    [server] = FakeSMTP.instances
    assert server.calls == ["login"]


def test_unconfigured_sender_skips_delivery(monkeypatch: pytest.MonkeyPatch):
    FakeSMTP.instances = []
    monkeypatch.setattr(smtp_email_sender.smtplib, "SMTP", FakeSMTP)

    SmtpEmailSender(_settings(host="")).send(_message())

    assert FakeSMTP.instances == []


def test_smtp_failure_is_wrapped(monkeypatch: pytest.MonkeyPatch):
    def refuse(*args, **kwargs):
        raise smtplib.SMTPConnectError(421, "busy")

    monkeypatch.setattr(smtp_email_sender.smtplib, "SMTP", refuse)

    with pytest.raises(EmailDeliveryError):
        SmtpEmailSender(_settings()).send(_message())
