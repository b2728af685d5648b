from __future__ import annotations

import base64
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from account_service.api import deps
from account_service.shared import config


PEM = "-----BEGIN PUBLIC KEY-----\nMFkwEwYHKoZIzj0CAQYIKoZIzj0DAQcDQgAE\n-----END PUBLIC KEY-----\n"

ENV_KEYS = [
    "ACCESS_TOKEN_PUBLIC_KEY",
    "ACCESS_TOKEN_EXPIRED_IN",
    "CORS_ORIGINS",
    "INVOICE_TTL_DAYS",
    "LOG_LEVEL",
    "PAYMENT_CONFIRMED_STATUS",
    "PAYMENT_MINOR_UNITS",
    "SIGNUP_BONUS",
    "TINKOFF_VERIFY_NOTIFICATIONS",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    yield
    config.get_settings.cache_clear()


def test_defaults():
    settings = config.load_settings()

    assert settings.access_token_expired_in == 15
    assert settings.payment_confirmed_status == "CONFIRMED"
    assert settings.payment_minor_units == 100
    assert settings.invoice_ttl_days == 4
    assert settings.signup_bonus == Decimal("100")
    assert settings.tinkoff_verify_notifications is False
    assert settings.cors_origins == ("*",)
    assert settings.log_level == "INFO"


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("PAYMENT_CONFIRMED_STATUS", "PAID")
    monkeypatch.setenv("PAYMENT_MINOR_UNITS", "1")
    monkeypatch.setenv("SIGNUP_BONUS", "0")
    monkeypatch.setenv("TINKOFF_VERIFY_NOTIFICATIONS", "true")
    monkeypatch.setenv("CORS_ORIGINS", '["https://app.example.com"]')
    monkeypatch.setenv("LOG_LEVEL", "debug")

    settings = config.reload_settings()

    assert settings.payment_confirmed_status == "PAID"
    assert settings.payment_minor_units == 1
    assert settings.signup_bonus == Decimal("0")
    assert settings.tinkoff_verify_notifications is True
    assert settings.cors_origins == ("https://app.example.com",)
    assert settings.log_level == "DEBUG"
    assert config.get_settings() is settings


def test_keys_accept_pem_with_escaped_newlines(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("ACCESS_TOKEN_PUBLIC_KEY", PEM.replace("\n", "\\n"))

    assert config.load_settings().access_token_public_key == PEM


def test_keys_accept_base64_pem(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("ACCESS_TOKEN_PUBLIC_KEY", base64.b64encode(PEM.encode("utf-8")).decode("ascii"))

    assert config.load_settings().access_token_public_key == PEM


def test_garbage_key_is_rejected(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("ACCESS_TOKEN_PUBLIC_KEY", "not a key!")

    with pytest.raises(ValueError):
        config.load_settings()


def test_cors_origins_must_be_a_list(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("CORS_ORIGINS", '"*"')

    with pytest.raises(ValueError):
        config.load_settings()


def _pem_pair() -> tuple[str, str]:
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    private_pem = key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode("utf-8")
    public_pem = key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    ).decode("utf-8")
    return private_pem, public_pem


def test_reload_rebuilds_settings_derived_adapters(monkeypatch: pytest.MonkeyPatch):
    access_private, access_public = _pem_pair()
    refresh_private, refresh_public = _pem_pair()
    monkeypatch.setenv("ACCESS_TOKEN_PRIVATE_KEY", access_private)
    monkeypatch.setenv("ACCESS_TOKEN_PUBLIC_KEY", access_public)
    monkeypatch.setenv("REFRESH_TOKEN_PRIVATE_KEY", refresh_private)
    monkeypatch.setenv("REFRESH_TOKEN_PUBLIC_KEY", refresh_public)
    monkeypatch.setenv("ACCESS_TOKEN_EXPIRED_IN", "15")
    monkeypatch.setenv("SMTP_HOST", "smtp-old.example.com")
    now = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)

    config.reload_settings()
    before = deps._get_token_service().create_access_token(user_id="user-1", now=now)
    old_sender = deps._get_email_sender()
    assert deps._get_token_service() is deps._get_token_service()

    monkeypatch.setenv("ACCESS_TOKEN_EXPIRED_IN", "5")
    monkeypatch.setenv("SMTP_HOST", "smtp-new.example.com")
    config.reload_settings()
    after = deps._get_token_service().create_access_token(user_id="user-1", now=now)

    assert before.expires_at - before.issued_at == timedelta(minutes=15)
    assert after.expires_at - after.issued_at == timedelta(minutes=5)
    assert deps._get_email_sender() is not old_sender
    assert deps._get_email_sender()._settings.host == "smtp-new.example.com"
