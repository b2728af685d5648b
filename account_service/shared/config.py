from __future__ import annotations

import base64
import binascii
import json
import os
from dataclasses import dataclass
from decimal import Decimal
from functools import lru_cache

from dotenv import load_dotenv


load_dotenv()


def _env(name: str, default: str | None = None) -> str | None:
    return os.getenv(name, default)


def _json_list(name: str, default: list) -> list:
    value = _env(name)
    if not value:
        return default
    parsed = json.loads(value)
    if not isinstance(parsed, list):
        raise ValueError(f"{name} must be a JSON list.")
    return parsed


def _bool(name: str, default: bool = False) -> bool:
    value = _env(name)
    if value is None or value == "":
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _pem(name: str) -> str:
    """Keys are accepted as PEM text or as base64 of the PEM text."""
    value = (_env(name, "") or "").strip()
    if not value or "-----BEGIN" in value:
        return value.replace("\\n", "\n")
    try:
        return base64.b64decode(value, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as exc:
        raise ValueError(f"{name} is neither PEM nor base64-encoded PEM.") from exc


@dataclass(frozen=True)
class Settings:
    postgres_dsn: str
    access_token_private_key: str
    access_token_public_key: str
    refresh_token_private_key: str
    refresh_token_public_key: str
    access_token_expired_in: int
    refresh_token_expired_in: int
    access_token_maxage: int
    refresh_token_maxage: int
    client_origin: str
    smtp_host: str
    smtp_port: int
    smtp_user: str
    smtp_password: str
    email_from: str
    tinkoff_api_base: str
    tinkoff_terminal_key: str
    tinkoff_password: str
    tinkoff_timeout_seconds: float
    tinkoff_verify_notifications: bool
    payment_confirmed_status: str
    payment_minor_units: int
    invoice_ttl_days: int
    password_reset_ttl_minutes: int
    signup_bonus: Decimal
    log_level: str
    cors_origins: tuple


def load_settings() -> Settings:
    return Settings(
        postgres_dsn=_env("POSTGRES_DSN", ""),
        access_token_private_key=_pem("ACCESS_TOKEN_PRIVATE_KEY"),
        access_token_public_key=_pem("ACCESS_TOKEN_PUBLIC_KEY"),
        refresh_token_private_key=_pem("REFRESH_TOKEN_PRIVATE_KEY"),
        refresh_token_public_key=_pem("REFRESH_TOKEN_PUBLIC_KEY"),
        access_token_expired_in=int(_env("ACCESS_TOKEN_EXPIRED_IN", "15")),
        refresh_token_expired_in=int(_env("REFRESH_TOKEN_EXPIRED_IN", "60")),
        access_token_maxage=int(_env("ACCESS_TOKEN_MAXAGE", "15")),
        refresh_token_maxage=int(_env("REFRESH_TOKEN_MAXAGE", "60")),
        client_origin=_env("CLIENT_ORIGIN", ""),
        smtp_host=_env("SMTP_HOST", ""),
        smtp_port=int(_env("SMTP_PORT", "587")),
        smtp_user=_env("SMTP_USER", ""),
        smtp_password=_env("SMTP_PASSWORD", ""),
        email_from=_env("EMAIL_FROM", ""),
        tinkoff_api_base=_env("TINKOFF_API_BASE", "https://securepay.tinkoff.ru/v2"),
        tinkoff_terminal_key=_env("TINKOFF_TERMINAL_KEY", ""),
        tinkoff_password=_env("TINKOFF_PASSWORD", ""),
        tinkoff_timeout_seconds=float(_env("TINKOFF_TIMEOUT_SECONDS", "10")),
        tinkoff_verify_notifications=_bool("TINKOFF_VERIFY_NOTIFICATIONS"),
        payment_confirmed_status=_env("PAYMENT_CONFIRMED_STATUS", "CONFIRMED"),
        payment_minor_units=int(_env("PAYMENT_MINOR_UNITS", "100")),
        invoice_ttl_days=int(_env("INVOICE_TTL_DAYS", "4")),
        password_reset_ttl_minutes=int(_env("PASSWORD_RESET_TTL_MINUTES", "15")),
        signup_bonus=Decimal(_env("SIGNUP_BONUS", "100")),
        log_level=_env("LOG_LEVEL", "INFO").upper(),
        cors_origins=tuple(_json_list("CORS_ORIGINS", ["*"])),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()


def reload_settings() -> Settings:
    get_settings.cache_clear()
    return get_settings()
