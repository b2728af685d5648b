from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal


@dataclass(frozen=True)
class AuthUserOutput:
    id: str
    name: str
    email: str
    role: str
    photo: str | None
    verified: bool
    is_bot: bool


@dataclass(frozen=True)
class RegisterUserInput:
    name: str
    email: str
    password: str
    password_confirm: str
    language: str | None = None


@dataclass(frozen=True)
class RegisterUserOutput:
    user: AuthUserOutput


@dataclass(frozen=True)
class RegisterBotOutput:
    user: AuthUserOutput
    profile_id: str
    telegram_token: str


@dataclass(frozen=True)
class VerifyEmailInput:
    code: str


@dataclass(frozen=True)
class LoginUserInput:
    email: str
    password: str
    session: str | None


@dataclass(frozen=True)
class LogoutUserInput:
    user_id: str | None


@dataclass(frozen=True)
class RefreshAccessTokenInput:
    refresh_token: str


@dataclass(frozen=True)
class CheckAccessTokenInput:
    access_token: str


@dataclass(frozen=True)
class ForgotPasswordInput:
    email: str
    language: str | None = None


@dataclass(frozen=True)
class ResetPasswordInput:
    code: str
    password: str
    password_confirm: str


@dataclass(frozen=True)
class TokenDetails:
    token: str
    token_id: str
    subject_id: str
    issued_at: datetime
    expires_at: datetime


@dataclass(frozen=True)
class AuthTokensOutput:
    user: AuthUserOutput
    access_token: TokenDetails
    refresh_token: TokenDetails


@dataclass(frozen=True)
class AccessTokenOutput:
    user_id: str
    access_token: TokenDetails


@dataclass(frozen=True)
class AccessTokenPayload:
    user_id: str
    token_id: str


@dataclass(frozen=True)
class EmailMessage:
    to_email: str
    subject: str
    body: str


@dataclass(frozen=True)
class MeOutput:
    user_id: str
    name: str
    email: str
    photo: str | None
    role: str
    telegram_name: str | None
    verified: bool
    balance: Decimal
