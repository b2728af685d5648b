from __future__ import annotations

from functools import lru_cache

from fastapi import Cookie, Header, HTTPException

from account_service.application.use_cases.auth_common import utcnow
from account_service.application.use_cases.create_invoice import CreateInvoiceUseCase, OrderIdGenerator
from account_service.application.use_cases.get_me import GetMeUseCase
from account_service.application.use_cases.login_user import LoginUserUseCase
from account_service.application.use_cases.logout_user import LogoutUserUseCase
from account_service.application.use_cases.password_reset import ForgotPasswordUseCase, ResetPasswordUseCase
from account_service.application.use_cases.process_payment_notification import (
    ProcessPaymentNotificationUseCase,
)
from account_service.application.use_cases.refresh_access_token import (
    CheckAccessTokenUseCase,
    RefreshAccessTokenUseCase,
)
from account_service.application.use_cases.register_bot import RegisterBotUseCase
from account_service.application.use_cases.register_user import RegisterUserUseCase
from account_service.application.use_cases.verify_email import VerifyEmailUseCase
from account_service.domain.entities.user import User
from account_service.domain.exceptions import AuthError, DomainError
from account_service.infrastructure.clients.tinkoff_client import TinkoffClient, TinkoffClientSettings
from account_service.infrastructure.db.engine import get_engine
from account_service.infrastructure.db.repositories.accounts_repository import SqlAccountsRepository
from account_service.infrastructure.messaging.session_registry import InMemorySessionRegistry
from account_service.infrastructure.messaging.smtp_email_sender import SmtpEmailSender, SmtpSettings
from account_service.infrastructure.security.code_generator import SecureCodeGenerator
from account_service.infrastructure.security.password_hasher import PasswordHasher
from account_service.infrastructure.security.token_service import JwtTokenService, TokenKeyPair
from account_service.shared.config import Settings, get_settings


ACCESS_TOKEN_COOKIE = "access_token"


def _get_db_engine():
    settings = get_settings()
    if not settings.postgres_dsn:
        raise HTTPException(status_code=500, detail="POSTGRES_DSN is required.")
    return get_engine(settings.postgres_dsn)


def _get_accounts_repository() -> SqlAccountsRepository:
    return SqlAccountsRepository(_get_db_engine())


@lru_cache(maxsize=1)
def _get_password_hasher() -> PasswordHasher:
    return PasswordHasher()


@lru_cache(maxsize=1)
def _get_code_generator() -> SecureCodeGenerator:
    return SecureCodeGenerator()


# settings-derived adapters are cached per Settings value, so reload_settings() rebuilds them
@lru_cache(maxsize=1)
def _build_token_service(settings: Settings) -> JwtTokenService:
    if not (settings.access_token_private_key and settings.access_token_public_key):
        raise HTTPException(status_code=500, detail="ACCESS_TOKEN key pair is required.")
    if not (settings.refresh_token_private_key and settings.refresh_token_public_key):
        raise HTTPException(status_code=500, detail="REFRESH_TOKEN key pair is required.")
    return JwtTokenService(
        access_keys=TokenKeyPair(
            private_key=settings.access_token_private_key,
            public_key=settings.access_token_public_key,
        ),
        refresh_keys=TokenKeyPair(
            private_key=settings.refresh_token_private_key,
            public_key=settings.refresh_token_public_key,
        ),
        access_ttl_minutes=settings.access_token_expired_in,
        refresh_ttl_minutes=settings.refresh_token_expired_in,
    )


def _get_token_service() -> JwtTokenService:
    return _build_token_service(get_settings())


@lru_cache(maxsize=1)
def _build_email_sender(settings: Settings) -> SmtpEmailSender:
    return SmtpEmailSender(
        SmtpSettings(
            host=settings.smtp_host,
            port=settings.smtp_port,
            user=settings.smtp_user,
            password=settings.smtp_password,
            sender=settings.email_from,
        )
    )


def _get_email_sender() -> SmtpEmailSender:
    return _build_email_sender(get_settings())


@lru_cache(maxsize=1)
def get_session_registry() -> InMemorySessionRegistry:
    return InMemorySessionRegistry()


@lru_cache(maxsize=1)
def _build_payment_gateway(settings: Settings) -> TinkoffClient:
    if not settings.tinkoff_terminal_key or not settings.tinkoff_password:
        raise HTTPException(
            status_code=500,
            detail="TINKOFF_TERMINAL_KEY and TINKOFF_PASSWORD are required.",
        )
    return TinkoffClient(
        TinkoffClientSettings(
            api_base=settings.tinkoff_api_base,
            terminal_key=settings.tinkoff_terminal_key,
            password=settings.tinkoff_password,
            timeout_seconds=settings.tinkoff_timeout_seconds,
        )
    )


def get_payment_gateway() -> TinkoffClient:
    return _build_payment_gateway(get_settings())


@lru_cache(maxsize=1)
def _get_order_id_generator() -> OrderIdGenerator:
    return OrderIdGenerator()


def get_register_user_use_case() -> RegisterUserUseCase:
    settings = get_settings()
    return RegisterUserUseCase(
        store=_get_accounts_repository(),
        password_hasher=_get_password_hasher(),
        code_generator=_get_code_generator(),
        email_sender=_get_email_sender(),
        client_origin=settings.client_origin,
        signup_bonus=settings.signup_bonus,
    )


def get_register_bot_use_case() -> RegisterBotUseCase:
    return RegisterBotUseCase(
        store=_get_accounts_repository(),
        password_hasher=_get_password_hasher(),
        code_generator=_get_code_generator(),
        signup_bonus=get_settings().signup_bonus,
    )


def get_verify_email_use_case() -> VerifyEmailUseCase:
    return VerifyEmailUseCase(accounts_port=_get_accounts_repository())


def get_login_user_use_case() -> LoginUserUseCase:
    return LoginUserUseCase(
        accounts_port=_get_accounts_repository(),
        password_hasher=_get_password_hasher(),
        token_port=_get_token_service(),
        session_messenger=get_session_registry(),
    )


def get_logout_user_use_case() -> LogoutUserUseCase:
    return LogoutUserUseCase(accounts_port=_get_accounts_repository())


def get_refresh_access_token_use_case() -> RefreshAccessTokenUseCase:
    return RefreshAccessTokenUseCase(
        accounts_port=_get_accounts_repository(),
        token_port=_get_token_service(),
    )


def get_check_access_token_use_case() -> CheckAccessTokenUseCase:
    return CheckAccessTokenUseCase(
        accounts_port=_get_accounts_repository(),
        token_port=_get_token_service(),
    )


def get_forgot_password_use_case() -> ForgotPasswordUseCase:
    settings = get_settings()
    return ForgotPasswordUseCase(
        accounts_port=_get_accounts_repository(),
        code_generator=_get_code_generator(),
        email_sender=_get_email_sender(),
        client_origin=settings.client_origin,
        reset_ttl_minutes=settings.password_reset_ttl_minutes,
    )


def get_reset_password_use_case() -> ResetPasswordUseCase:
    return ResetPasswordUseCase(
        accounts_port=_get_accounts_repository(),
        password_hasher=_get_password_hasher(),
    )


def get_get_me_use_case() -> GetMeUseCase:
    return GetMeUseCase(ledger_port=_get_accounts_repository())


def get_create_invoice_use_case() -> CreateInvoiceUseCase:
    repository = _get_accounts_repository()
    return CreateInvoiceUseCase(
        accounts_port=repository,
        ledger_port=repository,
        payment_gateway=get_payment_gateway(),
        order_ids=_get_order_id_generator(),
        invoice_ttl_days=get_settings().invoice_ttl_days,
    )


def get_process_payment_notification_use_case() -> ProcessPaymentNotificationUseCase:
    settings = get_settings()
    repository = _get_accounts_repository()
    return ProcessPaymentNotificationUseCase(
        ledger_port=repository,
        accounts_port=repository,
        session_messenger=get_session_registry(),
        confirmed_status=settings.payment_confirmed_status,
        minor_units=settings.payment_minor_units,
    )


def get_notification_verifier():
    """Callback authenticity check, or None when verification is switched off."""
    if not get_settings().tinkoff_verify_notifications:
        return None
    return get_payment_gateway().verify_notification


def _extract_access_token(authorization: str | None, cookie_token: str | None) -> str:
    if authorization:
        if not authorization.startswith("Bearer "):
            raise HTTPException(status_code=401, detail="Invalid authorization header.")
        token = authorization.replace("Bearer ", "", 1).strip()
    else:
        token = (cookie_token or "").strip()
    if not token:
        raise HTTPException(status_code=401, detail="You are not logged in.")
    return token


def get_current_user(
    authorization: str | None = Header(default=None),
    access_token: str | None = Cookie(default=None, alias=ACCESS_TOKEN_COOKIE),
) -> User:
    token = _extract_access_token(authorization, access_token)

    token_service = _get_token_service()
    accounts_port = _get_accounts_repository()

    try:
        payload = token_service.decode_access_token(token=token, now=utcnow())
    except AuthError as exc:
        raise HTTPException(status_code=401, detail=str(exc)) from exc
    except DomainError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc

    try:
        user = accounts_port.get_user_by_id(user_id=payload.user_id)
    except DomainError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    if user is None:
        raise HTTPException(status_code=401, detail="The user belonging to this token no longer exists.")
    return user


def get_optional_current_user(
    authorization: str | None = Header(default=None),
    access_token: str | None = Cookie(default=None, alias=ACCESS_TOKEN_COOKIE),
) -> User | None:
    if not authorization and not access_token:
        return None
    return get_current_user(authorization=authorization, access_token=access_token)
