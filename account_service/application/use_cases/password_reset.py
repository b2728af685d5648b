from __future__ import annotations

import logging
from datetime import timedelta

from account_service.application.dto.auth import ForgotPasswordInput, ResetPasswordInput
from account_service.application.ports.accounts_port import AccountsPort
from account_service.application.ports.code_generator_port import CodeGeneratorPort
from account_service.application.ports.notification_ports import EmailSenderPort
from account_service.application.ports.password_hasher_port import PasswordHasherPort
from account_service.domain.exceptions import (
    InvalidOrExpiredResetCodeError,
    UserNotFoundError,
    ValidationError,
)

from .auth_common import normalize_email, send_email_best_effort, utcnow, validate_new_password
from .email_messages import reset_password_email


logger = logging.getLogger(__name__)

DEFAULT_RESET_TTL_MINUTES = 15


class ForgotPasswordUseCase:
    def __init__(
        self,
        *,
        accounts_port: AccountsPort,
        code_generator: CodeGeneratorPort,
        email_sender: EmailSenderPort,
        client_origin: str,
        reset_ttl_minutes: int = DEFAULT_RESET_TTL_MINUTES,
    ):
        self._accounts_port = accounts_port
        self._code_generator = code_generator
        self._email_sender = email_sender
        self._client_origin = client_origin
        self._reset_ttl = timedelta(minutes=reset_ttl_minutes)

    def execute(self, command: ForgotPasswordInput) -> None:
        email = normalize_email(command.email)
        if not email:
            raise ValidationError("Email field cannot be empty.")

        user = self._accounts_port.get_user_by_email(email=email)
        if user is None:
            raise UserNotFoundError("Invalid email.")

        code = self._code_generator.generate()
        expires_at = utcnow() + self._reset_ttl
        self._accounts_port.set_password_reset_token(user_id=user.id, token=code, expires_at=expires_at)
        logger.info("password_reset: reset_requested user_id=%s expires_at=%s", user.id, expires_at.isoformat())

        send_email_best_effort(
            self._email_sender,
            reset_password_email(
                to_email=user.email,
                name=user.name,
                client_origin=self._client_origin,
                code=code,
                language=command.language,
            ),
        )


class ResetPasswordUseCase:
    def __init__(self, *, accounts_port: AccountsPort, password_hasher: PasswordHasherPort):
        self._accounts_port = accounts_port
        self._password_hasher = password_hasher

    def execute(self, command: ResetPasswordInput) -> None:
        code = command.code.strip()
        if not code:
            raise InvalidOrExpiredResetCodeError("The reset token is invalid or has expired.")
        validate_new_password(command.password.strip(), command.password_confirm.strip())

        password_hash = self._password_hasher.hash(command.password)
        user = self._accounts_port.consume_password_reset_token(
            token=code,
            password_hash=password_hash,
            now=utcnow(),
        )
        if user is None:
            raise InvalidOrExpiredResetCodeError("The reset token is invalid or has expired.")
        logger.info("password_reset: password_updated user_id=%s", user.id)
