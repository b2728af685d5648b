from __future__ import annotations

import logging

from account_service.application.dto.auth import AuthTokensOutput, LoginUserInput
from account_service.application.ports.accounts_port import AccountsPort
from account_service.application.ports.notification_ports import SessionMessengerPort
from account_service.application.ports.password_hasher_port import PasswordHasherPort
from account_service.application.ports.token_port import TokenPort
from account_service.domain.exceptions import DomainError, InvalidCredentialsError, NotVerifiedError

from .auth_common import build_auth_user_output, normalize_email, utcnow


logger = logging.getLogger(__name__)

SESSION_GREETING = "Hello Client"


class LoginUserUseCase:
    def __init__(
        self,
        *,
        accounts_port: AccountsPort,
        password_hasher: PasswordHasherPort,
        token_port: TokenPort,
        session_messenger: SessionMessengerPort,
    ):
        self._accounts_port = accounts_port
        self._password_hasher = password_hasher
        self._token_port = token_port
        self._session_messenger = session_messenger

    def execute(self, command: LoginUserInput) -> AuthTokensOutput:
        email = normalize_email(command.email)
        user = self._accounts_port.get_user_by_email(email=email)
        if user is None:
            logger.info("login_user: login_rejected reason=unknown_email")
            raise InvalidCredentialsError("Invalid email or password.")

        # checked before the password so unverified accounts always get the same answer
        if not user.verified:
            logger.info("login_user: login_rejected reason=not_verified user_id=%s", user.id)
            raise NotVerifiedError("Account was not verified.")

        if not self._password_hasher.verify(command.password, user.password_hash):
            logger.info("login_user: login_rejected reason=bad_password user_id=%s", user.id)
            raise InvalidCredentialsError("Invalid email or password.")

        now = utcnow()
        access_token = self._token_port.create_access_token(user_id=user.id, now=now)
        refresh_token = self._token_port.create_refresh_token(user_id=user.id, now=now)

        session = command.session.strip() if command.session else None
        self._accounts_port.update_user_session(user_id=user.id, session=session or None, online=True)
        logger.info("login_user: login_succeeded user_id=%s has_session=%s", user.id, bool(session))

        if session:
            try:
                self._session_messenger.send_personal_message(session=session, message=SESSION_GREETING)
            except DomainError as exc:
                logger.warning("login_user: session_greeting_failed user_id=%s error=%s", user.id, exc)

        user = self._accounts_port.get_user_by_id(user_id=user.id) or user
        return AuthTokensOutput(
            user=build_auth_user_output(user),
            access_token=access_token,
            refresh_token=refresh_token,
        )
