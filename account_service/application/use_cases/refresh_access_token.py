from __future__ import annotations

from account_service.application.dto.auth import (
    AccessTokenOutput,
    CheckAccessTokenInput,
    RefreshAccessTokenInput,
)
from account_service.application.ports.accounts_port import AccountsPort
from account_service.application.ports.token_port import TokenPort
from account_service.domain.exceptions import TokenMalformedError, UserNotFoundError

from .auth_common import utcnow


class RefreshAccessTokenUseCase:
    def __init__(self, *, accounts_port: AccountsPort, token_port: TokenPort):
        self._accounts_port = accounts_port
        self._token_port = token_port

    def execute(self, command: RefreshAccessTokenInput) -> AccessTokenOutput:
        token = command.refresh_token.strip()
        if not token:
            raise TokenMalformedError("Could not refresh access token.")

        now = utcnow()
        payload = self._token_port.decode_refresh_token(token=token, now=now)
        user = self._accounts_port.get_user_by_id(user_id=payload.user_id)
        if user is None:
            raise UserNotFoundError("The user belonging to this token no longer exists.")

        access_token = self._token_port.create_access_token(user_id=user.id, now=now)
        return AccessTokenOutput(user_id=user.id, access_token=access_token)


class CheckAccessTokenUseCase:
    def __init__(self, *, accounts_port: AccountsPort, token_port: TokenPort):
        self._accounts_port = accounts_port
        self._token_port = token_port

    def execute(self, command: CheckAccessTokenInput) -> str:
        token = command.access_token.strip()
        if not token:
            raise TokenMalformedError("Could not find access token.")

        payload = self._token_port.decode_access_token(token=token, now=utcnow())
        if self._accounts_port.get_user_by_id(user_id=payload.user_id) is None:
            raise UserNotFoundError("The user belonging to this token no longer exists.")
        return payload.user_id
