from __future__ import annotations

import logging

from account_service.application.dto.auth import LogoutUserInput
from account_service.application.ports.accounts_port import AccountsPort
from account_service.domain.exceptions import NotAuthenticatedError


logger = logging.getLogger(__name__)


class LogoutUserUseCase:
    def __init__(self, *, accounts_port: AccountsPort):
        self._accounts_port = accounts_port

    def execute(self, command: LogoutUserInput) -> None:
        if not command.user_id:
            raise NotAuthenticatedError("User not found.")

        if not self._accounts_port.clear_user_session(user_id=command.user_id):
            raise NotAuthenticatedError("User not found in the database.")
        logger.info("logout_user: session_cleared user_id=%s", command.user_id)
