from __future__ import annotations

import logging
from uuid import uuid4

from account_service.application.dto.auth import AuthUserOutput, VerifyEmailInput
from account_service.application.ports.accounts_port import AccountsPort
from account_service.domain.entities.user import User
from account_service.domain.exceptions import AlreadyVerifiedError, VerificationCodeNotFoundError

from .auth_common import build_auth_user_output, utcnow


logger = logging.getLogger(__name__)


class VerifyEmailUseCase:
    def __init__(self, *, accounts_port: AccountsPort):
        self._accounts_port = accounts_port

    def execute(self, command: VerifyEmailInput) -> AuthUserOutput:
        code = command.code.strip()
        if not code:
            raise VerificationCodeNotFoundError("Invalid verification code or user doesn't exist.")

        def _tx(accounts_port: AccountsPort) -> User:
            user = accounts_port.get_user_by_verification_code(code=code)
            if user is None:
                raise VerificationCodeNotFoundError("Invalid verification code or user doesn't exist.")
            if user.verified:
                raise AlreadyVerifiedError("User already verified.")

            now = utcnow()
            # a concurrent request may have consumed the code since the lookup
            if not accounts_port.mark_user_verified(user_id=user.id, code=code, now=now):
                raise AlreadyVerifiedError("User already verified.")
            accounts_port.create_profile(profile_id=str(uuid4()), user_id=user.id, created_at=now)
            return accounts_port.get_user_by_id(user_id=user.id) or user

        user = self._accounts_port.execute_in_transaction(_tx)
        logger.info("verify_email: email_verified user_id=%s", user.id)
        return build_auth_user_output(user)
