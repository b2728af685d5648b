from __future__ import annotations

import logging
from decimal import Decimal
from uuid import uuid4

from account_service.application.dto.auth import RegisterBotOutput, RegisterUserInput
from account_service.application.ports.account_store_port import AccountStorePort
from account_service.application.ports.code_generator_port import CodeGeneratorPort
from account_service.application.ports.password_hasher_port import PasswordHasherPort
from account_service.domain.entities.user import Profile, User

from .auth_common import build_auth_user_output, utcnow
from .register_user import create_account_with_bonus, prepare_account


logger = logging.getLogger(__name__)


class RegisterBotUseCase:
    """Bot accounts skip email verification and get their profile immediately."""

    def __init__(
        self,
        *,
        store: AccountStorePort,
        password_hasher: PasswordHasherPort,
        code_generator: CodeGeneratorPort,
        signup_bonus: Decimal,
    ):
        self._store = store
        self._password_hasher = password_hasher
        self._code_generator = code_generator
        self._signup_bonus = signup_bonus

    def execute(self, command: RegisterUserInput) -> RegisterBotOutput:
        account = prepare_account(command, self._password_hasher)
        telegram_token = self._code_generator.generate()

        def _tx(store: AccountStorePort) -> tuple[User, Profile]:
            now = utcnow()
            user = create_account_with_bonus(
                store,
                account=account,
                verified=True,
                verification_code=None,
                is_bot=True,
                telegram_token=telegram_token,
                signup_bonus=self._signup_bonus,
                now=now,
            )
            profile = store.create_profile(profile_id=str(uuid4()), user_id=user.id, created_at=now)
            return user, profile

        user, profile = self._store.execute_in_transaction(_tx)
        logger.info("register_bot: bot_registered user_id=%s", user.id)
        return RegisterBotOutput(
            user=build_auth_user_output(user),
            profile_id=profile.id,
            telegram_token=telegram_token,
        )
