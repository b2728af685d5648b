from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from uuid import uuid4

from account_service.application.dto.auth import RegisterUserInput, RegisterUserOutput
from account_service.application.ports.account_store_port import AccountStorePort
from account_service.application.ports.code_generator_port import CodeGeneratorPort
from account_service.application.ports.notification_ports import EmailSenderPort
from account_service.application.ports.password_hasher_port import PasswordHasherPort
from account_service.domain.entities.payment import TRANSACTION_STATUS_CLOSED
from account_service.domain.entities.user import User
from account_service.domain.exceptions import EmailAlreadyExistsError, ValidationError

from .auth_common import (
    build_auth_user_output,
    normalize_email,
    send_email_best_effort,
    utcnow,
    validate_new_password,
)
from .email_messages import verification_email


logger = logging.getLogger(__name__)

SIGNUP_BONUS_DESCRIPTION = "Registration bonus"
SIGNUP_BONUS_MODULE = "Registration"


@dataclass(frozen=True)
class NewAccount:
    name: str
    email: str
    password_hash: str


def prepare_account(command: RegisterUserInput, password_hasher: PasswordHasherPort) -> NewAccount:
    name = command.name.strip()
    email = normalize_email(command.email)
    if not name:
        raise ValidationError("name is required.")
    if not email or "@" not in email:
        raise ValidationError("A valid email is required.")
    validate_new_password(command.password, command.password_confirm)
    return NewAccount(name=name, email=email, password_hash=password_hasher.hash(command.password))


def create_account_with_bonus(
    store: AccountStorePort,
    *,
    account: NewAccount,
    verified: bool,
    verification_code: str | None,
    is_bot: bool,
    telegram_token: str,
    signup_bonus: Decimal,
    now: datetime,
) -> User:
    """Creates the user, its billing row and the bonus transaction; call inside a transaction."""
    if store.get_user_by_email(email=account.email) is not None:
        raise EmailAlreadyExistsError("User with that email already exists.")

    user = store.create_user(
        user_id=str(uuid4()),
        name=account.name,
        email=account.email,
        password_hash=account.password_hash,
        verified=verified,
        verification_code=verification_code,
        is_bot=is_bot,
        telegram_token=telegram_token,
        created_at=now,
    )
    store.increment_balance(user_id=user.id, delta=signup_bonus, now=now)
    store.append_transaction(
        transaction_id=str(uuid4()),
        user_id=user.id,
        amount=signup_bonus,
        description=SIGNUP_BONUS_DESCRIPTION,
        module=SIGNUP_BONUS_MODULE,
        type="profit",
        status=TRANSACTION_STATUS_CLOSED,
        created_at=now,
    )
    return user


class RegisterUserUseCase:
    def __init__(
        self,
        *,
        store: AccountStorePort,
        password_hasher: PasswordHasherPort,
        code_generator: CodeGeneratorPort,
        email_sender: EmailSenderPort,
        client_origin: str,
        signup_bonus: Decimal,
    ):
        self._store = store
        self._password_hasher = password_hasher
        self._code_generator = code_generator
        self._email_sender = email_sender
        self._client_origin = client_origin
        self._signup_bonus = signup_bonus

    def execute(self, command: RegisterUserInput) -> RegisterUserOutput:
        account = prepare_account(command, self._password_hasher)
        verification_code = self._code_generator.generate()
        telegram_token = self._code_generator.generate()

        def _tx(store: AccountStorePort) -> User:
            return create_account_with_bonus(
                store,
                account=account,
                verified=False,
                verification_code=verification_code,
                is_bot=False,
                telegram_token=telegram_token,
                signup_bonus=self._signup_bonus,
                now=utcnow(),
            )

        user = self._store.execute_in_transaction(_tx)
        logger.info("register_user: user_registered user_id=%s", user.id)

        send_email_best_effort(
            self._email_sender,
            verification_email(
                to_email=user.email,
                name=user.name,
                client_origin=self._client_origin,
                code=verification_code,
                language=command.language,
            ),
        )
        return RegisterUserOutput(user=build_auth_user_output(user))
