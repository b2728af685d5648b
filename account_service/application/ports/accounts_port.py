from __future__ import annotations

from datetime import datetime
from typing import Callable, Protocol, TypeVar

from account_service.domain.entities.user import Profile, User


TAccountsResult = TypeVar("TAccountsResult")


class AccountsPort(Protocol):
    def execute_in_transaction(self, fn: Callable[[AccountsPort], TAccountsResult]) -> TAccountsResult:
        ...

    def get_user_by_id(self, *, user_id: str) -> User | None:
        ...

    def get_user_by_email(self, *, email: str) -> User | None:
        ...

    def get_user_by_verification_code(self, *, code: str) -> User | None:
        ...

    def create_user(
        self,
        *,
        user_id: str,
        name: str,
        email: str,
        password_hash: str,
        verified: bool,
        verification_code: str | None,
        is_bot: bool,
        telegram_token: str | None,
        created_at: datetime,
    ) -> User:
        ...

    def mark_user_verified(self, *, user_id: str, code: str, now: datetime) -> bool:
        """Clears the code and flips verified only while the code is still pending."""
        ...

    def create_profile(self, *, profile_id: str, user_id: str, created_at: datetime) -> Profile:
        ...

    def set_password_reset_token(
        self,
        *,
        user_id: str,
        token: str,
        expires_at: datetime,
    ) -> None:
        ...

    def consume_password_reset_token(
        self,
        *,
        token: str,
        password_hash: str,
        now: datetime,
    ) -> User | None:
        """Installs the hash and clears the token in one statement; None when expired or unknown."""
        ...

    def update_user_session(self, *, user_id: str, session: str | None, online: bool) -> None:
        ...

    def clear_user_session(self, *, user_id: str) -> bool:
        ...
