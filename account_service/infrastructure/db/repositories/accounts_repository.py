from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime
from decimal import Decimal
from typing import Callable, Iterator, TypeVar
from uuid import uuid4

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from account_service.application.ports.account_store_port import AccountStorePort
from account_service.domain.exceptions import EmailAlreadyExistsError, StorageError
from account_service.infrastructure.db.mappers.accounts_mapper import (
    map_row_to_billing,
    map_row_to_payment,
    map_row_to_profile,
    map_row_to_transaction,
    map_row_to_user,
)


TResult = TypeVar("TResult")

USER_COLUMNS = """
    id, name, email, password_hash, role, photo, verified, verification_code,
    password_reset_token, password_reset_at, session, online, is_bot,
    telegram_token, telegram_name, created_at, updated_at
"""

PAYMENT_COLUMNS = "id, payment_id, user_id, amount, status, created_at, updated_at"


class SqlAccountsRepository(AccountStorePort):
    """Users and ledger rows.

    A repository built by ``execute_in_transaction`` is bound to one connection,
    so every statement issued through it commits or rolls back together.
    """

    def __init__(self, engine, *, connection=None):
        self._engine = engine
        self._connection = connection

    def execute_in_transaction(self, fn: Callable[[SqlAccountsRepository], TResult]) -> TResult:
        if self._connection is not None:
            return fn(self)
        with self._begin() as conn:
            return fn(SqlAccountsRepository(self._engine, connection=conn))

    @contextmanager
    def _begin(self) -> Iterator:
        try:
            if self._connection is not None:
                yield self._connection
            else:
                with self._engine.begin() as conn:
                    yield conn
        except SQLAlchemyError as exc:
            raise StorageError("Storage operation failed.") from exc

    @contextmanager
    def _connect(self) -> Iterator:
        try:
            if self._connection is not None:
                yield self._connection
            else:
                with self._engine.connect() as conn:
                    yield conn
        except SQLAlchemyError as exc:
            raise StorageError("Storage operation failed.") from exc

    def _fetch_user(self, where: str, params: dict, *, lock: bool = False):
        sql = f"""
            SELECT {USER_COLUMNS}
            FROM public.users
            WHERE {where}
            LIMIT 1
            {"FOR UPDATE" if lock else ""}
        """
        with self._connect() as conn:
            row = conn.execute(text(sql), params).mappings().first()
        if row is None:
            return None
        return map_row_to_user(row)

    def get_user_by_id(self, *, user_id: str):
        return self._fetch_user("id = :user_id", {"user_id": user_id})

    def get_user_by_email(self, *, email: str):
        return self._fetch_user("lower(email) = :email", {"email": email.lower()})

    def get_user_by_verification_code(self, *, code: str):
        return self._fetch_user(
            "verification_code = :code",
            {"code": code},
            lock=self._connection is not None,
        )

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
    ):
        sql = f"""
            INSERT INTO public.users (
                id, name, email, password_hash, role, verified, verification_code,
                online, is_bot, telegram_token, created_at, updated_at
            ) VALUES (
                :id, :name, :email, :password_hash, 'user', :verified, :verification_code,
                false, :is_bot, :telegram_token, :created_at, :created_at
            )
            ON CONFLICT ((lower(email))) DO NOTHING
            RETURNING {USER_COLUMNS}
        """
        params = {
            "id": user_id,
            "name": name,
            "email": email.lower(),
            "password_hash": password_hash,
            "verified": verified,
            "verification_code": verification_code,
            "is_bot": is_bot,
            "telegram_token": telegram_token,
            "created_at": created_at,
        }
        with self._begin() as conn:
            row = conn.execute(text(sql), params).mappings().first()
        if row is None:
            raise EmailAlreadyExistsError("User with that email already exists.")
        return map_row_to_user(row)

    def mark_user_verified(self, *, user_id: str, code: str, now: datetime) -> bool:
        sql = """
            UPDATE public.users
            SET verified = true,
                verification_code = NULL,
                updated_at = :now
            WHERE id = :user_id
              AND verification_code = :code
              AND verified = false
        """
        with self._begin() as conn:
            result = conn.execute(text(sql), {"user_id": user_id, "code": code, "now": now})
        return result.rowcount == 1

    def create_profile(self, *, profile_id: str, user_id: str, created_at: datetime):
        sql = """
            INSERT INTO public.profiles AS p (id, user_id, created_at)
            VALUES (:id, :user_id, :created_at)
            ON CONFLICT (user_id) DO UPDATE SET created_at = p.created_at
            RETURNING id, user_id, created_at
        """
        with self._begin() as conn:
            row = conn.execute(
                text(sql),
                {"id": profile_id, "user_id": user_id, "created_at": created_at},
            ).mappings().one()
        return map_row_to_profile(row)

    def set_password_reset_token(self, *, user_id: str, token: str, expires_at: datetime) -> None:
        sql = """
            UPDATE public.users
            SET password_reset_token = :token,
                password_reset_at = :expires_at,
                updated_at = now()
            WHERE id = :user_id
        """
        with self._begin() as conn:
            conn.execute(text(sql), {"user_id": user_id, "token": token, "expires_at": expires_at})

    def consume_password_reset_token(self, *, token: str, password_hash: str, now: datetime):
        sql = f"""
            UPDATE public.users
            SET password_hash = :password_hash,
                password_reset_token = NULL,
                password_reset_at = NULL,
                updated_at = :now
            WHERE password_reset_token = :token
              AND password_reset_at > :now
            RETURNING {USER_COLUMNS}
        """
        with self._begin() as conn:
            row = conn.execute(
                text(sql),
                {"token": token, "password_hash": password_hash, "now": now},
            ).mappings().first()
        if row is None:
            return None
        return map_row_to_user(row)

    def update_user_session(self, *, user_id: str, session: str | None, online: bool) -> None:
        sql = """
            UPDATE public.users
            SET session = :session,
                online = :online,
                updated_at = now()
            WHERE id = :user_id
        """
        with self._begin() as conn:
            conn.execute(text(sql), {"user_id": user_id, "session": session, "online": online})

    def clear_user_session(self, *, user_id: str) -> bool:
        sql = """
            UPDATE public.users
            SET session = NULL,
                updated_at = now()
            WHERE id = :user_id
        """
        with self._begin() as conn:
            result = conn.execute(text(sql), {"user_id": user_id})
        return result.rowcount == 1

    def create_payment(
        self,
        *,
        payment_row_id: str,
        payment_id: str,
        user_id: str,
        amount: int,
        created_at: datetime,
    ):
        sql = f"""
            INSERT INTO public.payments (id, payment_id, user_id, amount, status, created_at, updated_at)
            VALUES (:id, :payment_id, :user_id, :amount, 'NEW', :created_at, :created_at)
            RETURNING {PAYMENT_COLUMNS}
        """
        params = {
            "id": payment_row_id,
            "payment_id": payment_id,
            "user_id": user_id,
            "amount": amount,
            "created_at": created_at,
        }
        with self._begin() as conn:
            row = conn.execute(text(sql), params).mappings().one()
        return map_row_to_payment(row)

    def get_payment_by_payment_id(self, *, payment_id: str):
        sql = f"""
            SELECT {PAYMENT_COLUMNS}
            FROM public.payments
            WHERE payment_id = :payment_id
            LIMIT 1
        """
        with self._connect() as conn:
            row = conn.execute(text(sql), {"payment_id": payment_id}).mappings().first()
        if row is None:
            return None
        return map_row_to_payment(row)

    def claim_new_payment(self, *, payment_id: str, now: datetime):
        # concurrent deliveries serialize on the row lock; the loser re-checks status and matches nothing
        sql = f"""
            UPDATE public.payments
            SET status = 'applied',
                updated_at = :now
            WHERE payment_id = :payment_id
              AND status = 'NEW'
            RETURNING {PAYMENT_COLUMNS}
        """
        with self._begin() as conn:
            row = conn.execute(text(sql), {"payment_id": payment_id, "now": now}).mappings().first()
        if row is None:
            return None
        return map_row_to_payment(row)

    def fail_stale_payments(self, *, created_before: datetime, now: datetime) -> int:
        sql = """
            UPDATE public.payments
            SET status = 'failed',
                updated_at = :now
            WHERE status = 'NEW'
              AND created_at < :created_before
        """
        with self._begin() as conn:
            result = conn.execute(text(sql), {"created_before": created_before, "now": now})
        return int(result.rowcount or 0)

    def get_billing(self, *, user_id: str):
        sql = """
            SELECT id, user_id, amount, updated_at
            FROM public.billings
            WHERE user_id = :user_id
            LIMIT 1
        """
        with self._connect() as conn:
            row = conn.execute(text(sql), {"user_id": user_id}).mappings().first()
        if row is None:
            return None
        return map_row_to_billing(row)

    def increment_balance(self, *, user_id: str, delta: Decimal, now: datetime) -> Decimal:
        sql = """
            INSERT INTO public.billings AS b (id, user_id, amount, updated_at)
            VALUES (:id, :user_id, :delta, :now)
            ON CONFLICT (user_id) DO UPDATE
            SET amount = b.amount + EXCLUDED.amount,
                updated_at = EXCLUDED.updated_at
            RETURNING id, user_id, amount, updated_at
        """
        params = {"id": str(uuid4()), "user_id": user_id, "delta": delta, "now": now}
        with self._begin() as conn:
            row = conn.execute(text(sql), params).mappings().one()
        return map_row_to_billing(row).amount

    def append_transaction(
        self,
        *,
        transaction_id: str,
        user_id: str,
        amount: Decimal,
        description: str,
        module: str,
        type: str,
        status: str,
        created_at: datetime,
    ):
        sql = """
            INSERT INTO public.transactions (
                id, user_id, total, amount, description, module, type, status, created_at
            ) VALUES (
                :id, :user_id, '0', :amount, :description, :module, :type, :status, :created_at
            )
            RETURNING id, user_id, total, amount, description, module, type, status, created_at
        """
        params = {
            "id": transaction_id,
            "user_id": user_id,
            "amount": amount,
            "description": description,
            "module": module,
            "type": type,
            "status": status,
            "created_at": created_at,
        }
        with self._begin() as conn:
            row = conn.execute(text(sql), params).mappings().one()
        return map_row_to_transaction(row)
