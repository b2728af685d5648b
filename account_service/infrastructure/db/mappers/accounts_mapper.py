from __future__ import annotations

from decimal import Decimal
from typing import Any, Mapping

from account_service.domain.entities.payment import Billing, Payment, Transaction
from account_service.domain.entities.user import Profile, User


def _as_str(value: Any) -> str:
    return str(value)


def _as_decimal(value: Any) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def map_row_to_user(row: Mapping[str, Any]) -> User:
    return User(
        id=_as_str(row["id"]),
        name=row["name"],
        email=row["email"],
        password_hash=row["password_hash"],
        role=row.get("role") or "user",
        photo=row.get("photo"),
        verified=bool(row["verified"]),
        verification_code=row.get("verification_code") or None,
        password_reset_token=row.get("password_reset_token") or None,
        password_reset_at=row.get("password_reset_at"),
        session=row.get("session") or None,
        online=bool(row["online"]),
        is_bot=bool(row["is_bot"]),
        telegram_token=row.get("telegram_token") or None,
        telegram_name=row.get("telegram_name"),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def map_row_to_profile(row: Mapping[str, Any]) -> Profile:
    return Profile(
        id=_as_str(row["id"]),
        user_id=_as_str(row["user_id"]),
        created_at=row["created_at"],
    )


def map_row_to_payment(row: Mapping[str, Any]) -> Payment:
    return Payment(
        id=_as_str(row["id"]),
        payment_id=_as_str(row["payment_id"]),
        user_id=_as_str(row["user_id"]),
        amount=int(row["amount"]),
        status=row["status"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def map_row_to_billing(row: Mapping[str, Any]) -> Billing:
    return Billing(
        id=_as_str(row["id"]),
        user_id=_as_str(row["user_id"]),
        amount=_as_decimal(row["amount"]),
        updated_at=row["updated_at"],
    )


def map_row_to_transaction(row: Mapping[str, Any]) -> Transaction:
    return Transaction(
        id=_as_str(row["id"]),
        user_id=_as_str(row["user_id"]),
        total=_as_str(row["total"]),
        amount=_as_decimal(row["amount"]),
        description=row["description"],
        module=row["module"],
        type=row["type"],
        status=row["status"],
        created_at=row["created_at"],
    )
