from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Literal


UserRole = Literal["user", "admin"]


@dataclass(frozen=True)
class User:
    id: str
    name: str
    email: str
    password_hash: str
    role: UserRole
    photo: str | None
    verified: bool
    verification_code: str | None
    password_reset_token: str | None
    password_reset_at: datetime | None
    session: str | None
    online: bool
    is_bot: bool
    telegram_token: str | None
    telegram_name: str | None
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class Profile:
    id: str
    user_id: str
    created_at: datetime
