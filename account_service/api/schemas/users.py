from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel


class UserDetailsResponse(BaseModel):
    id: str
    name: str
    email: str
    photo: str | None
    role: str
    telegramname: str | None
    verified: bool
    balance: Decimal


class MeResponse(BaseModel):
    status: str = "success"
    data: UserDetailsResponse
