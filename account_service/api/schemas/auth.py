from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class RegisterRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=1, max_length=256)
    password_confirm: str = Field(..., alias="passwordConfirm", min_length=1, max_length=256)

    model_config = {"populate_by_name": True}


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=1, max_length=256)
    session: str | None = Field(default=None, max_length=255)


class ForgotPasswordRequest(BaseModel):
    email: str = Field(..., max_length=255)


class ResetPasswordRequest(BaseModel):
    password: str = Field(..., max_length=256)
    password_confirm: str = Field(..., alias="passwordConfirm", max_length=256)

    model_config = {"populate_by_name": True}


class AuthUserResponse(BaseModel):
    id: str
    name: str
    email: str
    role: str
    photo: str | None
    verified: bool
    is_bot: bool


class RegisterData(BaseModel):
    user: AuthUserResponse


class RegisterResponse(BaseModel):
    status: str = "success"
    data: RegisterData


class RegisterBotData(BaseModel):
    user: AuthUserResponse
    profile_id: str
    telegram_token: str


class RegisterBotResponse(BaseModel):
    status: str = "success"
    data: RegisterBotData


class TokenDetailsResponse(BaseModel):
    token: str
    token_uuid: str
    user_id: str
    expires_in: datetime


class LoginResponse(BaseModel):
    status: str = "success"
    access_token: str
    refresh_token: TokenDetailsResponse


class AccessTokenResponse(BaseModel):
    status: str = "success"
    access_token: str


class MessageResponse(BaseModel):
    status: str = "success"
    message: str | None = None
