from __future__ import annotations

from datetime import datetime
from typing import Protocol

from account_service.application.dto.auth import AccessTokenPayload, TokenDetails


class TokenPort(Protocol):
    def create_access_token(self, *, user_id: str, now: datetime) -> TokenDetails:
        ...

    def create_refresh_token(self, *, user_id: str, now: datetime) -> TokenDetails:
        ...

    def decode_access_token(self, *, token: str, now: datetime) -> AccessTokenPayload:
        ...

    def decode_refresh_token(self, *, token: str, now: datetime) -> AccessTokenPayload:
        ...
