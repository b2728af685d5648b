from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

from account_service.application.dto.auth import AccessTokenPayload, TokenDetails
from account_service.application.ports.token_port import TokenPort
from account_service.infrastructure.security.token_codec import issue_token, validate_token


@dataclass(frozen=True)
class TokenKeyPair:
    private_key: str
    public_key: str


class JwtTokenService(TokenPort):
    def __init__(
        self,
        *,
        access_keys: TokenKeyPair,
        refresh_keys: TokenKeyPair,
        access_ttl_minutes: int,
        refresh_ttl_minutes: int,
    ):
        if access_keys == refresh_keys:
            raise ValueError("Access and refresh tokens must use distinct key pairs.")
        self._access_keys = access_keys
        self._refresh_keys = refresh_keys
        self._access_ttl = timedelta(minutes=access_ttl_minutes)
        self._refresh_ttl = timedelta(minutes=refresh_ttl_minutes)

    def create_access_token(self, *, user_id: str, now: datetime) -> TokenDetails:
        return issue_token(
            subject_id=user_id,
            ttl=self._access_ttl,
            private_key=self._access_keys.private_key,
            now=now,
        )

    def create_refresh_token(self, *, user_id: str, now: datetime) -> TokenDetails:
        return issue_token(
            subject_id=user_id,
            ttl=self._refresh_ttl,
            private_key=self._refresh_keys.private_key,
            now=now,
        )

    def decode_access_token(self, *, token: str, now: datetime) -> AccessTokenPayload:
        details = validate_token(token=token, public_key=self._access_keys.public_key, now=now)
        return AccessTokenPayload(user_id=details.subject_id, token_id=details.token_id)

    def decode_refresh_token(self, *, token: str, now: datetime) -> AccessTokenPayload:
        details = validate_token(token=token, public_key=self._refresh_keys.public_key, now=now)
        return AccessTokenPayload(user_id=details.subject_id, token_id=details.token_id)
