from __future__ import annotations

import math
from datetime import datetime, timedelta, timezone
from uuid import uuid4

import jwt

from account_service.application.dto.auth import TokenDetails
from account_service.domain.exceptions import (
    TokenBadSignatureError,
    TokenExpiredError,
    TokenMalformedError,
    TokenSigningError,
)


ALGORITHM = "RS256"
REQUIRED_CLAIMS = ["sub", "jti", "iat", "exp"]


def issue_token(
    *,
    subject_id: str,
    ttl: timedelta,
    private_key: str,
    now: datetime,
) -> TokenDetails:
    """Signs a bearer token for ``subject_id`` valid for at least ``ttl`` after ``now``."""
    if not subject_id:
        raise ValueError("subject_id is required.")
    if ttl <= timedelta(0):
        raise ValueError("ttl must be positive.")

    token_id = str(uuid4())
    issued_at = int(now.timestamp())
    # round up so the token never expires before now + ttl
    expires_at = math.ceil((now + ttl).timestamp())
    payload = {
        "sub": subject_id,
        "jti": token_id,
        "iat": issued_at,
        "nbf": issued_at,
        "exp": expires_at,
    }
    try:
        token = jwt.encode(payload, private_key, algorithm=ALGORITHM)
    except (jwt.PyJWTError, ValueError, TypeError) as exc:
        raise TokenSigningError("Failed to sign token.") from exc

    return TokenDetails(
        token=token,
        token_id=token_id,
        subject_id=subject_id,
        issued_at=_from_timestamp(issued_at),
        expires_at=_from_timestamp(expires_at),
    )


def validate_token(*, token: str, public_key: str, now: datetime) -> TokenDetails:
    """Verifies signature then expiry against the caller's clock."""
    if not token:
        raise TokenMalformedError("Token is empty.")

    try:
        claims = jwt.decode(
            token,
            public_key,
            algorithms=[ALGORITHM],
            options={
                "verify_exp": False,
                "verify_iat": False,
                "verify_nbf": False,
                "require": REQUIRED_CLAIMS,
            },
        )
    except jwt.InvalidSignatureError as exc:
        raise TokenBadSignatureError("Token signature is invalid.") from exc
    except jwt.InvalidKeyError as exc:
        raise TokenSigningError("Token verification key is invalid.") from exc
    except jwt.PyJWTError as exc:
        raise TokenMalformedError("Token could not be parsed.") from exc

    subject_id = claims.get("sub")
    token_id = claims.get("jti")
    issued_at = claims.get("iat")
    expires_at = claims.get("exp")
    if not isinstance(subject_id, str) or not subject_id:
        raise TokenMalformedError("Token subject is invalid.")
    if not isinstance(token_id, str) or not token_id:
        raise TokenMalformedError("Token id is invalid.")
    if not _is_number(issued_at) or not _is_number(expires_at):
        raise TokenMalformedError("Token timestamps are invalid.")

    if now.timestamp() > expires_at:
        raise TokenExpiredError("Token has expired.")

    return TokenDetails(
        token=token,
        token_id=token_id,
        subject_id=subject_id,
        issued_at=_from_timestamp(issued_at),
        expires_at=_from_timestamp(expires_at),
    )


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _from_timestamp(value: float) -> datetime:
    return datetime.fromtimestamp(value, tz=timezone.utc)
