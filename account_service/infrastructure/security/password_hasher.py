from __future__ import annotations

from passlib.context import CryptContext

from account_service.application.ports.password_hasher_port import PasswordHasherPort
from account_service.domain.exceptions import PasswordHashingError


class PasswordHasher(PasswordHasherPort):
    def __init__(self, *, schemes: list[str] | None = None):
        # bcrypt first: existing accounts were created with bcrypt hashes
        self._ctx = CryptContext(
            schemes=schemes or ["bcrypt", "argon2"],
            deprecated="auto",
        )

    def hash(self, plain_password: str) -> str:
        try:
            return self._ctx.hash(plain_password)
        except (ValueError, TypeError) as exc:
            raise PasswordHashingError("Failed to hash password.") from exc

    def verify(self, plain_password: str, password_hash: str) -> bool:
        if not password_hash:
            return False
        try:
            return self._ctx.verify(plain_password, password_hash)
        except (ValueError, TypeError):
            # unknown or corrupted hash format
            return False
