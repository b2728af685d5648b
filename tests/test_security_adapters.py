from __future__ import annotations

import string

import pytest

from account_service.domain.exceptions import CodeGenerationError
from account_service.infrastructure.security import code_generator
from account_service.infrastructure.security.code_generator import SecureCodeGenerator, generate_code
from account_service.infrastructure.security.password_hasher import PasswordHasher


def test_generate_code_is_40_hex_chars():
    code = generate_code()
    assert len(code) == 40
    assert set(code) <= set(string.hexdigits.lower())


def test_generated_codes_do_not_repeat():
    generator = SecureCodeGenerator()
    codes = {generator.generate() for _ in range(200)}
    assert len(codes) == 200


def test_random_source_failure_becomes_code_generation_error(monkeypatch: pytest.MonkeyPatch):
    def broken(_n_bytes: int) -> str:
        raise OSError("no entropy")

    monkeypatch.setattr(code_generator.secrets, "token_hex", broken)

    with pytest.raises(CodeGenerationError):
        generate_code()


def test_password_hasher_round_trip_with_argon2():
    hasher = PasswordHasher(schemes=["argon2"])
    password_hash = hasher.hash("correct horse")

    assert password_hash != "correct horse"
    assert hasher.verify("correct horse", password_hash) is True
    assert hasher.verify("wrong horse", password_hash) is False


def test_password_hasher_treats_unknown_hash_as_mismatch():
    hasher = PasswordHasher(schemes=["argon2"])
    assert hasher.verify("anything", "not-a-real-hash") is False
    assert hasher.verify("anything", "") is False
