from __future__ import annotations

import secrets

from account_service.application.ports.code_generator_port import CodeGeneratorPort
from account_service.domain.exceptions import CodeGenerationError


CODE_BYTES = 20


def generate_code(n_bytes: int = CODE_BYTES) -> str:
    """Hex-encoded random code; 20 bytes give the 40 characters used in emailed links."""
    if n_bytes <= 0:
        raise ValueError("n_bytes must be positive.")
    try:
        return secrets.token_hex(n_bytes)
    except (OSError, NotImplementedError) as exc:
        raise CodeGenerationError("Random source is unavailable.") from exc


class SecureCodeGenerator(CodeGeneratorPort):
    def __init__(self, *, n_bytes: int = CODE_BYTES):
        self._n_bytes = n_bytes

    def generate(self) -> str:
        return generate_code(self._n_bytes)
