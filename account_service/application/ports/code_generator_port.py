from __future__ import annotations

from typing import Protocol


class CodeGeneratorPort(Protocol):
    def generate(self) -> str:
        ...
