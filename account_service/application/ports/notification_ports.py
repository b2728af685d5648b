from __future__ import annotations

from typing import Protocol

from account_service.application.dto.auth import EmailMessage


class EmailSenderPort(Protocol):
    def send(self, message: EmailMessage) -> None:
        ...


class SessionMessengerPort(Protocol):
    def send_personal_message(self, *, session: str, message: str) -> None:
        ...
