from __future__ import annotations

import logging
from datetime import datetime, timezone

from account_service.application.dto.auth import AuthUserOutput, EmailMessage
from account_service.application.ports.notification_ports import EmailSenderPort
from account_service.domain.entities.user import User
from account_service.domain.exceptions import DomainError, PasswordMismatchError, ValidationError


logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def validate_new_password(password: str, password_confirm: str) -> None:
    if password != password_confirm:
        raise PasswordMismatchError("Passwords do not match.")
    if not password.strip():
        raise ValidationError("Password cannot be empty.")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must have at least {MIN_PASSWORD_LENGTH} characters.")


def build_auth_user_output(user: User) -> AuthUserOutput:
    return AuthUserOutput(
        id=user.id,
        name=user.name,
        email=user.email,
        role=user.role,
        photo=user.photo,
        verified=user.verified,
        is_bot=user.is_bot,
    )


def send_email_best_effort(email_sender: EmailSenderPort, message: EmailMessage) -> bool:
    try:
        email_sender.send(message)
    except DomainError as exc:
        logger.warning("auth: email_delivery_failed subject=%r error=%s", message.subject, exc)
        return False
    return True
