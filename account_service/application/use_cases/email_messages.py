from __future__ import annotations

from account_service.application.dto.auth import EmailMessage


DEFAULT_LANGUAGE = "en"

VERIFICATION_SUBJECTS = {
    "en": "MYRUONLINE account activation",
    "ru": "MYRUONLINE активация аккаунта",
    "es": "MYRUONLINE activación de cuenta",
    "ke": "MYRUONLINE ანგარიშის გააქტიურება",
}

RESET_PASSWORD_SUBJECTS = {
    "en": "Password reset request (available for 15 minutes)",
    "ru": "Запрос на сброс пароля (доступно 15 мин)",
    "es": "Solicitud de restablecimiento de contraseña (15 min disponibles)",
    "ke": "პაროლის გადატვირთვის მოთხოვნა (ხელმისაწვდომია 15 წთ)",
}

GREETINGS = {
    "en": "Hi",
    "ru": "Здравствуйте",
    "es": "Hola",
    "ke": "გამარჯობა",
}


def resolve_language(language: str | None) -> str:
    if not language:
        return DEFAULT_LANGUAGE
    language = language.strip().lower()
    return language if language in VERIFICATION_SUBJECTS else DEFAULT_LANGUAGE


def display_first_name(name: str) -> str:
    # names are stored "Surname Given"; greet by the given name
    parts = name.split()
    if len(parts) > 1:
        return parts[1]
    return name.strip()


def build_link(client_origin: str, path: str, code: str) -> str:
    return f"https://www.{client_origin}/auth/{path}/{code}"


def verification_email(*, to_email: str, name: str, client_origin: str, code: str, language: str | None) -> EmailMessage:
    lang = resolve_language(language)
    url = build_link(client_origin, "verify", code)
    return EmailMessage(
        to_email=to_email,
        subject=VERIFICATION_SUBJECTS[lang],
        body=f"{GREETINGS[lang]}, {display_first_name(name)}!\n\n{url}\n",
    )


def reset_password_email(*, to_email: str, name: str, client_origin: str, code: str, language: str | None) -> EmailMessage:
    lang = resolve_language(language)
    url = build_link(client_origin, "reset-password", code)
    return EmailMessage(
        to_email=to_email,
        subject=RESET_PASSWORD_SUBJECTS[lang],
        body=f"{GREETINGS[lang]}, {display_first_name(name)}!\n\n{url}\n",
    )
