from __future__ import annotations

from fastapi import APIRouter, Depends, Response

from account_service.api.deps import (
    ACCESS_TOKEN_COOKIE,
    get_check_access_token_use_case,
    get_forgot_password_use_case,
    get_login_user_use_case,
    get_logout_user_use_case,
    get_optional_current_user,
    get_refresh_access_token_use_case,
    get_register_bot_use_case,
    get_register_user_use_case,
    get_reset_password_use_case,
    get_verify_email_use_case,
)
from account_service.api.errors import to_http_exception
from account_service.api.schemas.auth import (
    AccessTokenResponse,
    AuthUserResponse,
    ForgotPasswordRequest,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    RegisterBotResponse,
    RegisterRequest,
    RegisterResponse,
    ResetPasswordRequest,
    TokenDetailsResponse,
)
from account_service.application.dto.auth import (
    AuthUserOutput,
    CheckAccessTokenInput,
    ForgotPasswordInput,
    LoginUserInput,
    LogoutUserInput,
    RefreshAccessTokenInput,
    RegisterUserInput,
    ResetPasswordInput,
    VerifyEmailInput,
)
from account_service.application.use_cases.login_user import LoginUserUseCase
from account_service.application.use_cases.logout_user import LogoutUserUseCase
from account_service.application.use_cases.password_reset import ForgotPasswordUseCase, ResetPasswordUseCase
from account_service.application.use_cases.refresh_access_token import (
    CheckAccessTokenUseCase,
    RefreshAccessTokenUseCase,
)
from account_service.application.use_cases.register_bot import RegisterBotUseCase
from account_service.application.use_cases.register_user import RegisterUserUseCase
from account_service.application.use_cases.verify_email import VerifyEmailUseCase
from account_service.domain.entities.user import User
from account_service.domain.exceptions import DomainError
from account_service.shared.config import get_settings


router = APIRouter(prefix="/api/auth")


def _set_access_cookie(response: Response, access_token: str) -> None:
    settings = get_settings()
    response.set_cookie(
        key=ACCESS_TOKEN_COOKIE,
        value=access_token,
        path="/",
        samesite="lax",
        secure=True,
        httponly=False,
        max_age=settings.access_token_maxage * 60,
        domain=settings.client_origin or None,
    )


def _user_response(user: AuthUserOutput) -> AuthUserResponse:
    return AuthUserResponse(
        id=user.id,
        name=user.name,
        email=user.email,
        role=user.role,
        photo=user.photo,
        verified=user.verified,
        is_bot=user.is_bot,
    )


@router.post("/register", response_model=RegisterResponse, status_code=201)
def register_user(
    req: RegisterRequest,
    language: str | None = None,
    use_case: RegisterUserUseCase = Depends(get_register_user_use_case),
):
    try:
        output = use_case.execute(
            RegisterUserInput(
                name=req.name,
                email=req.email,
                password=req.password,
                password_confirm=req.password_confirm,
                language=language,
            )
        )
    except DomainError as exc:
        raise to_http_exception(exc) from exc

    return RegisterResponse(data={"user": _user_response(output.user)})


@router.post("/register/bot", response_model=RegisterBotResponse, status_code=201)
def register_bot(
    req: RegisterRequest,
    use_case: RegisterBotUseCase = Depends(get_register_bot_use_case),
):
    try:
        output = use_case.execute(
            RegisterUserInput(
                name=req.name,
                email=req.email,
                password=req.password,
                password_confirm=req.password_confirm,
            )
        )
    except DomainError as exc:
        raise to_http_exception(exc) from exc

    return RegisterBotResponse(
        data={
            "user": _user_response(output.user),
            "profile_id": output.profile_id,
            "telegram_token": output.telegram_token,
        }
    )


@router.get("/verifyemail/{code}", response_model=MessageResponse)
def verify_email(
    code: str,
    use_case: VerifyEmailUseCase = Depends(get_verify_email_use_case),
):
    try:
        use_case.execute(VerifyEmailInput(code=code))
    except DomainError as exc:
        raise to_http_exception(exc) from exc
    return MessageResponse(message="Email verified successfully")


@router.post("/login", response_model=LoginResponse)
def login_user(
    req: LoginRequest,
    response: Response,
    use_case: LoginUserUseCase = Depends(get_login_user_use_case),
):
    try:
        output = use_case.execute(
            LoginUserInput(
                email=req.email,
                password=req.password,
                session=req.session,
            )
        )
    except DomainError as exc:
        raise to_http_exception(exc) from exc

    _set_access_cookie(response, output.access_token.token)
    return LoginResponse(
        access_token=output.access_token.token,
        refresh_token=TokenDetailsResponse(
            token=output.refresh_token.token,
            token_uuid=output.refresh_token.token_id,
            user_id=output.refresh_token.subject_id,
            expires_in=output.refresh_token.expires_at,
        ),
    )


@router.get("/logout", response_model=MessageResponse)
def logout_user(
    response: Response,
    current_user: User | None = Depends(get_optional_current_user),
    use_case: LogoutUserUseCase = Depends(get_logout_user_use_case),
):
    try:
        use_case.execute(LogoutUserInput(user_id=current_user.id if current_user else None))
    except DomainError as exc:
        raise to_http_exception(exc) from exc

    response.delete_cookie(key=ACCESS_TOKEN_COOKIE, path="/")
    return MessageResponse()


@router.get("/refresh/{refresh_token}", response_model=AccessTokenResponse)
def refresh_access_token(
    refresh_token: str,
    response: Response,
    use_case: RefreshAccessTokenUseCase = Depends(get_refresh_access_token_use_case),
):
    try:
        output = use_case.execute(RefreshAccessTokenInput(refresh_token=refresh_token))
    except DomainError as exc:
        raise to_http_exception(exc) from exc

    _set_access_cookie(response, output.access_token.token)
    return AccessTokenResponse(access_token=output.access_token.token)


@router.get("/check-token", response_model=MessageResponse)
def check_access_token(
    access_token: str = "",
    use_case: CheckAccessTokenUseCase = Depends(get_check_access_token_use_case),
):
    try:
        use_case.execute(CheckAccessTokenInput(access_token=access_token))
    except DomainError as exc:
        raise to_http_exception(exc) from exc
    return MessageResponse(message="access token is valid")


@router.post("/forgotpassword", response_model=MessageResponse)
def forgot_password(
    req: ForgotPasswordRequest,
    language: str | None = None,
    use_case: ForgotPasswordUseCase = Depends(get_forgot_password_use_case),
):
    try:
        use_case.execute(ForgotPasswordInput(email=req.email, language=language))
    except DomainError as exc:
        raise to_http_exception(exc) from exc
    return MessageResponse(message="You will receive a reset email if user with that email exist")


@router.patch("/resetpassword/{code}", response_model=MessageResponse)
def reset_password(
    code: str,
    req: ResetPasswordRequest,
    response: Response,
    use_case: ResetPasswordUseCase = Depends(get_reset_password_use_case),
):
    try:
        use_case.execute(
            ResetPasswordInput(
                code=code,
                password=req.password,
                password_confirm=req.password_confirm,
            )
        )
    except DomainError as exc:
        raise to_http_exception(exc) from exc

    response.delete_cookie(key=ACCESS_TOKEN_COOKIE, path="/")
    return MessageResponse(message="Password data updated successfully")
