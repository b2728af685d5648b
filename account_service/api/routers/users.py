from __future__ import annotations

from fastapi import APIRouter, Depends

from account_service.api.deps import get_current_user, get_get_me_use_case
from account_service.api.errors import to_http_exception
from account_service.api.schemas.users import MeResponse
from account_service.application.use_cases.get_me import GetMeUseCase
from account_service.domain.entities.user import User
from account_service.domain.exceptions import DomainError


router = APIRouter(prefix="/api/users")


@router.get("/me", response_model=MeResponse)
def get_me(
    current_user: User = Depends(get_current_user),
    use_case: GetMeUseCase = Depends(get_get_me_use_case),
):
    try:
        output = use_case.execute(user=current_user)
    except DomainError as exc:
        raise to_http_exception(exc) from exc

    return MeResponse(
        data={
            "id": output.user_id,
            "name": output.name,
            "email": output.email,
            "photo": output.photo,
            "role": output.role,
            "telegramname": output.telegram_name,
            "verified": output.verified,
            "balance": output.balance,
        }
    )
