from __future__ import annotations

import logging

from fastapi import HTTPException

from account_service.domain.exceptions import (
    AuthError,
    ConflictError,
    DomainError,
    NotFoundError,
    NotVerifiedError,
    ValidationError,
)


logger = logging.getLogger(__name__)


def status_code_for(exc: DomainError) -> int:
    if isinstance(exc, NotVerifiedError):
        return 403
    if isinstance(exc, ValidationError):
        return 400
    if isinstance(exc, ConflictError):
        return 409
    if isinstance(exc, AuthError):
        return 401
    if isinstance(exc, NotFoundError):
        return 404
    return 500


def to_http_exception(exc: DomainError) -> HTTPException:
    status_code = status_code_for(exc)
    if status_code >= 500:
        logger.error("api: internal_error type=%s error=%s", type(exc).__name__, exc)
        # internal messages stay in the log
        return HTTPException(status_code=status_code, detail="Internal server error.")
    return HTTPException(status_code=status_code, detail=str(exc))
